#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sparse variable x keyword presence matrix with a cross-wave support filter.

Presence is kept as a long polars frame of ``(variable_id, wave_id, keyword)``
rows. Support is the number of distinct waves a keyword appears in within the
frame handed in (one group partition). A variable owning any keyword below the
threshold is dropped whole, so no partial label survives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import pandas as pd
import polars as pl

TOKEN_SCHEMA = {"variable_id": pl.String, "wave_id": pl.String, "keyword": pl.String}
SUPPORT_SCHEMA = {"keyword": pl.String, "wave_support": pl.Int64}
DROPPED_SCHEMA = {"variable_id": pl.String, "wave_id": pl.String, "dropped_keywords": pl.String}


def token_frame(rows: Iterable[Tuple[str, str, Iterable[str]]]) -> pl.DataFrame:
    """Explode ``(variable_id, wave_id, keywords)`` triples into token rows."""
    variable_ids: List[str] = []
    wave_ids: List[str] = []
    keywords: List[str] = []
    for variable_id, wave_id, tokens in rows:
        for keyword in sorted(set(tokens)):
            variable_ids.append(variable_id)
            wave_ids.append(wave_id)
            keywords.append(keyword)
    return pl.DataFrame(
        {"variable_id": variable_ids, "wave_id": wave_ids, "keyword": keywords},
        schema=TOKEN_SCHEMA,
    )


def keyword_wave_support(tokens: pl.DataFrame) -> pl.DataFrame:
    if tokens.height == 0:
        return pl.DataFrame(schema=SUPPORT_SCHEMA)
    return (
        tokens.group_by("keyword")
        .agg(pl.col("wave_id").n_unique().cast(pl.Int64).alias("wave_support"))
        .sort("keyword")
    )


@dataclass
class KeywordMatrix:
    presence: pl.DataFrame
    keyword_support: pl.DataFrame
    dropped: pl.DataFrame
    min_wave_support: int

    @property
    def keywords(self) -> List[str]:
        if self.presence.height == 0:
            return []
        return sorted(self.presence["keyword"].unique().to_list())

    @property
    def variable_ids(self) -> List[str]:
        if self.presence.height == 0:
            return []
        return sorted(self.presence["variable_id"].unique().to_list())

    def to_dense(self, order: Sequence[str]) -> pd.DataFrame:
        """Materialize a ``variable_id`` x keyword frame in ``order``.

        Cells hold the keyword where present and NaN where absent.
        """
        order = list(order)
        unknown = sorted(set(self.keywords) - set(order))
        if unknown:
            raise ValueError(f"Column order is missing keywords: {unknown}")
        if self.presence.height == 0:
            return pd.DataFrame(columns=order, index=pd.Index([], name="variable_id"))

        long = pd.DataFrame(self.presence.select(["variable_id", "keyword"]).to_dict(as_series=False))
        long["cell"] = long["keyword"]
        dense = long.pivot(index="variable_id", columns="keyword", values="cell")
        dense = dense.reindex(columns=order)
        dense.columns.name = None
        return dense


def build_matrix(tokens: pl.DataFrame, min_wave_support: int) -> KeywordMatrix:
    """Filter ``tokens`` to keywords seen in at least ``min_wave_support`` waves."""
    if isinstance(min_wave_support, bool) or not isinstance(min_wave_support, int) or min_wave_support < 1:
        raise ValueError(f"min_wave_support must be an integer >= 1, got {min_wave_support!r}")

    support = keyword_wave_support(tokens)
    weak = support.filter(pl.col("wave_support") < min_wave_support).select("keyword")
    if weak.height == 0:
        return KeywordMatrix(tokens, support, pl.DataFrame(schema=DROPPED_SCHEMA), min_wave_support)

    weak_tokens = tokens.join(weak, on="keyword", how="semi")
    dropped = (
        weak_tokens.group_by("variable_id")
        .agg(
            pl.col("wave_id").first(),
            pl.col("keyword").sort().alias("dropped_keywords"),
        )
        .with_columns(pl.col("dropped_keywords").list.join(","))
        .sort("variable_id")
        .select(list(DROPPED_SCHEMA))
    )
    presence = tokens.join(dropped.select("variable_id"), on="variable_id", how="anti")
    return KeywordMatrix(presence, support, dropped, min_wave_support)


__all__ = [
    "DROPPED_SCHEMA",
    "KeywordMatrix",
    "SUPPORT_SCHEMA",
    "TOKEN_SCHEMA",
    "build_matrix",
    "keyword_wave_support",
    "token_frame",
]
