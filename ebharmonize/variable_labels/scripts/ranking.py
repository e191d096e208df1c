#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Corpus-frequency keyword ordering."""

from __future__ import annotations

from typing import Iterable, List

import polars as pl

from ..constants import DEFAULT_PINNED_LAST_KEYWORDS

STATS_SCHEMA = {
    "rank": pl.Int64,
    "keyword": pl.String,
    "support_count": pl.Int64,
    "wave_count": pl.Int64,
    "missing_fraction": pl.Float64,
    "pinned_last": pl.Boolean,
}


def rank_keywords(
    presence: pl.DataFrame,
    pinned_last: Iterable[str] = DEFAULT_PINNED_LAST_KEYWORDS,
) -> pl.DataFrame:
    """Rank the keywords of ``presence`` from most to least common.

    ``support_count`` is the number of distinct variables carrying the
    keyword and ``missing_fraction`` the share of variables that lack it.
    Ordering is (pinned_last, missing_fraction, keyword); rank starts at 1.
    """
    n_variables = presence["variable_id"].n_unique() if presence.height else 0
    if n_variables == 0:
        return pl.DataFrame(schema=STATS_SCHEMA)

    pinned = sorted(set(pinned_last))
    stats = (
        presence.group_by("keyword")
        .agg(
            pl.col("variable_id").n_unique().cast(pl.Int64).alias("support_count"),
            pl.col("wave_id").n_unique().cast(pl.Int64).alias("wave_count"),
        )
        .with_columns(
            (1.0 - pl.col("support_count") / n_variables).alias("missing_fraction"),
            (pl.col("keyword").is_in(pinned) if pinned else pl.lit(False)).alias("pinned_last"),
        )
        .sort(["pinned_last", "missing_fraction", "keyword"])
        .with_columns(pl.int_range(1, pl.len() + 1, dtype=pl.Int64).alias("rank"))
    )
    return stats.select(list(STATS_SCHEMA))


def keyword_order(stats: pl.DataFrame) -> List[str]:
    if stats.height == 0:
        return []
    return stats.sort("rank")["keyword"].to_list()


__all__ = ["STATS_SCHEMA", "keyword_order", "rank_keywords"]
