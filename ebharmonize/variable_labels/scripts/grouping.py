#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Group-partitioned label standardization.

Keyword statistics only make sense among variables that measure the same
concept, so records are split by ``group_tag`` and each partition is
tokenized, filtered, ranked and synthesized on its own. A partition that ends
up empty contributes no rows and never stops the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from ...records import (
    REASON_INSUFFICIENT_SUPPORT,
    REASON_MISSING_GROUP,
    REASON_NO_KEYWORDS,
    clean_text,
    exclude_records,
    exclusion_frame,
    exclusion_row,
)
from .concurrency import maybe_parallel_map
from .config import StandardizationConfig
from .matrix import build_matrix, token_frame
from .ranking import STATS_SCHEMA, keyword_order, rank_keywords
from .synthesis import synthesize
from .tokenizer import TokenizedLabel, tokenize_label

logger = logging.getLogger(__name__)

# Column holding the rule-normalized label that partitions tokenize.
RULE_LABEL_COLUMN = "rule_label"

LABEL_OUTPUT_COLUMNS: List[str] = [
    "variable_id",
    "wave_id",
    "variable_name",
    "group_tag",
    "var_label_std",
    "ambiguous_tokens",
]
KEYWORD_STATS_COLUMNS: List[str] = ["group_tag", *STATS_SCHEMA]


@dataclass
class PartitionResult:
    group_tag: str
    labels: pd.DataFrame
    exclusions: pd.DataFrame
    keyword_stats: pd.DataFrame


@dataclass
class GroupedResult:
    labels: pd.DataFrame
    exclusions: pd.DataFrame
    keyword_stats: pd.DataFrame


def standardize_partition(
    item: Tuple[str, pd.DataFrame],
    *,
    config: StandardizationConfig,
    country_codes: Optional[Mapping[str, str]] = None,
) -> PartitionResult:
    """Tokenize, filter, rank and synthesize the labels of one group."""
    group_tag, partition = item
    rows = {row["variable_id"]: row for row in partition.to_dict("records")}

    tokenized: Dict[str, TokenizedLabel] = {}
    excluded: List[dict] = []
    for variable_id, row in rows.items():
        result = tokenize_label(
            row[RULE_LABEL_COLUMN],
            config.protected_stopwords,
            country_codes=country_codes,
            separator=config.separator,
        )
        if result.tokens:
            tokenized[variable_id] = result
        else:
            excluded.append(
                exclusion_row(
                    variable_id,
                    row["wave_id"],
                    row["variable_name"],
                    group_tag,
                    REASON_NO_KEYWORDS,
                    f"label {row[RULE_LABEL_COLUMN]!r} has no keywords",
                )
            )

    tokens = token_frame(
        (variable_id, rows[variable_id]["wave_id"], result.tokens) for variable_id, result in tokenized.items()
    )
    matrix = build_matrix(tokens, config.min_wave_support)
    for dropped in matrix.dropped.to_dicts():
        row = rows[dropped["variable_id"]]
        excluded.append(
            exclusion_row(
                dropped["variable_id"],
                row["wave_id"],
                row["variable_name"],
                group_tag,
                REASON_INSUFFICIENT_SUPPORT,
                f"keywords below {config.min_wave_support} waves: {dropped['dropped_keywords']}",
            )
        )

    stats = rank_keywords(matrix.presence, config.pinned_last_keywords)
    labels = synthesize(matrix, keyword_order(stats), config.separator)

    label_rows = []
    for variable_id in sorted(labels):
        row = rows[variable_id]
        ambiguous = tokenized[variable_id].ambiguous
        label_rows.append(
            {
                "variable_id": variable_id,
                "wave_id": row["wave_id"],
                "variable_name": row["variable_name"],
                "group_tag": group_tag,
                "var_label_std": labels[variable_id],
                "ambiguous_tokens": ",".join(sorted(ambiguous)) if ambiguous else None,
            }
        )
    if not label_rows:
        logger.info("Group %r produced no standardized labels (%s records)", group_tag, len(rows))

    stats_frame = pd.DataFrame(stats.to_dict(as_series=False), columns=list(STATS_SCHEMA))
    stats_frame.insert(0, "group_tag", group_tag)
    return PartitionResult(
        group_tag=group_tag,
        labels=pd.DataFrame(label_rows, columns=LABEL_OUTPUT_COLUMNS),
        exclusions=exclusion_frame(excluded),
        keyword_stats=stats_frame,
    )


def _concat(frames: List[pd.DataFrame], columns: List[str]) -> pd.DataFrame:
    frames = [frame for frame in frames if not frame.empty]
    if not frames:
        return pd.DataFrame(columns=columns)
    return pd.concat(frames, ignore_index=True)[columns]


def run_grouped(
    records: pd.DataFrame,
    config: Optional[StandardizationConfig] = None,
    *,
    country_codes: Optional[Mapping[str, str]] = None,
) -> GroupedResult:
    """Standardize ``records`` partition by partition.

    ``records`` needs ``variable_id``, ``wave_id``, ``variable_name``,
    ``group_tag`` and the rule-normalized ``rule_label`` column. Records
    without a group tag are excluded; the rest are processed in sorted group
    order and the labels come back sorted by (group_tag, variable_id).
    """
    config = config or StandardizationConfig()
    tags = records["group_tag"].map(clean_text)
    missing = tags.isna()

    missing_group = exclude_records(records.loc[missing], REASON_MISSING_GROUP, "no group tag after lookup")
    if not missing_group.empty:
        logger.warning("%s records have no group tag", len(missing_group))

    grouped = records.loc[~missing].copy()
    grouped["group_tag"] = tags.loc[~missing]
    partitions = [(tag, frame) for tag, frame in grouped.groupby("group_tag", sort=True)]
    logger.info("Standardizing %s records across %s groups", len(grouped), len(partitions))

    results = maybe_parallel_map(
        partitions,
        partial(standardize_partition, config=config, country_codes=country_codes),
        max_workers=config.max_workers,
        show_progress=config.show_progress,
        desc="Groups",
    )

    labels = _concat([result.labels for result in results], LABEL_OUTPUT_COLUMNS)
    labels = labels.sort_values(["group_tag", "variable_id"], kind="stable").reset_index(drop=True)
    exclusions = _concat([missing_group, *(result.exclusions for result in results)], list(exclusion_frame().columns))
    keyword_stats = _concat([result.keyword_stats for result in results], KEYWORD_STATS_COLUMNS)
    return GroupedResult(labels=labels, exclusions=exclusions, keyword_stats=keyword_stats)


__all__ = [
    "GroupedResult",
    "KEYWORD_STATS_COLUMNS",
    "LABEL_OUTPUT_COLUMNS",
    "PartitionResult",
    "RULE_LABEL_COLUMN",
    "run_grouped",
    "standardize_partition",
]
