#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
End-to-end variable-label standardization over in-memory tables.

validate -> group lookup -> structural filter -> rule normalization ->
grouped tokenize/filter/rank/synthesize -> rule audit. Nothing here touches
the filesystem; the pipeline class handles loading and writing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence

import pandas as pd

from ...records import EXCLUSION_COLUMNS, flag_structural_variables, prepare_records
from .config import StandardizationConfig
from .grouping import RULE_LABEL_COLUMN, run_grouped
from .rules import NormalizationRule, audit_rules, normalize

logger = logging.getLogger(__name__)


@dataclass
class StandardizationResult:
    labels: pd.DataFrame
    exclusions: pd.DataFrame
    keyword_stats: pd.DataFrame
    rule_audit: pd.DataFrame

    def tables(self) -> Dict[str, pd.DataFrame]:
        """Output tables keyed by the suffix used for their files."""
        return {
            "labels": self.labels,
            "exclusions": self.exclusions,
            "keyword_stats": self.keyword_stats,
            "rule_audit": self.rule_audit,
        }


def standardize_prepared(
    records: pd.DataFrame,
    rules: Sequence[NormalizationRule],
    *,
    config: Optional[StandardizationConfig] = None,
    exclusions: Optional[pd.DataFrame] = None,
    country_codes: Optional[Mapping[str, str]] = None,
) -> StandardizationResult:
    """Standardize records that already passed :func:`prepare_records`."""
    config = config or StandardizationConfig()
    content, structural = flag_structural_variables(records, config.structural_patterns)

    content = content.copy()
    content[RULE_LABEL_COLUMN] = [normalize(label, rules) for label in content["normalized_label"]]
    grouped = run_grouped(content, config, country_codes=country_codes)
    audit = audit_rules(content["normalized_label"], rules)

    parts = [frame for frame in (exclusions, structural, grouped.exclusions) if frame is not None and not frame.empty]
    all_exclusions = (
        pd.concat(parts, ignore_index=True)[EXCLUSION_COLUMNS] if parts else pd.DataFrame(columns=EXCLUSION_COLUMNS)
    )
    logger.info(
        "Standardized %s of %s records; %s excluded",
        len(grouped.labels),
        len(records) + (0 if exclusions is None else len(exclusions)),
        len(all_exclusions),
    )
    return StandardizationResult(
        labels=grouped.labels,
        exclusions=all_exclusions,
        keyword_stats=grouped.keyword_stats,
        rule_audit=audit,
    )


def standardize_variable_labels(
    metadata: pd.DataFrame,
    rules: Sequence[NormalizationRule],
    *,
    config: Optional[StandardizationConfig] = None,
    group_lookup: Optional[pd.DataFrame] = None,
    country_codes: Optional[Mapping[str, str]] = None,
) -> StandardizationResult:
    """Standardize a raw metadata table.

    Every input row ends up either in ``labels`` or, with a reason, in
    ``exclusions``.
    """
    records, exclusions = prepare_records(metadata, group_lookup)
    return standardize_prepared(
        records,
        rules,
        config=config,
        exclusions=exclusions,
        country_codes=country_codes,
    )


__all__ = ["StandardizationResult", "standardize_prepared", "standardize_variable_labels"]
