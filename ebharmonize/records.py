#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Variable-record validation shared by the label and value-scale pipelines.

Every (wave, variable) row of the metadata table becomes one record keyed by
``variable_id``. Rows that cannot be processed are not errors: they are moved
to an exclusions table with a named reason so each dropped record stays
attributable.
"""

from __future__ import annotations

import logging
import math
import re
import unicodedata
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

RECORD_COLUMNS: Tuple[str, ...] = (
    "wave_id",
    "variable_name",
    "raw_label",
    "normalized_label",
    "group_tag",
    "value_range_text",
)
REQUIRED_COLUMNS: Tuple[str, ...] = ("wave_id", "variable_name")
LABEL_COLUMNS: Tuple[str, ...] = ("raw_label", "normalized_label")
PREPARED_COLUMNS: List[str] = ["variable_id", *RECORD_COLUMNS]
EXCLUSION_COLUMNS: List[str] = [
    "variable_id",
    "wave_id",
    "variable_name",
    "group_tag",
    "reason",
    "detail",
]
GROUP_LOOKUP_COLUMNS: Tuple[str, ...] = ("wave_id", "normalized_label", "group_tag")

# Exclusion reasons
REASON_MALFORMED = "malformed_record"
REASON_DUPLICATE = "duplicate_variable_id"
REASON_STRUCTURAL = "structural_variable"
REASON_MISSING_GROUP = "missing_group_tag"
REASON_NO_KEYWORDS = "no_keywords"
REASON_INSUFFICIENT_SUPPORT = "insufficient_support"

EXCLUSION_REASONS: Tuple[str, ...] = (
    REASON_MALFORMED,
    REASON_DUPLICATE,
    REASON_STRUCTURAL,
    REASON_MISSING_GROUP,
    REASON_NO_KEYWORDS,
    REASON_INSUFFICIENT_SUPPORT,
)

# Bookkeeping variables that carry no survey content: respondent ids, weights,
# region/NUTS codes and archive fields.
STRUCTURAL_PATTERNS: Tuple[str, ...] = (
    r"(?<![^_])(?:respondent_|unique_|case_)?(?:id|identifier|serial(?:_number)?|caseid|uniqid)(?![^_])",
    r"(?<![^_])(?:weight(?:ing)?|wght|wex|w\d{1,3})(?![^_])",
    r"(?<![^_])(?:region|regions|nuts(?:_?[0-3])?|isocntry)(?![^_])",
    r"(?<![^_])(?:doi|version|edition|study_number|archive_number|za_number)(?![^_])",
)

_PAREN_RX = re.compile(r"\([^)]*\)")


def clean_text(value: object) -> Optional[str]:
    """Strip a cell to text, mapping None/NaN/NA/blank to None."""
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def make_variable_id(wave_id: str, variable_name: str) -> str:
    return f"{wave_id}_{variable_name}"


def normalize_raw_label(text: object) -> str:
    """Lower-case, strip accents and underscore-join a raw label."""
    if not isinstance(text, str):
        return ""
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))
    text = re.sub(r"[^a-z0-9]+", "_", text.lower())
    return text.strip("_")


def clean_group_tag(tag: object) -> Optional[str]:
    """Drop parenthetical annotations from a group name; case is preserved."""
    text = clean_text(tag)
    if text is None:
        return None
    text = _PAREN_RX.sub(" ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text or None


def exclusion_row(
    variable_id: Optional[str],
    wave_id: Optional[str],
    variable_name: Optional[str],
    group_tag: Optional[str],
    reason: str,
    detail: str = "",
) -> dict:
    if reason not in EXCLUSION_REASONS:
        raise ValueError(f"Unknown exclusion reason: {reason!r}")
    return {
        "variable_id": variable_id,
        "wave_id": wave_id,
        "variable_name": variable_name,
        "group_tag": group_tag,
        "reason": reason,
        "detail": detail,
    }


def exclusion_frame(rows: Iterable[Mapping[str, object]] = ()) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=EXCLUSION_COLUMNS)


def exclude_records(records: pd.DataFrame, reason: str, details: Sequence[str] | str = "") -> pd.DataFrame:
    """Turn prepared record rows into exclusion rows sharing one reason."""
    if isinstance(details, str):
        details = [details] * len(records)
    rows = [
        exclusion_row(
            row["variable_id"],
            row["wave_id"],
            row["variable_name"],
            clean_text(row.get("group_tag")),
            reason,
            detail,
        )
        for row, detail in zip(records.to_dict("records"), details)
    ]
    return exclusion_frame(rows)


def validate_records(frame: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split a raw metadata table into prepared records and exclusions.

    A row is malformed when it lacks a wave id, a variable name, or any label.
    When only ``raw_label`` is present the label is derived with
    :func:`normalize_raw_label`. Later duplicates of a ``variable_id`` are
    excluded; the first occurrence is kept.
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"Metadata table is missing required columns: {missing}")
    if not any(col in frame.columns for col in LABEL_COLUMNS):
        raise ValueError(f"Metadata table needs at least one of {list(LABEL_COLUMNS)}")

    kept: List[dict] = []
    excluded: List[dict] = []
    seen: set[str] = set()
    for row in frame.to_dict("records"):
        values = {col: clean_text(row.get(col)) for col in RECORD_COLUMNS}
        values["group_tag"] = clean_group_tag(values["group_tag"])
        if values["normalized_label"] is None and values["raw_label"] is not None:
            values["normalized_label"] = normalize_raw_label(values["raw_label"]) or None

        wave_id = values["wave_id"]
        variable_name = values["variable_name"]
        variable_id = make_variable_id(wave_id, variable_name) if wave_id and variable_name else None

        absent = [
            name
            for name, value in (
                ("wave_id", wave_id),
                ("variable_name", variable_name),
                ("label", values["normalized_label"]),
            )
            if value is None
        ]
        if absent:
            excluded.append(
                exclusion_row(
                    variable_id,
                    wave_id,
                    variable_name,
                    values["group_tag"],
                    REASON_MALFORMED,
                    "missing " + ", ".join(absent),
                )
            )
            continue
        if variable_id in seen:
            excluded.append(
                exclusion_row(
                    variable_id,
                    wave_id,
                    variable_name,
                    values["group_tag"],
                    REASON_DUPLICATE,
                    "first occurrence kept",
                )
            )
            continue
        seen.add(variable_id)
        kept.append({"variable_id": variable_id, **values})

    records = pd.DataFrame(kept, columns=PREPARED_COLUMNS)
    exclusions = exclusion_frame(excluded)
    if not exclusions.empty:
        logger.warning(
            "Excluded %s of %s metadata rows (%s)",
            len(exclusions),
            len(frame),
            exclusions["reason"].value_counts().to_dict(),
        )
    return records, exclusions


def assign_group_tags(records: pd.DataFrame, lookup: Optional[pd.DataFrame]) -> pd.DataFrame:
    """Fill missing group tags from a ``(wave_id, normalized_label) -> group_tag`` table.

    Tags already present on a record are kept.
    """
    out = records.copy()
    if lookup is None or lookup.empty:
        return out
    missing = [col for col in GROUP_LOOKUP_COLUMNS if col not in lookup.columns]
    if missing:
        raise ValueError(f"Group lookup is missing required columns: {missing}")

    mapping: dict[Tuple[str, str], str] = {}
    for row in lookup.to_dict("records"):
        wave_id = clean_text(row.get("wave_id"))
        label = clean_text(row.get("normalized_label"))
        tag = clean_group_tag(row.get("group_tag"))
        if wave_id and label and tag:
            mapping.setdefault((wave_id, label), tag)

    tags = []
    for wave_id, label, current in zip(out["wave_id"], out["normalized_label"], out["group_tag"]):
        current = clean_text(current)
        tags.append(current if current is not None else mapping.get((wave_id, label)))
    out["group_tag"] = pd.Series(tags, index=out.index, dtype=object)
    logger.info(
        "Group tags assigned for %s of %s records",
        sum(tag is not None for tag in tags),
        len(tags),
    )
    return out


def prepare_records(
    frame: pd.DataFrame,
    group_lookup: Optional[pd.DataFrame] = None,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Validate the metadata table and attach group tags."""
    records, exclusions = validate_records(frame)
    return assign_group_tags(records, group_lookup), exclusions


def flag_structural_variables(
    records: pd.DataFrame,
    patterns: Sequence[str] = STRUCTURAL_PATTERNS,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Separate ID/weight/region bookkeeping variables from survey content."""
    compiled = [re.compile(pattern) for pattern in patterns]
    structural: List[bool] = []
    details: List[str] = []
    for label in records["normalized_label"]:
        hit = None
        for rx in compiled:
            hit = rx.search(str(label))
            if hit:
                break
        structural.append(hit is not None)
        if hit is not None:
            details.append(f"label token {hit.group(0)!r}")

    mask = pd.Series(structural, index=records.index, dtype=bool)
    exclusions = exclude_records(records.loc[mask], REASON_STRUCTURAL, details)
    if not exclusions.empty:
        logger.info("Filtered %s structural variables", len(exclusions))
    return records.loc[~mask].copy(), exclusions


__all__ = [
    "EXCLUSION_COLUMNS",
    "EXCLUSION_REASONS",
    "GROUP_LOOKUP_COLUMNS",
    "PREPARED_COLUMNS",
    "RECORD_COLUMNS",
    "REASON_DUPLICATE",
    "REASON_INSUFFICIENT_SUPPORT",
    "REASON_MALFORMED",
    "REASON_MISSING_GROUP",
    "REASON_NO_KEYWORDS",
    "REASON_STRUCTURAL",
    "STRUCTURAL_PATTERNS",
    "assign_group_tags",
    "clean_group_tag",
    "clean_text",
    "exclude_records",
    "exclusion_frame",
    "exclusion_row",
    "flag_structural_variables",
    "make_variable_id",
    "normalize_raw_label",
    "prepare_records",
    "validate_records",
]
