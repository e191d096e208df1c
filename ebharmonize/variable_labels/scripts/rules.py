#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Ordered rewrite rules that bring normalized labels to a common vocabulary.

A label first loses its question-number prefix, then passes through the rule
table top to bottom: abbreviation expansion, entity joining (multi-word
concepts become one ``-`` joined token) and synonym harmonization. Each rule
sees the output of the previous one, so order in the table is significant.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from ...io_utils import read_table
from ...records import clean_text
from ..constants import DEFAULT_LABEL_DICTIONARY

logger = logging.getLogger(__name__)

RULE_COLUMNS: Tuple[str, ...] = ("pattern", "replacement")
STAGE_ORDER: Tuple[str, ...] = ("abbreviation", "entity", "synonym")
AUDIT_COLUMNS: List[str] = [
    "rule_index",
    "stage",
    "pattern",
    "replacement",
    "hits",
    "substitutions",
]

_QUESTION_STEM = r"(?:q[a-z]{0,2}|d|c|p|sd|v)\d+[a-z]?"

# Tried in order; only the first matching shape is stripped.
PREFIX_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^eb\d+(?:_\d+)?_"),  # wave code: eb52_, eb52_1_
    re.compile(rf"^{_QUESTION_STEM}(?:_\d+[a-z]?)+_"),  # multi-level: qa12_3_
    re.compile(rf"^{_QUESTION_STEM}_"),  # single: d1_, qa12a_, c10_
    re.compile(r"^\d+[a-z]?_"),  # bare item number: 12_
)


@dataclass(frozen=True)
class NormalizationRule:
    """One regex rewrite; ``replacement`` may use backreferences."""

    pattern: str
    replacement: str
    stage: str = ""
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.pattern)
            compiled.sub(self.replacement, "")
        except re.error as exc:
            raise ValueError(f"Invalid rule {self.pattern!r} -> {self.replacement!r}: {exc}") from exc
        object.__setattr__(self, "regex", compiled)

    def apply(self, label: str) -> Tuple[str, int]:
        return self.regex.subn(self.replacement, label)


def strip_question_prefix(label: str) -> str:
    for rx in PREFIX_PATTERNS:
        stripped, count = rx.subn("", label, count=1)
        if count:
            return stripped
    return label


def apply_rules(label: str, rules: Sequence[NormalizationRule]) -> str:
    for rule in rules:
        label = rule.regex.sub(rule.replacement, label)
    return label


def normalize(label: object, rules: Sequence[NormalizationRule], *, strip_prefix: bool = True) -> str:
    """Strip the question prefix and replay ``rules`` in order.

    Non-text input normalizes to an empty string. The result is deterministic
    for a given label and rule sequence.
    """
    if not isinstance(label, str) or not label:
        return ""
    text = strip_question_prefix(label) if strip_prefix else label
    return apply_rules(text, rules)


def rules_from_pairs(pairs: Iterable[Tuple[str, ...]]) -> Tuple[NormalizationRule, ...]:
    """Build rules from ``(pattern, replacement[, stage])`` tuples."""
    return tuple(NormalizationRule(*pair) for pair in pairs)


def rules_from_frame(table: pd.DataFrame, *, source: str = "rule table") -> Tuple[NormalizationRule, ...]:
    missing = [col for col in RULE_COLUMNS if col not in table.columns]
    if missing:
        raise ValueError(f"{source} is missing required columns: {missing}")

    rules: List[NormalizationRule] = []
    for idx, row in enumerate(table.to_dict("records"), start=1):
        pattern = clean_text(row.get("pattern"))
        if pattern is None:
            raise ValueError(f"{source} row {idx}: empty pattern")
        replacement = clean_text(row.get("replacement")) or ""
        stage = (clean_text(row.get("stage")) or "").lower()
        try:
            rules.append(NormalizationRule(pattern, replacement, stage))
        except ValueError as exc:
            raise ValueError(f"{source} row {idx}: {exc}") from exc
    check_stage_order(rules)
    return tuple(rules)


def load_rules(path: Optional[Path] = None) -> Tuple[NormalizationRule, ...]:
    """Load the rule table (defaults to the bundled dictionary)."""
    path = Path(path) if path is not None else DEFAULT_LABEL_DICTIONARY
    table = read_table(path, required=RULE_COLUMNS)
    rules = rules_from_frame(table, source=path.name)
    logger.info("Loaded %s label rules from %s", len(rules), path)
    return rules


def check_stage_order(rules: Sequence[NormalizationRule]) -> bool:
    """Warn when a rule's stage comes before the stage of an earlier rule."""
    highest = -1
    ordered = True
    for idx, rule in enumerate(rules, start=1):
        if rule.stage not in STAGE_ORDER:
            continue
        position = STAGE_ORDER.index(rule.stage)
        if position < highest:
            logger.warning(
                "Rule %s (%s stage) follows a %s rule: %r",
                idx,
                rule.stage,
                STAGE_ORDER[highest],
                rule.pattern,
            )
            ordered = False
        highest = max(highest, position)
    return ordered


def audit_rules(
    labels: Iterable[object],
    rules: Sequence[NormalizationRule],
    *,
    strip_prefix: bool = True,
) -> pd.DataFrame:
    """Replay ``rules`` over ``labels`` and count how often each one fires.

    Rules with ``hits == 0`` are unmatched dictionary entries.
    """
    hits = [0] * len(rules)
    substitutions = [0] * len(rules)
    for label in labels:
        if not isinstance(label, str) or not label:
            continue
        text = strip_question_prefix(label) if strip_prefix else label
        for idx, rule in enumerate(rules):
            text, count = rule.apply(text)
            if count:
                hits[idx] += 1
                substitutions[idx] += count

    frame = pd.DataFrame(
        {
            "rule_index": list(range(1, len(rules) + 1)),
            "stage": [rule.stage for rule in rules],
            "pattern": [rule.pattern for rule in rules],
            "replacement": [rule.replacement for rule in rules],
            "hits": hits,
            "substitutions": substitutions,
        },
        columns=AUDIT_COLUMNS,
    )
    unmatched = int((frame["hits"] == 0).sum())
    if unmatched:
        logger.warning("%s of %s label rules never fired", unmatched, len(rules))
    return frame


def unmatched_rules(audit: pd.DataFrame) -> pd.DataFrame:
    return audit.loc[audit["hits"] == 0].reset_index(drop=True)


__all__ = [
    "AUDIT_COLUMNS",
    "NormalizationRule",
    "PREFIX_PATTERNS",
    "RULE_COLUMNS",
    "STAGE_ORDER",
    "apply_rules",
    "audit_rules",
    "check_stage_order",
    "load_rules",
    "normalize",
    "rules_from_frame",
    "rules_from_pairs",
    "strip_question_prefix",
    "unmatched_rules",
]
