#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Map value-range text to a canonical response-scale tag.

Fragments from the value dictionary are loaded into an Aho-Corasick automaton
and scanned against the normalized category text. Only whole-word hits count;
the longest wins, then the earliest, then the one listed first. A "not
mentioned" category outranks every dictionary hit.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import ahocorasick  # type: ignore
import pandas as pd

from ...io_utils import read_table
from ...records import clean_text
from ..constants import DEFAULT_VALUE_DICTIONARY, MENTIONED_NOT_MENTIONED, UNRESOLVED, VALUE_SCALE_TAGS

logger = logging.getLogger(__name__)

DICTIONARY_COLUMNS: Tuple[str, ...] = ("pattern", "replacement")
VALUE_SCALE_COLUMNS: List[str] = ["variable_id", "values_type"]

NOT_MENTIONED_RX = re.compile(r"\bnot mentioned\b")
_PUNCT_RX = re.compile(r"[^\w\s]|_")
_SPACE_RX = re.compile(r"\s+")


def normalize_value_text(text: object) -> str:
    """Lower-case, fold punctuation to spaces and collapse whitespace."""
    cleaned = clean_text(text)
    if cleaned is None:
        return ""
    return _SPACE_RX.sub(" ", _PUNCT_RX.sub(" ", cleaned.lower())).strip()


@dataclass(frozen=True)
class ValueScaleHit:
    start: int
    end: int
    index: int
    pattern: str
    tag: str

    @property
    def length(self) -> int:
        return self.end - self.start


class ValueScaleDictionary:
    """Ordered ``fragment -> tag`` table backed by an Aho-Corasick automaton."""

    def __init__(self, entries: Iterable[Tuple[str, str]]):
        self.entries: List[Tuple[str, str]] = []
        self._automaton = ahocorasick.Automaton()
        for raw_pattern, tag in entries:
            pattern = normalize_value_text(raw_pattern)
            if not pattern:
                raise ValueError(f"Empty value-dictionary fragment: {raw_pattern!r}")
            if tag not in VALUE_SCALE_TAGS:
                raise ValueError(f"Unknown value-scale tag {tag!r} for fragment {raw_pattern!r}")
            if self._automaton.exists(pattern):
                logger.debug("Duplicate value-dictionary fragment %r ignored", pattern)
                continue
            self._automaton.add_word(pattern, (len(self.entries), pattern, tag))
            self.entries.append((pattern, tag))
        if self.entries:
            self._automaton.make_automaton()

    def __len__(self) -> int:
        return len(self.entries)

    def matches(self, text: str) -> List[ValueScaleHit]:
        """Whole-word hits of every fragment in already-normalized ``text``."""
        if not self.entries or not text:
            return []
        hits: List[ValueScaleHit] = []
        for end_index, (index, pattern, tag) in self._automaton.iter(text):
            start = end_index - len(pattern) + 1
            end = end_index + 1
            if start > 0 and text[start - 1] != " ":
                continue
            if end < len(text) and text[end] != " ":
                continue
            hits.append(ValueScaleHit(start, end, index, pattern, tag))
        return hits

    def lookup(self, text: str) -> Optional[str]:
        hits = self.matches(text)
        if not hits:
            return None
        best = min(hits, key=lambda hit: (-hit.length, hit.start, hit.index))
        return best.tag

    def audit(self, texts: Iterable[object]) -> pd.DataFrame:
        """Count, per fragment, the texts it matched at least once."""
        counts = [0] * len(self.entries)
        for text in texts:
            seen = {hit.index for hit in self.matches(normalize_value_text(text))}
            for index in seen:
                counts[index] += 1
        frame = pd.DataFrame(
            {
                "pattern": [pattern for pattern, _ in self.entries],
                "replacement": [tag for _, tag in self.entries],
                "hits": counts,
            }
        )
        unmatched = int((frame["hits"] == 0).sum())
        if unmatched:
            logger.warning("%s of %s value-dictionary fragments never matched", unmatched, len(self.entries))
        return frame


def load_value_dictionary(path: Optional[Path] = None) -> ValueScaleDictionary:
    path = Path(path) if path is not None else DEFAULT_VALUE_DICTIONARY
    table = read_table(path, required=DICTIONARY_COLUMNS)
    entries = []
    for idx, row in enumerate(table.to_dict("records"), start=1):
        pattern = clean_text(row.get("pattern"))
        tag = clean_text(row.get("replacement"))
        if pattern is None or tag is None:
            raise ValueError(f"{path.name} row {idx}: pattern and replacement are required")
        entries.append((pattern, tag))
    try:
        dictionary = ValueScaleDictionary(entries)
    except ValueError as exc:
        raise ValueError(f"{path.name}: {exc}") from exc
    logger.info("Loaded %s value-dictionary fragments from %s", len(dictionary), path)
    return dictionary


def classify(value_range_text: object, dictionary: ValueScaleDictionary) -> Optional[str]:
    """Return the scale tag, ``"unresolved"``, or None when there is no text."""
    text = normalize_value_text(value_range_text)
    if not text:
        return None
    if NOT_MENTIONED_RX.search(text):
        return MENTIONED_NOT_MENTIONED
    return dictionary.lookup(text) or UNRESOLVED


def classify_value_scales(records: pd.DataFrame, dictionary: ValueScaleDictionary) -> pd.DataFrame:
    """One ``(variable_id, values_type)`` row per record."""
    texts: Sequence[object] = (
        records["value_range_text"].tolist() if "value_range_text" in records.columns else [None] * len(records)
    )
    values = [classify(text, dictionary) for text in texts]
    out = pd.DataFrame({"variable_id": records["variable_id"].tolist(), "values_type": values}, columns=VALUE_SCALE_COLUMNS)
    unresolved = sum(value == UNRESOLVED for value in values)
    if unresolved:
        logger.warning("%s of %s value scales unresolved", unresolved, len(values))
    return out


__all__ = [
    "NOT_MENTIONED_RX",
    "VALUE_SCALE_COLUMNS",
    "ValueScaleDictionary",
    "ValueScaleHit",
    "classify",
    "classify_value_scales",
    "load_value_dictionary",
    "normalize_value_text",
]
