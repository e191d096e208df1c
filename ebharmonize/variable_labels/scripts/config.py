#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tunable knobs for variable-label standardization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from ...records import STRUCTURAL_PATTERNS
from ..constants import (
    DEFAULT_MIN_WAVE_SUPPORT,
    DEFAULT_PINNED_LAST_KEYWORDS,
    DEFAULT_PROTECTED_STOPWORDS,
    SEPARATOR,
)


@dataclass(frozen=True)
class StandardizationConfig:
    """Parameters shared by every group partition of one run.

    ``min_wave_support`` is the number of distinct waves a keyword must reach
    inside its group to survive. ``pinned_last_keywords`` always sort after
    the others; ``protected_stopwords`` are kept even though the English
    stopword list would remove them.
    """

    min_wave_support: int = DEFAULT_MIN_WAVE_SUPPORT
    pinned_last_keywords: frozenset = field(default_factory=lambda: DEFAULT_PINNED_LAST_KEYWORDS)
    protected_stopwords: frozenset = field(default_factory=lambda: DEFAULT_PROTECTED_STOPWORDS)
    structural_patterns: Tuple[str, ...] = STRUCTURAL_PATTERNS
    separator: str = SEPARATOR
    max_workers: Optional[int] = None
    show_progress: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.min_wave_support, bool) or not isinstance(self.min_wave_support, int):
            raise ValueError(f"min_wave_support must be an integer, got {self.min_wave_support!r}")
        if self.min_wave_support < 1:
            raise ValueError(f"min_wave_support must be >= 1, got {self.min_wave_support}")
        if not self.separator:
            raise ValueError("separator must be a non-empty string")
        object.__setattr__(self, "pinned_last_keywords", _lower_set(self.pinned_last_keywords))
        object.__setattr__(self, "protected_stopwords", _lower_set(self.protected_stopwords))
        object.__setattr__(self, "structural_patterns", tuple(self.structural_patterns))


def _lower_set(values: Iterable[str]) -> frozenset:
    if isinstance(values, str):
        values = [values]
    return frozenset(str(v).strip().lower() for v in values if str(v).strip())


__all__ = ["StandardizationConfig"]
