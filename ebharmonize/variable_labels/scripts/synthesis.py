#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Rebuild one standardized label per variable from the ranked matrix."""

from __future__ import annotations

import re
from typing import Dict, Sequence

from ..constants import SEPARATOR
from .matrix import KeywordMatrix


def collapse_and_trim(label: object, sep: str = SEPARATOR) -> str:
    """Collapse runs of ``sep`` and trim it from both ends."""
    if not isinstance(label, str):
        return ""
    esc = re.escape(sep)
    collapsed = re.sub(f"(?:{esc})+", lambda _: sep, label)
    return re.sub(f"^{esc}|{esc}$", "", collapsed)


def synthesize(matrix: KeywordMatrix, order: Sequence[str], sep: str = SEPARATOR) -> Dict[str, str]:
    """Join each variable's keywords in ``order``.

    Absent cells contribute empty strings, which ``collapse_and_trim`` folds
    away, so the label is the ordered keyword list joined by ``sep``.
    """
    dense = matrix.to_dense(order)
    if dense.empty:
        return {}
    joined = dense.fillna("").astype(str).apply(sep.join, axis=1)
    return {variable_id: collapse_and_trim(label, sep) for variable_id, label in joined.items()}


__all__ = ["collapse_and_trim", "synthesize"]
