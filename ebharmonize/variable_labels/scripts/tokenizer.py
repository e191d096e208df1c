#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Split normalized labels into keyword sets.

Steps, in order: split on the separator, drop purely numeric tokens, remove
English stopwords (minus a protected set), resolve two-letter country codes to
joined country names, then apply whole-token expansions. Country codes and
expansion keys that are not English words (``de``, ``ie``, ``un``) are taken
out of the stopword list so they survive to be resolved. ``at``, ``be`` and
``it`` stay stopwords; protect them to read them as countries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from ...io_utils import read_table
from ...records import clean_text
from ..constants import (
    AMBIGUOUS_COUNTRY_CODES,
    COUNTRY_CODE_STOPWORDS,
    DEFAULT_PROTECTED_STOPWORDS,
    EU_COUNTRY_CODES,
    JOINER,
    SEPARATOR,
    TOKEN_EXPANSIONS,
)

_NUMERIC_RX = re.compile(r"^\d+$")


@dataclass(frozen=True)
class TokenizedLabel:
    tokens: frozenset
    ambiguous: frozenset = frozenset()


def country_token(name: str) -> str:
    """'United Kingdom' -> 'united-kingdom'."""
    return JOINER.join(name.lower().split())


def split_pattern(separator: str = SEPARATOR) -> re.Pattern:
    return re.compile(rf"(?:{re.escape(separator)}|\s)+")


def stopword_set(
    protected: Iterable[str] = DEFAULT_PROTECTED_STOPWORDS,
    reserved: Iterable[str] = (),
) -> frozenset:
    """English stopwords minus ``protected`` words and ``reserved`` code tokens."""
    return frozenset(ENGLISH_STOP_WORDS) - frozenset(protected) - frozenset(reserved)


def load_country_codes(path: Path) -> Dict[str, str]:
    """Read a ``code,name`` table that replaces the built-in EU code list."""
    table = read_table(path, required=("code", "name"))
    codes: Dict[str, str] = {}
    for row in table.to_dict("records"):
        code = clean_text(row.get("code"))
        name = clean_text(row.get("name"))
        if code and name:
            codes[code.lower()] = name
    if not codes:
        raise ValueError(f"{Path(path).name} holds no country codes")
    return codes


def tokenize_label(
    label: object,
    protected_stopwords: Iterable[str] = DEFAULT_PROTECTED_STOPWORDS,
    *,
    country_codes: Optional[Mapping[str, str]] = None,
    expansions: Optional[Mapping[str, str]] = None,
    ambiguous_codes: Optional[Iterable[str]] = None,
    separator: str = SEPARATOR,
) -> TokenizedLabel:
    """Tokenize ``label`` and report which country codes were ambiguous."""
    if not isinstance(label, str) or not label:
        return TokenizedLabel(frozenset())
    codes = EU_COUNTRY_CODES if country_codes is None else country_codes
    expand = TOKEN_EXPANSIONS if expansions is None else expansions
    ambiguous_pool = set(AMBIGUOUS_COUNTRY_CODES if ambiguous_codes is None else ambiguous_codes)
    reserved = (set(codes) | set(expand)) - COUNTRY_CODE_STOPWORDS
    stopwords = stopword_set(protected_stopwords, reserved)

    tokens = set()
    ambiguous = set()
    for raw in split_pattern(separator).split(label.lower()):
        if not raw or _NUMERIC_RX.match(raw) or raw in stopwords:
            continue
        token = raw
        if token in codes:
            if token in ambiguous_pool:
                ambiguous.add(token)
            token = country_token(codes[token])
        elif token in expand:
            token = expand[token]
        tokens.add(token)
    return TokenizedLabel(frozenset(tokens), frozenset(ambiguous))


def tokenize(
    label: object,
    protected_stopwords: Iterable[str] = DEFAULT_PROTECTED_STOPWORDS,
    **kwargs,
) -> frozenset:
    """Return the keyword set of ``label``."""
    return tokenize_label(label, protected_stopwords, **kwargs).tokens


__all__ = [
    "TokenizedLabel",
    "country_token",
    "load_country_codes",
    "split_pattern",
    "stopword_set",
    "tokenize",
    "tokenize_label",
]
