#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared constants for the VariableLabels pipeline."""

from __future__ import annotations

from pathlib import Path

from ..utils import slugify_pipeline_code

PIPELINE_CODE: str = "VariableLabels"
PIPELINE_SLUG: str = slugify_pipeline_code(PIPELINE_CODE)
PROJECT_ROOT: Path = Path(__file__).resolve().parents[2]
PIPELINE_INPUTS_DIR: Path = PROJECT_ROOT / "inputs" / PIPELINE_SLUG
PIPELINE_OUTPUTS_DIR: Path = PROJECT_ROOT / "outputs" / PIPELINE_SLUG
DATA_DIR: Path = Path(__file__).resolve().parents[1] / "data"
DEFAULT_LABEL_DICTIONARY: Path = DATA_DIR / "label_dictionary.csv"
DEFAULT_OUTPUT_NAME: str = "var_labels_std.csv"

# Token separator and the joiner that keeps multi-word concepts in one token.
SEPARATOR: str = "_"
JOINER: str = "-"

DEFAULT_MIN_WAVE_SUPPORT: int = 5
DEFAULT_PINNED_LAST_KEYWORDS: frozenset[str] = frozenset({"cat"})
# scikit-learn stopwords that name survey topics, plus the scale words.
DEFAULT_PROTECTED_STOPWORDS: frozenset[str] = frozenset(
    {
        "amount",
        "back",
        "bill",
        "call",
        "detail",
        "find",
        "fire",
        "full",
        "interest",
        "move",
        "other",
        "part",
        "right",
        "serious",
        "side",
        "system",
        "working",
    }
)

# EU (plus former member) two-letter codes as used in Eurobarometer labels.
EU_COUNTRY_CODES: dict[str, str] = {
    "at": "Austria",
    "be": "Belgium",
    "bg": "Bulgaria",
    "cy": "Cyprus",
    "cz": "Czech Republic",
    "de": "Germany",
    "dk": "Denmark",
    "ee": "Estonia",
    "es": "Spain",
    "fi": "Finland",
    "fr": "France",
    "gb": "United Kingdom",
    "gr": "Greece",
    "hr": "Croatia",
    "hu": "Hungary",
    "ie": "Ireland",
    "it": "Italy",
    "lt": "Lithuania",
    "lu": "Luxembourg",
    "lv": "Latvia",
    "mt": "Malta",
    "nl": "Netherlands",
    "pl": "Poland",
    "pt": "Portugal",
    "ro": "Romania",
    "se": "Sweden",
    "si": "Slovenia",
    "sk": "Slovakia",
}

# Codes that also have a non-country reading in labels. When such a code
# reaches country resolution it still resolves and is reported as ambiguous.
AMBIGUOUS_COUNTRY_CODES: dict[str, str] = {
    "dk": "don't know",
    "it": "pronoun",
    "be": "verb",
    "at": "preposition",
}

# Codes that are English function words first. They stay in the stopword list
# and only resolve to a country when protected.
COUNTRY_CODE_STOPWORDS: frozenset[str] = frozenset({"at", "be", "it"})

# Whole-token expansions applied after stopword removal.
TOKEN_EXPANSIONS: dict[str, str] = {
    "ep": "european-parliament",
    "un": "united-nations",
}

__all__ = [
    "AMBIGUOUS_COUNTRY_CODES",
    "COUNTRY_CODE_STOPWORDS",
    "DATA_DIR",
    "DEFAULT_LABEL_DICTIONARY",
    "DEFAULT_MIN_WAVE_SUPPORT",
    "DEFAULT_OUTPUT_NAME",
    "DEFAULT_PINNED_LAST_KEYWORDS",
    "DEFAULT_PROTECTED_STOPWORDS",
    "EU_COUNTRY_CODES",
    "JOINER",
    "PIPELINE_CODE",
    "PIPELINE_INPUTS_DIR",
    "PIPELINE_OUTPUTS_DIR",
    "PIPELINE_SLUG",
    "PROJECT_ROOT",
    "SEPARATOR",
    "TOKEN_EXPANSIONS",
]
