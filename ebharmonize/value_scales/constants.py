#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Shared constants for the ValueScales pipeline."""

from __future__ import annotations

from pathlib import Path

from ..utils import slugify_pipeline_code

PIPELINE_CODE: str = "ValueScales"
PIPELINE_SLUG: str = slugify_pipeline_code(PIPELINE_CODE)
PROJECT_ROOT: Path = Path(__file__).resolve().parents[2]
PIPELINE_INPUTS_DIR: Path = PROJECT_ROOT / "inputs" / PIPELINE_SLUG
PIPELINE_OUTPUTS_DIR: Path = PROJECT_ROOT / "outputs" / PIPELINE_SLUG
DATA_DIR: Path = Path(__file__).resolve().parents[1] / "data"
DEFAULT_VALUE_DICTIONARY: Path = DATA_DIR / "value_dictionary.csv"
DEFAULT_OUTPUT_NAME: str = "value_scales.csv"

# Canonical response-scale archetypes
MENTIONED_NOT_MENTIONED: str = "mentioned/not mentioned"
TRUST_NO_TRUST: str = "trust/no trust"
NATIONAL_EU: str = "national government/eu"
YES_NO: str = "yes/no"
POS_NEG_NEUTRAL: str = "positive/negative/neutral"
POS_NEUTRAL_NEG: str = "positive/neutral/negative"
FOUR_POINT: str = "4-point ordinal"
UNRESOLVED: str = "unresolved"

VALUE_SCALE_TAGS: tuple[str, ...] = (
    MENTIONED_NOT_MENTIONED,
    TRUST_NO_TRUST,
    NATIONAL_EU,
    YES_NO,
    POS_NEG_NEUTRAL,
    POS_NEUTRAL_NEG,
    FOUR_POINT,
)

__all__ = [
    "DATA_DIR",
    "DEFAULT_OUTPUT_NAME",
    "DEFAULT_VALUE_DICTIONARY",
    "FOUR_POINT",
    "MENTIONED_NOT_MENTIONED",
    "NATIONAL_EU",
    "PIPELINE_CODE",
    "PIPELINE_INPUTS_DIR",
    "PIPELINE_OUTPUTS_DIR",
    "PIPELINE_SLUG",
    "POS_NEG_NEUTRAL",
    "POS_NEUTRAL_NEG",
    "PROJECT_ROOT",
    "TRUST_NO_TRUST",
    "UNRESOLVED",
    "VALUE_SCALE_TAGS",
    "YES_NO",
]
