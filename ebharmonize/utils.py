#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Utility helpers shared across pipeline runner entry points."""

from __future__ import annotations

import re


def slugify_pipeline_code(pipeline_code: str) -> str:
    """Convert a pipeline code like 'VariableLabels' into a slug ('variable_labels')."""
    if not pipeline_code:
        raise ValueError("pipeline_code must be a non-empty string.")
    slug = re.sub(r"(?<!^)(?=[A-Z])", "_", pipeline_code).lower()
    return slug


__all__ = ["slugify_pipeline_code"]
