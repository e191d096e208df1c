#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Variable Labels pipeline implementation."""

from .pipeline import VariableLabelsPipeline

__all__ = ["VariableLabelsPipeline"]
