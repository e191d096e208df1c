#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Value Scales pipeline implementation."""

from .pipeline import ValueScalesPipeline

__all__ = ["ValueScalesPipeline"]
