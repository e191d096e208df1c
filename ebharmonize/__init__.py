#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Cross-wave harmonization of Eurobarometer variable labels and value scales."""

from .base import (
    BasePipeline,
    PipelineContext,
    PipelineOptions,
    PipelinePreparedInputs,
    PipelineResult,
    PipelineRunParams,
)
from .registry import PIPELINE_REGISTRY, get_pipeline, list_pipelines
from .utils import slugify_pipeline_code

__all__ = [
    "BasePipeline",
    "PipelineContext",
    "PipelineOptions",
    "PipelinePreparedInputs",
    "PipelineResult",
    "PipelineRunParams",
    "PIPELINE_REGISTRY",
    "get_pipeline",
    "list_pipelines",
    "slugify_pipeline_code",
]
