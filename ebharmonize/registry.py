#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Lookup table from pipeline code ("VariableLabels", "ValueScales") to the
harmonization pipeline class that runs it.

Pipeline modules decorate their class with ``register_pipeline``; the imports
at the bottom of this module make both built-in pipelines available as soon
as ``ebharmonize`` is imported.
"""

from __future__ import annotations

from typing import Dict, Iterable, Type

from .base import BasePipeline


PIPELINE_REGISTRY: Dict[str, Type[BasePipeline]] = {}


def register_pipeline(cls: Type[BasePipeline]) -> Type[BasePipeline]:
    """Class decorator: file ``cls`` under its ``pipeline_code``."""
    code = getattr(cls, "pipeline_code", None)
    if not code:
        raise ValueError(f"{cls.__name__} has no pipeline_code to register under")
    PIPELINE_REGISTRY[code] = cls
    return cls


def get_pipeline(pipeline_code: str) -> BasePipeline:
    """Return a fresh pipeline for ``pipeline_code``; KeyError when unknown."""
    try:
        cls = PIPELINE_REGISTRY[pipeline_code]
    except KeyError as exc:
        known = ", ".join(sorted(PIPELINE_REGISTRY)) or "none"
        raise KeyError(f"Unknown pipeline {pipeline_code!r} (registered: {known})") from exc
    return cls()


def list_pipelines() -> Iterable[BasePipeline]:
    for cls in PIPELINE_REGISTRY.values():
        yield cls()


# Registration side effect: each module applies @register_pipeline on import.
from .variable_labels.pipeline import VariableLabelsPipeline  # noqa: E402,F401
from .value_scales.pipeline import ValueScalesPipeline  # noqa: E402,F401


__all__ = ["PIPELINE_REGISTRY", "get_pipeline", "list_pipelines", "register_pipeline"]
