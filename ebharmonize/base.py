#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Common dataclasses and base class used by the harmonization pipelines."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

import pandas as pd

TimingHook = Callable[[str, float], None]
Spinner = Callable[[str, Callable[[], None]], float]


@dataclass(frozen=True)
class PipelineRunParams:
    """File-level inputs supplied to a pipeline invocation."""

    metadata_path: Path
    group_lookup_path: Optional[Path] = None
    label_dictionary_path: Optional[Path] = None
    value_dictionary_path: Optional[Path] = None
    out_csv: Path = Path("var_labels_std.csv")


@dataclass(frozen=True)
class PipelineContext:
    """Resolved project paths that pipelines can rely on."""

    project_root: Path
    inputs_dir: Path
    outputs_dir: Path


@dataclass
class PipelineOptions:
    """Optional switches controlling pipeline behaviour."""

    skip_excel: bool = False
    extra: Dict[str, object] = field(default_factory=dict)

    def flag(self, key: str, default: bool = False) -> bool:
        """Helper to fetch boolean extras with a default."""
        value = self.extra.get(key, default)
        return bool(value)


@dataclass
class PipelinePreparedInputs:
    """Validated in-memory tables emitted by a pipeline's preparation stage."""

    records: pd.DataFrame
    exclusions: pd.DataFrame
    params: PipelineRunParams
    artifacts: Dict[str, Path] = field(default_factory=dict)


@dataclass
class PipelineResult:
    """Unified return object for the pipelines."""

    output_csv: Path
    prepared: PipelinePreparedInputs
    tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    extras: Dict[str, Path] = field(default_factory=dict)


class BasePipeline:
    """Abstract pipeline contract that concrete implementations must follow."""

    pipeline_code: str = ""
    display_name: str = ""
    description: str = ""

    def pre_run(
        self,
        context: PipelineContext,
        params: PipelineRunParams,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> Mapping[str, Path]:
        """Optional hook executed before preparation. Return any artifacts that should be tracked."""
        return {}

    def prepare_inputs(
        self,
        context: PipelineContext,
        params: PipelineRunParams,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> PipelinePreparedInputs:
        """Load and validate the metadata table and any lookups."""
        raise NotImplementedError

    def match(
        self,
        context: PipelineContext,
        prepared: PipelinePreparedInputs,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> PipelineResult:
        """Execute the core stage given prepared records and write the output tables."""
        raise NotImplementedError

    def post_run(
        self,
        context: PipelineContext,
        result: PipelineResult,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> None:
        """Optional hook executed after matching to report on outputs."""

    def run(
        self,
        context: PipelineContext,
        params: PipelineRunParams,
        options: Optional[PipelineOptions] = None,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> PipelineResult:
        """End-to-end orchestration that mirrors prepare + match, including optional hooks."""
        opts = options or PipelineOptions()
        artifacts: Dict[str, Path] = {}
        artifacts.update(self.pre_run(context, params, opts, timing_hook=timing_hook))
        prepared = self.prepare_inputs(context, params, opts, timing_hook=timing_hook)
        prepared.artifacts.update(artifacts)
        result = self.match(context, prepared, opts, timing_hook=timing_hook)
        self.post_run(context, result, opts, timing_hook=timing_hook)
        return result

    # ----------------------------
    # Stage helpers
    # ----------------------------
    @staticmethod
    def _spinner(options: PipelineOptions) -> Optional[Spinner]:
        spinner = options.extra.get("spinner")
        if callable(spinner):
            return spinner
        return None

    @staticmethod
    def _run_stage(
        spinner: Optional[Spinner],
        label: str,
        func: Callable[[], None],
        timing_hook: Optional[TimingHook] = None,
    ) -> float:
        if spinner:
            elapsed = spinner(label, func)
        else:
            t0 = time.perf_counter()
            func()
            elapsed = time.perf_counter() - t0
        if timing_hook:
            timing_hook(label, elapsed)
        return elapsed

    @classmethod
    def _run_stage_with_result(
        cls,
        spinner: Optional[Spinner],
        label: str,
        func: Callable[[], object],
        timing_hook: Optional[TimingHook] = None,
    ) -> object:
        result: Dict[str, object] = {}

        def _wrapper() -> None:
            result["value"] = func()

        cls._run_stage(spinner, label, _wrapper, timing_hook)
        return result.get("value")


__all__ = [
    "BasePipeline",
    "PipelineContext",
    "PipelineOptions",
    "PipelinePreparedInputs",
    "PipelineResult",
    "PipelineRunParams",
    "Spinner",
    "TimingHook",
]
