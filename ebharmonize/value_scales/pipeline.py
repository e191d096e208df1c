#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Pipeline implementation for pipeline_code == 'ValueScales'."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..base import (
    BasePipeline,
    PipelineContext,
    PipelineOptions,
    PipelinePreparedInputs,
    PipelineResult,
    PipelineRunParams,
    TimingHook,
)
from ..io_utils import read_table, write_output_tables
from ..records import REQUIRED_COLUMNS, validate_records
from ..registry import register_pipeline
from .constants import PIPELINE_CODE, UNRESOLVED
from .scripts.classify import classify_value_scales, load_value_dictionary

logger = logging.getLogger(__name__)


@register_pipeline
class ValueScalesPipeline(BasePipeline):
    """Response-scale archetype per variable from its value-range text."""

    pipeline_code = PIPELINE_CODE
    display_name = "Value Scales"
    description = "Classifies value-range text into canonical response-scale tags."

    def prepare_inputs(
        self,
        context: PipelineContext,
        params: PipelineRunParams,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> PipelinePreparedInputs:
        def _prepare() -> PipelinePreparedInputs:
            metadata = read_table(params.metadata_path, required=REQUIRED_COLUMNS)
            records, exclusions = validate_records(metadata)
            return PipelinePreparedInputs(records=records, exclusions=exclusions, params=params)

        return self._run_stage_with_result(self._spinner(options), "Prepare variable records", _prepare, timing_hook)

    def match(
        self,
        context: PipelineContext,
        prepared: PipelinePreparedInputs,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> PipelineResult:
        spinner = self._spinner(options)
        params = prepared.params
        dictionary = load_value_dictionary(params.value_dictionary_path)
        scales = self._run_stage_with_result(
            spinner,
            "Classify value scales",
            lambda: classify_value_scales(prepared.records, dictionary),
            timing_hook,
        )
        audit = dictionary.audit(prepared.records["value_range_text"])
        tables = {"value_scales": scales, "dictionary_audit": audit, "exclusions": prepared.exclusions}
        written = write_output_tables(tables, params.out_csv, primary="value_scales", skip_excel=options.skip_excel)
        return PipelineResult(output_csv=Path(params.out_csv), prepared=prepared, tables=tables, extras=dict(written))

    def post_run(
        self,
        context: PipelineContext,
        result: PipelineResult,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> None:
        scales = result.tables["value_scales"]
        counts = scales["values_type"].fillna("<no value text>").value_counts()
        for tag, count in counts.items():
            logger.info("  %-28s %s", tag, count)
        if UNRESOLVED in counts.index:
            logger.info("Unresolved scales are listed with values_type=%r in %s", UNRESOLVED, result.output_csv)
