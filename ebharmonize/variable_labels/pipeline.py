#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Pipeline implementation for pipeline_code == 'VariableLabels'."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from ..base import (
    BasePipeline,
    PipelineContext,
    PipelineOptions,
    PipelinePreparedInputs,
    PipelineResult,
    PipelineRunParams,
    TimingHook,
)
from ..io_utils import read_table, write_csv_and_parquet, write_output_tables
from ..records import REQUIRED_COLUMNS, prepare_records
from ..registry import register_pipeline
from ..value_scales.scripts.classify import classify_value_scales, load_value_dictionary
from .constants import PIPELINE_CODE
from .scripts.config import StandardizationConfig
from .scripts.rules import load_rules
from .scripts.standardize import StandardizationResult, standardize_prepared
from .scripts.tokenizer import load_country_codes

logger = logging.getLogger(__name__)

PREPARED_RECORDS_NAME = "variable_records_prepared.csv"


def resolve_config(options: PipelineOptions) -> StandardizationConfig:
    config = options.extra.get("config")
    if config is None:
        return StandardizationConfig()
    if not isinstance(config, StandardizationConfig):
        raise ValueError(f"PipelineOptions.extra['config'] must be a StandardizationConfig, got {type(config).__name__}")
    return config


@register_pipeline
class VariableLabelsPipeline(BasePipeline):
    """Cross-wave standardized variable labels, grouped by concept."""

    pipeline_code = PIPELINE_CODE
    display_name = "Variable Labels"
    description = "Rebuilds comparable variable labels from corpus keyword frequencies per group."

    def prepare_inputs(
        self,
        context: PipelineContext,
        params: PipelineRunParams,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> PipelinePreparedInputs:
        spinner = self._spinner(options)

        def _prepare() -> PipelinePreparedInputs:
            metadata = read_table(params.metadata_path, required=REQUIRED_COLUMNS)
            lookup = read_table(params.group_lookup_path) if params.group_lookup_path else None
            records, exclusions = prepare_records(metadata, lookup)
            prepared_csv = context.inputs_dir / PREPARED_RECORDS_NAME
            write_csv_and_parquet(records, prepared_csv)
            return PipelinePreparedInputs(
                records=records,
                exclusions=exclusions,
                params=params,
                artifacts={"prepared_records": prepared_csv},
            )

        return self._run_stage_with_result(spinner, "Prepare variable records", _prepare, timing_hook)

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
        config = resolve_config(options)
        rules = load_rules(params.label_dictionary_path)
        codes_path = options.extra.get("country_codes_path")
        country_codes = load_country_codes(Path(codes_path)) if codes_path else None

        result: StandardizationResult = self._run_stage_with_result(
            spinner,
            "Standardize variable labels",
            lambda: standardize_prepared(
                prepared.records,
                rules,
                config=config,
                exclusions=prepared.exclusions,
                country_codes=country_codes,
            ),
            timing_hook,
        )
        tables: Dict[str, pd.DataFrame] = result.tables()

        if not options.flag("skip_value_scales"):
            dictionary = load_value_dictionary(params.value_dictionary_path)
            scales = self._run_stage_with_result(
                spinner,
                "Classify value scales",
                lambda: classify_value_scales(prepared.records, dictionary),
                timing_hook,
            )
            tables["labels"] = tables["labels"].merge(scales, on="variable_id", how="left")

        written = self._run_stage_with_result(
            spinner,
            "Write outputs",
            lambda: write_output_tables(
                tables,
                params.out_csv,
                primary="labels",
                skip_excel=options.skip_excel,
            ),
            timing_hook,
        )
        return PipelineResult(
            output_csv=Path(params.out_csv),
            prepared=prepared,
            tables=tables,
            extras=dict(written),
        )

    def post_run(
        self,
        context: PipelineContext,
        result: PipelineResult,
        options: PipelineOptions,
        *,
        timing_hook: Optional[TimingHook] = None,
    ) -> None:
        labels = result.tables.get("labels")
        exclusions = result.tables.get("exclusions")
        if labels is None or exclusions is None:
            return
        logger.info(
            "%s standardized labels in %s groups; %s distinct labels",
            len(labels),
            labels["group_tag"].nunique(),
            labels["var_label_std"].nunique(),
        )
        if not exclusions.empty:
            for reason, count in exclusions["reason"].value_counts().sort_index().items():
                logger.info("  excluded %-24s %s", reason, count)
        ambiguous = int(labels["ambiguous_tokens"].notna().sum())
        if ambiguous:
            logger.warning("%s labels carry ambiguous country-code tokens", ambiguous)


__all__ = ["VariableLabelsPipeline", "resolve_config"]
