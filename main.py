#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
main.py: pipeline loader around the Eurobarometer harmonization workflows.

Exports:
- run_all(metadata, groups, outdir, out_csv, pipeline_code) -> out_csv
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from ebharmonize import (
    PipelineContext,
    PipelineOptions,
    PipelineRunParams,
    get_pipeline,
    slugify_pipeline_code,
)
from ebharmonize.base import TimingHook
from ebharmonize.spinner import run_with_spinner
from ebharmonize.value_scales.constants import DEFAULT_OUTPUT_NAME as VALUE_SCALES_OUTPUT
from ebharmonize.variable_labels.constants import DEFAULT_OUTPUT_NAME as VARIABLE_LABELS_OUTPUT
from ebharmonize.variable_labels.constants import PIPELINE_CODE as VARIABLE_LABELS_CODE
from ebharmonize.variable_labels.scripts.config import StandardizationConfig

logger = logging.getLogger("ebharmonize")

DEFAULT_OUTPUTS: Dict[str, str] = {
    VARIABLE_LABELS_CODE: VARIABLE_LABELS_OUTPUT,
    "ValueScales": VALUE_SCALES_OUTPUT,
}


def _resolve_path(
    path: str | os.PathLike[str] | None,
    *,
    base_dir: Path,
    fallback_dir: Optional[Path] = None,
) -> Optional[Path]:
    if path is None:
        return None

    candidate = Path(path)
    search_paths: list[Path] = []

    if candidate.is_absolute():
        search_paths.append(candidate)
    else:
        search_paths.append(Path.cwd() / candidate)
        search_paths.append(base_dir / candidate)
        if fallback_dir is not None:
            search_paths.append(fallback_dir / candidate)

    for option in search_paths:
        if option.exists():
            return option.resolve()

    # Fall back to the first search path; the pipeline reports the missing file.
    return search_paths[0].resolve()


def run_all(
    metadata: str | os.PathLike[str],
    groups: str | os.PathLike[str] | None = None,
    outdir: str | os.PathLike[str] | None = None,
    out_csv: str | os.PathLike[str] | None = None,
    *,
    pipeline_code: str = VARIABLE_LABELS_CODE,
    label_dictionary: str | os.PathLike[str] | None = None,
    value_dictionary: str | os.PathLike[str] | None = None,
    country_codes: str | os.PathLike[str] | None = None,
    config: Optional[StandardizationConfig] = None,
    skip_excel: bool = False,
    skip_value_scales: bool = False,
    spinner: bool = False,
    project_root: str | os.PathLike[str] | None = None,
    timing_hook: Optional[TimingHook] = None,
) -> str:
    """Execute the registered pipeline for the requested pipeline code."""
    root = Path(project_root).resolve() if project_root is not None else Path(__file__).resolve().parent
    slug = slugify_pipeline_code(pipeline_code)
    inputs_dir = (root / "inputs" / slug).resolve()
    inputs_dir.mkdir(parents=True, exist_ok=True)

    if outdir is None:
        output_dir = (root / "outputs" / slug).resolve()
    else:
        output_dir = Path(outdir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    pipeline = get_pipeline(pipeline_code)
    fallback_inputs = root / "inputs"
    out_name = Path(out_csv).name if out_csv is not None else DEFAULT_OUTPUTS.get(pipeline_code, f"{slug}.csv")

    params = PipelineRunParams(
        metadata_path=_resolve_path(metadata, base_dir=inputs_dir, fallback_dir=fallback_inputs),
        group_lookup_path=_resolve_path(groups, base_dir=inputs_dir, fallback_dir=fallback_inputs),
        label_dictionary_path=_resolve_path(label_dictionary, base_dir=inputs_dir, fallback_dir=fallback_inputs),
        value_dictionary_path=_resolve_path(value_dictionary, base_dir=inputs_dir, fallback_dir=fallback_inputs),
        out_csv=output_dir / out_name,
    )
    context = PipelineContext(
        project_root=root,
        inputs_dir=inputs_dir,
        outputs_dir=output_dir,
    )
    extra: Dict[str, object] = {"config": config or StandardizationConfig()}
    if skip_value_scales:
        extra["skip_value_scales"] = True
    if country_codes is not None:
        extra["country_codes_path"] = _resolve_path(country_codes, base_dir=inputs_dir, fallback_dir=fallback_inputs)
    if spinner:
        extra["spinner"] = run_with_spinner
    options = PipelineOptions(skip_excel=skip_excel, extra=extra)
    result = pipeline.run(context, params, options, timing_hook=timing_hook)
    return str(result.output_csv)


def _cli() -> None:
    """Parse CLI arguments and run the requested pipeline."""
    parser = argparse.ArgumentParser(description="Eurobarometer variable-label and value-scale harmonizer")
    parser.add_argument("--metadata", required=True, help="Variable metadata table (csv/tsv/xlsx/parquet)")
    parser.add_argument("--groups", required=False, help="Group lookup: wave_id, normalized_label, group_tag")
    parser.add_argument("--label-dictionary", required=False, help="Ordered label rules (default: bundled)")
    parser.add_argument("--value-dictionary", required=False, help="Value-scale fragments (default: bundled)")
    parser.add_argument("--country-codes", required=False, help="code,name table replacing the EU code list")
    parser.add_argument("--outdir", required=False)
    parser.add_argument("--out", required=False, default=None)
    parser.add_argument(
        "--pipeline",
        required=False,
        default=VARIABLE_LABELS_CODE,
        choices=sorted(DEFAULT_OUTPUTS),
        help="Registered pipeline to run",
    )
    parser.add_argument("--min-wave-support", type=int, default=StandardizationConfig().min_wave_support)
    parser.add_argument(
        "--pinned-last",
        action="append",
        default=None,
        help="Keyword always ordered last (repeatable; default: cat)",
    )
    parser.add_argument(
        "--protected-stopword",
        action="append",
        default=None,
        help="Stopword to keep as a keyword (repeatable; replaces the default topical set)",
    )
    parser.add_argument("--max-workers", type=int, default=None, help="Process pool size for group partitions")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar over groups")
    parser.add_argument("--skip-excel", action="store_true", help="Skip XLSX export")
    parser.add_argument("--skip-value-scales", action="store_true", help="Do not join value-scale tags")
    parser.add_argument("--no-spinner", action="store_true", help="Disable the console spinner")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(message)s")

    defaults = StandardizationConfig()
    try:
        config = StandardizationConfig(
            min_wave_support=args.min_wave_support,
            pinned_last_keywords=args.pinned_last if args.pinned_last is not None else defaults.pinned_last_keywords,
            protected_stopwords=(
                args.protected_stopword if args.protected_stopword is not None else defaults.protected_stopwords
            ),
            max_workers=args.max_workers,
            show_progress=args.progress,
        )
    except ValueError as exc:
        parser.error(str(exc))

    timings: List[tuple[str, float]] = []
    out = run_all(
        args.metadata,
        args.groups,
        args.outdir,
        args.out,
        pipeline_code=args.pipeline,
        label_dictionary=args.label_dictionary,
        value_dictionary=args.value_dictionary,
        country_codes=args.country_codes,
        config=config,
        skip_excel=args.skip_excel,
        skip_value_scales=args.skip_value_scales,
        spinner=not args.no_spinner,
        timing_hook=lambda label, elapsed: timings.append((label, elapsed)),
    )

    total = sum(elapsed for _, elapsed in timings)
    logger.info("Stage timings:")
    for label, elapsed in timings:
        logger.info("  %-32s %8.2fs", label, elapsed)
    logger.info("  %-32s %8.2fs", "Total", total)
    logger.info("Output: %s", out)


if __name__ == "__main__":
    _cli()
