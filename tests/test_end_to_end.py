#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""End-to-end runs of the standardization core and the registered pipelines."""

from __future__ import annotations

import pandas as pd
import pytest
from openpyxl import load_workbook

import main
from ebharmonize import get_pipeline, list_pipelines
from ebharmonize.io_utils import read_table
from ebharmonize.records import REASON_INSUFFICIENT_SUPPORT, REASON_STRUCTURAL
from ebharmonize.variable_labels.scripts.config import StandardizationConfig
from ebharmonize.variable_labels.scripts.rules import rules_from_pairs
from ebharmonize.variable_labels.scripts.standardize import standardize_variable_labels

WAVES = ["eb50", "eb51", "eb52", "eb53", "eb54"]


def _metadata() -> pd.DataFrame:
    rows = []
    for idx, wave in enumerate(WAVES):
        rows.append([wave, "d1", "d1_left_right_scale", "Left 1 2 3 ... 10 Right"])
        rows.append([wave, "d2", "d2_scale", None])
        rows.append([wave, "q9", "q9_trust_media", "Tend to trust, Tend not to trust"])
        rows.append([wave, "wex", "weight_extrapolated", None])
        if idx < 3:
            rows.append([wave, "q8", "q8_referendum", "Mentioned, Not mentioned"])
    return pd.DataFrame(rows, columns=["wave_id", "variable_name", "normalized_label", "value_range_text"])


def _lookup(metadata: pd.DataFrame) -> pd.DataFrame:
    groups = {
        "d1_left_right_scale": "left right (scale)",
        "d2_scale": "left right",
        "q9_trust_media": "politics",
        "q8_referendum": "politics",
    }
    frame = metadata.loc[metadata["normalized_label"].isin(list(groups)), ["wave_id", "normalized_label"]].copy()
    frame["group_tag"] = frame["normalized_label"].map(groups)
    return frame


@pytest.fixture
def result():
    metadata = _metadata()
    return standardize_variable_labels(
        metadata,
        rules_from_pairs([("left_right", "left-right")]),
        config=StandardizationConfig(min_wave_support=5),
        group_lookup=_lookup(metadata),
    )


def test_common_keyword_leads_the_label(result) -> None:
    labels = result.labels.set_index("variable_id")
    assert labels.loc["eb50_d1", "var_label_std"] == "scale_left-right"
    assert labels.loc["eb50_d2", "var_label_std"] == "scale"
    assert labels.loc["eb50_d1", "group_tag"] == "left right"


def test_low_support_variable_is_excluded(result) -> None:
    assert not result.labels["variable_id"].str.endswith("_q8").any()
    reasons = result.exclusions.set_index("variable_id")["reason"]
    for wave in WAVES[:3]:
        assert reasons[f"{wave}_q8"] == REASON_INSUFFICIENT_SUPPORT


def test_surviving_partner_keeps_its_label(result) -> None:
    labels = result.labels.set_index("variable_id")
    assert labels.loc["eb54_q9", "var_label_std"] == "media_trust"


def test_structural_variables_never_reach_labels(result) -> None:
    reasons = result.exclusions.set_index("variable_id")["reason"]
    assert all(reasons[f"{wave}_wex"] == REASON_STRUCTURAL for wave in WAVES)


def test_every_row_accounted_for(result) -> None:
    produced = set(result.labels["variable_id"])
    excluded = set(result.exclusions["variable_id"])
    expected = {f"{row.wave_id}_{row.variable_name}" for row in _metadata().itertuples()}
    assert produced | excluded == expected
    assert produced.isdisjoint(excluded)


def test_rule_audit(result) -> None:
    assert result.rule_audit["hits"].tolist() == [5]


@pytest.fixture
def inputs(tmp_path):
    metadata = _metadata()
    meta_path = tmp_path / "metadata.csv"
    groups_path = tmp_path / "groups.csv"
    metadata.to_csv(meta_path, index=False)
    _lookup(metadata).to_csv(groups_path, index=False)
    return meta_path, groups_path


def test_pipelines_are_registered() -> None:
    codes = {pipeline.pipeline_code for pipeline in list_pipelines()}
    assert codes == {"VariableLabels", "ValueScales"}
    with pytest.raises(KeyError, match="registered: ValueScales, VariableLabels"):
        get_pipeline("Unknown")


def test_variable_labels_pipeline(tmp_path, inputs) -> None:
    meta_path, groups_path = inputs
    out = main.run_all(
        meta_path,
        groups_path,
        tmp_path / "out",
        project_root=tmp_path,
        config=StandardizationConfig(min_wave_support=5),
        skip_excel=True,
    )
    labels = pd.read_csv(out)
    assert labels.columns.tolist() == [
        "variable_id",
        "wave_id",
        "variable_name",
        "group_tag",
        "var_label_std",
        "ambiguous_tokens",
        "values_type",
    ]
    labels = labels.set_index("variable_id")
    assert labels.loc["eb50_d1", "var_label_std"] == "scale_left-right"
    assert labels.loc["eb50_d1", "values_type"] == "unresolved"
    assert labels.loc["eb50_q9", "values_type"] == "trust/no trust"

    out_dir = tmp_path / "out"
    for suffix in ("exclusions", "keyword_stats", "rule_audit"):
        assert (out_dir / f"var_labels_std_{suffix}.csv").is_file()
    assert not (out_dir / "var_labels_std.xlsx").exists()

    prepared_dir = tmp_path / "inputs" / "variable_labels"
    assert (prepared_dir / "variable_records_prepared.csv").is_file()
    assert (prepared_dir / "variable_records_prepared.parquet").is_file()


def test_excel_workbook(tmp_path, inputs) -> None:
    meta_path, groups_path = inputs
    main.run_all(
        meta_path,
        groups_path,
        tmp_path / "out",
        project_root=tmp_path,
        skip_value_scales=True,
    )
    workbook = load_workbook(tmp_path / "out" / "var_labels_std.xlsx", read_only=True)
    assert workbook.sheetnames == ["labels", "exclusions", "keyword_stats", "rule_audit"]


def test_value_scales_pipeline(tmp_path, inputs) -> None:
    meta_path, _ = inputs
    out = main.run_all(
        meta_path,
        outdir=tmp_path / "out",
        pipeline_code="ValueScales",
        project_root=tmp_path,
        skip_excel=True,
    )
    scales = pd.read_csv(out).set_index("variable_id")
    assert scales.loc["eb50_q8", "values_type"] == "mentioned/not mentioned"
    assert pd.isna(scales.loc["eb50_d2", "values_type"])
    assert (tmp_path / "out" / "value_scales_dictionary_audit.csv").is_file()


def test_missing_metadata_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        main.run_all(tmp_path / "missing.csv", outdir=tmp_path / "out", project_root=tmp_path, skip_excel=True)


def test_legacy_excel_format_is_rejected(tmp_path) -> None:
    path = tmp_path / "metadata.xls"
    path.write_bytes(b"")
    with pytest.raises(ValueError, match="Unsupported file type"):
        read_table(path)
