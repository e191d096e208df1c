#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for group-partitioned standardization."""

from __future__ import annotations

import pandas as pd
import pytest

from ebharmonize.records import REASON_INSUFFICIENT_SUPPORT, REASON_MISSING_GROUP, REASON_NO_KEYWORDS
from ebharmonize.variable_labels.scripts.concurrency import resolve_worker_count
from ebharmonize.variable_labels.scripts.config import StandardizationConfig
from ebharmonize.variable_labels.scripts.grouping import RULE_LABEL_COLUMN, run_grouped


def _records(rows):
    return pd.DataFrame(
        [
            {
                "variable_id": f"{wave}_{name}",
                "wave_id": wave,
                "variable_name": name,
                "group_tag": group,
                RULE_LABEL_COLUMN: label,
            }
            for wave, name, group, label in rows
        ]
    )


@pytest.fixture
def records():
    return _records(
        [
            ("w1", "q1", "trust", "trust_media"),
            ("w2", "q2", "trust", "trust_parliament"),
            ("w1", "q7", "media", "trust_media"),
            ("w2", "q8", "media", "media_television"),
            ("w3", "q9", None, "trust_media"),
            ("w3", "q10", "filler", "the_of_and"),
        ]
    )


def test_ranking_is_group_local(records) -> None:
    result = run_grouped(records, StandardizationConfig(min_wave_support=1))
    labels = dict(zip(result.labels["variable_id"], result.labels["var_label_std"]))
    assert labels["w1_q1"] == "trust_media"
    assert labels["w1_q7"] == "media_trust"


def test_output_sorted_by_group_then_variable(records) -> None:
    labels = run_grouped(records, StandardizationConfig(min_wave_support=1)).labels
    keys = list(zip(labels["group_tag"], labels["variable_id"]))
    assert keys == sorted(keys)


def test_every_record_is_accounted_for(records) -> None:
    result = run_grouped(records, StandardizationConfig(min_wave_support=1))
    produced = set(result.labels["variable_id"])
    excluded = set(result.exclusions["variable_id"])
    assert produced.isdisjoint(excluded)
    assert produced | excluded == set(records["variable_id"])

    source_groups = dict(zip(records["variable_id"], records["group_tag"]))
    for variable_id, group in zip(result.labels["variable_id"], result.labels["group_tag"]):
        assert source_groups[variable_id] == group


def test_ungrouped_and_empty_records_are_excluded(records) -> None:
    result = run_grouped(records, StandardizationConfig(min_wave_support=1))
    reasons = dict(zip(result.exclusions["variable_id"], result.exclusions["reason"]))
    assert reasons["w3_q9"] == REASON_MISSING_GROUP
    assert reasons["w3_q10"] == REASON_NO_KEYWORDS
    assert "filler" not in set(result.labels["group_tag"])


def test_empty_partition_does_not_stop_others() -> None:
    frame = _records(
        [
            ("w1", "q1", "trust", "trust"),
            ("w2", "q1", "trust", "trust"),
            ("w1", "q7", "media", "media_television"),
        ]
    )
    result = run_grouped(frame, StandardizationConfig(min_wave_support=2))
    assert set(result.labels["group_tag"]) == {"trust"}
    assert result.labels["var_label_std"].tolist() == ["trust", "trust"]
    reasons = dict(zip(result.exclusions["variable_id"], result.exclusions["reason"]))
    assert reasons == {"w1_q7": REASON_INSUFFICIENT_SUPPORT}


def test_keyword_stats_are_per_group(records) -> None:
    stats = run_grouped(records, StandardizationConfig(min_wave_support=1)).keyword_stats
    trust_rank = stats.loc[(stats["group_tag"] == "trust") & (stats["keyword"] == "trust"), "rank"].item()
    media_rank = stats.loc[(stats["group_tag"] == "media") & (stats["keyword"] == "trust"), "rank"].item()
    assert trust_rank == 1
    assert media_rank == 3


def test_ambiguous_tokens_column() -> None:
    frame = _records([("w1", "q1", "trust", "trust_dk"), ("w2", "q1", "trust", "trust_de")])
    labels = run_grouped(frame, StandardizationConfig(min_wave_support=1)).labels.set_index("variable_id")
    assert labels.loc["w1_q1", "ambiguous_tokens"] == "dk"
    assert pd.isna(labels.loc["w2_q1", "ambiguous_tokens"])


def test_worker_count_resolution(monkeypatch) -> None:
    monkeypatch.delenv("EBH_MAX_WORKERS", raising=False)
    assert resolve_worker_count(None, 10) == 1
    assert resolve_worker_count(1, 10) == 1
    monkeypatch.setenv("EBH_MAX_WORKERS", "1")
    assert resolve_worker_count(8, 10) == 1


def test_parallel_run_matches_serial(records, monkeypatch) -> None:
    monkeypatch.delenv("EBH_MAX_WORKERS", raising=False)
    serial = run_grouped(records, StandardizationConfig(min_wave_support=1))
    parallel = run_grouped(records, StandardizationConfig(min_wave_support=1, max_workers=2))
    pd.testing.assert_frame_equal(serial.labels, parallel.labels)


def test_topical_stopword_keeps_questions_apart() -> None:
    rows = []
    for wave in ("w1", "w2", "w3"):
        rows.append((wave, "q1", "politics", "interest_in_politics"))
        rows.append((wave, "q2", "politics", "politics"))
    labels = run_grouped(_records(rows), StandardizationConfig(min_wave_support=3)).labels
    by_name = labels.groupby("variable_name")["var_label_std"].unique()
    assert list(by_name["q1"]) == ["politics_interest"]
    assert list(by_name["q2"]) == ["politics"]


def test_country_word_codes_do_not_become_keywords() -> None:
    rows = [(wave, "q1", "work", "satisfaction_at_work") for wave in ("w1", "w2")]
    labels = run_grouped(_records(rows), StandardizationConfig(min_wave_support=2)).labels
    assert set(labels["var_label_std"]) == {"satisfaction_work"}
    assert labels["ambiguous_tokens"].isna().all()


def test_configured_separator_is_used_throughout() -> None:
    frame = _records([("w1", "q1", "trust", "trust.media"), ("w2", "q1", "trust", "trust.media")])
    labels = run_grouped(frame, StandardizationConfig(min_wave_support=1, separator=".")).labels
    assert set(labels["var_label_std"]) == {"media.trust"}
