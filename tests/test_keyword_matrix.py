#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for the sparse presence matrix and its wave-support filter."""

from __future__ import annotations

import pandas as pd
import pytest

from ebharmonize.variable_labels.scripts.matrix import build_matrix, keyword_wave_support, token_frame


@pytest.fixture
def tokens():
    return token_frame(
        [
            ("w1_q1", "w1", {"trust", "government"}),
            ("w2_q1", "w2", {"trust", "government"}),
            ("w3_q1", "w3", {"trust", "rare"}),
        ]
    )


def test_token_frame_has_one_row_per_keyword(tokens) -> None:
    assert tokens.height == 6
    assert tokens.columns == ["variable_id", "wave_id", "keyword"]


def test_support_counts_distinct_waves() -> None:
    frame = token_frame([("w1_a", "w1", {"trust"}), ("w1_b", "w1", {"trust"}), ("w2_a", "w2", {"trust"})])
    support = keyword_wave_support(frame).to_dicts()
    assert support == [{"keyword": "trust", "wave_support": 2}]


def test_weak_keyword_drops_whole_variable(tokens) -> None:
    matrix = build_matrix(tokens, 2)
    assert matrix.variable_ids == ["w1_q1", "w2_q1"]
    assert matrix.keywords == ["government", "trust"]
    assert matrix.presence.filter(matrix.presence["variable_id"] == "w3_q1").height == 0
    assert matrix.dropped.to_dicts() == [
        {"variable_id": "w3_q1", "wave_id": "w3", "dropped_keywords": "rare"}
    ]


def test_threshold_of_one_keeps_everything(tokens) -> None:
    matrix = build_matrix(tokens, 1)
    assert matrix.presence.height == tokens.height
    assert matrix.dropped.height == 0


@pytest.mark.parametrize("bad", [0, -3])
def test_invalid_threshold(tokens, bad) -> None:
    with pytest.raises(ValueError):
        build_matrix(tokens, bad)


def test_dense_view_uses_missing_values() -> None:
    frame = token_frame([("v1", "w1", {"trust", "government"}), ("v2", "w2", {"trust"})])
    dense = build_matrix(frame, 1).to_dense(["trust", "government"])
    assert list(dense.columns) == ["trust", "government"]
    assert dense.loc["v1", "government"] == "government"
    assert pd.isna(dense.loc["v2", "government"])


def test_dense_view_requires_every_keyword() -> None:
    frame = token_frame([("v1", "w1", {"trust", "government"})])
    with pytest.raises(ValueError):
        build_matrix(frame, 1).to_dense(["trust"])


def test_empty_token_set() -> None:
    matrix = build_matrix(token_frame([]), 3)
    assert matrix.keywords == []
    assert matrix.to_dense([]).empty
