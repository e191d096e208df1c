#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for corpus-frequency keyword ranking."""

from __future__ import annotations

import itertools

import pytest

from ebharmonize.variable_labels.scripts.matrix import token_frame
from ebharmonize.variable_labels.scripts.ranking import keyword_order, rank_keywords


@pytest.fixture
def presence():
    return token_frame(
        [
            ("w1_v1", "w1", {"scale", "left-right"}),
            ("w2_v1", "w2", {"scale"}),
            ("w3_v1", "w3", {"scale", "cat"}),
            ("w3_v2", "w3", {"scale", "trust", "cat"}),
        ]
    )


def test_order_with_pinned_and_tie_break(presence) -> None:
    stats = rank_keywords(presence, {"cat"})
    assert keyword_order(stats) == ["scale", "left-right", "trust", "cat"]
    assert stats["rank"].to_list() == [1, 2, 3, 4]


def test_statistics(presence) -> None:
    rows = {row["keyword"]: row for row in rank_keywords(presence, {"cat"}).to_dicts()}
    assert rows["scale"]["support_count"] == 4
    assert rows["scale"]["wave_count"] == 3
    assert rows["scale"]["missing_fraction"] == pytest.approx(0.0)
    assert rows["left-right"]["missing_fraction"] == pytest.approx(0.75)
    assert rows["cat"]["support_count"] == 2
    assert rows["cat"]["pinned_last"] is True
    assert rows["trust"]["pinned_last"] is False


def test_more_common_ranks_earlier(presence) -> None:
    rows = rank_keywords(presence, {"cat"}).to_dicts()
    for a, b in itertools.permutations(rows, 2):
        if a["pinned_last"] or b["pinned_last"]:
            continue
        if a["support_count"] > b["support_count"]:
            assert a["rank"] <= b["rank"]


def test_pinned_keyword_follows_more_common_ones() -> None:
    frame = token_frame([(f"v{i}", f"w{i}", {"cat", "trust"} if i < 2 else {"cat"}) for i in range(4)])
    assert keyword_order(rank_keywords(frame, {"cat"})) == ["trust", "cat"]
    assert keyword_order(rank_keywords(frame, set())) == ["cat", "trust"]


def test_empty_presence() -> None:
    stats = rank_keywords(token_frame([]))
    assert stats.height == 0
    assert keyword_order(stats) == []


@pytest.mark.filterwarnings("error")
def test_pinned_lookup_raises_no_warnings(presence) -> None:
    stats = rank_keywords(presence, ["cat", "cat", "trust"])
    assert keyword_order(stats) == ["scale", "left-right", "cat", "trust"]
