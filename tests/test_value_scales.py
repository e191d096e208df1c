#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for value-range text classification."""

from __future__ import annotations

import pandas as pd
import pytest

from ebharmonize.value_scales.constants import (
    FOUR_POINT,
    MENTIONED_NOT_MENTIONED,
    NATIONAL_EU,
    TRUST_NO_TRUST,
    UNRESOLVED,
    YES_NO,
)
from ebharmonize.value_scales.scripts.classify import (
    ValueScaleDictionary,
    classify,
    classify_value_scales,
    load_value_dictionary,
    normalize_value_text,
)


@pytest.fixture(scope="module")
def dictionary():
    return load_value_dictionary()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Mentioned, Not mentioned", MENTIONED_NOT_MENTIONED),
        ("Tend to trust; Tend not to trust; DK", TRUST_NO_TRUST),
        ("National government / The European Union", NATIONAL_EU),
        ("Yes; No", YES_NO),
        ("Very good, Rather good, Rather bad, Very bad", FOUR_POINT),
        ("Some other answer", UNRESOLVED),
    ],
)
def test_bundled_dictionary(dictionary, text, expected) -> None:
    assert classify(text, dictionary) == expected


def test_not_mentioned_outranks_dictionary() -> None:
    competing = ValueScaleDictionary([("mentioned", YES_NO), ("mentioned not", FOUR_POINT)])
    assert classify("mentioned, not mentioned", competing) == MENTIONED_NOT_MENTIONED


def test_longest_fragment_wins() -> None:
    table = ValueScaleDictionary([("good", YES_NO), ("very good", FOUR_POINT)])
    assert classify("very good, good", table) == FOUR_POINT


def test_earliest_fragment_breaks_length_ties() -> None:
    table = ValueScaleDictionary([("agree", YES_NO), ("trust", TRUST_NO_TRUST)])
    assert classify("trust, agree", table) == TRUST_NO_TRUST


def test_first_listed_duplicate_is_kept() -> None:
    table = ValueScaleDictionary([("yes", YES_NO), ("Yes", FOUR_POINT)])
    assert len(table) == 1
    assert classify("yes", table) == YES_NO


def test_fragments_match_whole_words_only() -> None:
    table = ValueScaleDictionary([("yes", YES_NO)])
    assert classify("yesterday", table) == UNRESOLVED


@pytest.mark.parametrize("text", [None, "", "   ", float("nan"), "..."])
def test_missing_text_has_no_tag(dictionary, text) -> None:
    assert classify(text, dictionary) is None


def test_unknown_tag_is_rejected() -> None:
    with pytest.raises(ValueError):
        ValueScaleDictionary([("yes", "affirmative")])


def test_unknown_tag_in_file(tmp_path) -> None:
    path = tmp_path / "values.csv"
    path.write_text("pattern,replacement\nyes,affirmative\n", encoding="utf-8")
    with pytest.raises(ValueError, match="values.csv"):
        load_value_dictionary(path)


def test_normalize_value_text() -> None:
    assert normalize_value_text("  Tend NOT to trust;  DK ") == "tend not to trust dk"


def test_classify_value_scales_frame(dictionary) -> None:
    records = pd.DataFrame(
        {
            "variable_id": ["w1_q1", "w1_q2", "w1_q3"],
            "value_range_text": ["Yes / No", None, "Left 1 ... 10 Right"],
        }
    )
    out = classify_value_scales(records, dictionary)
    assert out.columns.tolist() == ["variable_id", "values_type"]
    assert out["values_type"].tolist()[0] == YES_NO
    assert pd.isna(out["values_type"].tolist()[1])
    assert out["values_type"].tolist()[2] == UNRESOLVED


def test_dictionary_audit() -> None:
    table = ValueScaleDictionary([("yes", YES_NO), ("tend to trust", TRUST_NO_TRUST)])
    audit = table.audit(["Yes, no", "yes", None])
    assert audit["hits"].tolist() == [2, 0]
