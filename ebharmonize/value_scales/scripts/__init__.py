"""Value-range text classification."""

from .classify import (
    ValueScaleDictionary,
    classify,
    classify_value_scales,
    load_value_dictionary,
    normalize_value_text,
)

__all__ = [
    "ValueScaleDictionary",
    "classify",
    "classify_value_scales",
    "load_value_dictionary",
    "normalize_value_text",
]
