"""Label normalization, tokenization and group-wise synthesis steps."""

from .config import StandardizationConfig
from .grouping import GroupedResult, PartitionResult, run_grouped, standardize_partition
from .matrix import KeywordMatrix, build_matrix, token_frame
from .ranking import keyword_order, rank_keywords
from .rules import NormalizationRule, audit_rules, load_rules, normalize, strip_question_prefix
from .standardize import StandardizationResult, standardize_prepared, standardize_variable_labels
from .synthesis import collapse_and_trim, synthesize
from .tokenizer import TokenizedLabel, load_country_codes, tokenize, tokenize_label

__all__ = [
    "GroupedResult",
    "KeywordMatrix",
    "NormalizationRule",
    "PartitionResult",
    "StandardizationConfig",
    "StandardizationResult",
    "TokenizedLabel",
    "audit_rules",
    "build_matrix",
    "collapse_and_trim",
    "keyword_order",
    "load_country_codes",
    "load_rules",
    "normalize",
    "rank_keywords",
    "run_grouped",
    "standardize_partition",
    "standardize_prepared",
    "standardize_variable_labels",
    "strip_question_prefix",
    "synthesize",
    "token_frame",
    "tokenize",
    "tokenize_label",
]
