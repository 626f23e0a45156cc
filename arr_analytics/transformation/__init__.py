"""
Schema Normalization Module
"""
from .normalizers import (
    NormalizationResult,
    SkippedRow,
    SkipReason,
    TransactionNormalizer,
    infer_transaction_type,
    parse_amount,
    parse_timestamp,
)
from .schema import HEADER_SYNONYMS, build_header_map, map_header, normalize_header, remap_row

__all__ = [
    "NormalizationResult",
    "SkippedRow",
    "SkipReason",
    "TransactionNormalizer",
    "infer_transaction_type",
    "parse_amount",
    "parse_timestamp",
    "HEADER_SYNONYMS",
    "build_header_map",
    "map_header",
    "normalize_header",
    "remap_row",
]
