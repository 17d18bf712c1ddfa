"""
Dataset loading: JSON, CSV and jwolle1 TSV clue files to ClueRecords.
"""

from .loader import (
    DatasetError,
    load_dataset,
    load_dataset_text,
    looks_like_tsv,
    normalize_row,
    parse_value,
)

__all__ = [
    "DatasetError",
    "load_dataset",
    "load_dataset_text",
    "looks_like_tsv",
    "normalize_row",
    "parse_value",
]
