"""
Module: loading.loader

Purpose:
    Import clue datasets into ClueRecords. Three formats are understood:

    - JSON: array of objects (id, round, category, value, clue, response,
      subject_tags, source_url)
    - CSV: custom export with the same header
    - TSV: the jwolle1 Jeopardy archive (round, clue_value,
      daily_double_value, category, comments, answer, question, air_date,
      notes), where "answer" is the clue text and "question" the response

Key Functions:
    - load_dataset(path): Read and parse a dataset file
    - load_dataset_text(text, filename): Parse already-read text
    - normalize_row(row): Raw mapping -> ClueRecord (or None if unusable)

Dependencies:
    - csv, json (std)

Used By:
    - gui.main_window: File > Import dataset
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
import re
import uuid
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from trivia_trainer.core.models import ClueRecord, Round

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "UNKNOWN"

_TSV_HEADER_HINTS = ("clue_value", "air_date", "answer", "question")
_NON_DIGITS = re.compile(r"[^0-9]")


class DatasetError(Exception):
    """Raised when a dataset cannot be parsed or contains no usable clues."""


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_value(raw: Any) -> int:
    """
    Point value from a raw field, keeping digits only.

    Example:
        >>> parse_value("$1,000")
        1000
        >>> parse_value("None")
        0
    """
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, float) and not math.isfinite(raw):
        return 0
    if isinstance(raw, (int, float)):
        return max(0, int(raw))
    digits = _NON_DIGITS.sub("", _text(raw))
    return int(digits) if digits else 0


def parse_tags(raw: Any) -> frozenset:
    if isinstance(raw, (list, tuple, set, frozenset)):
        return frozenset(t for t in (_text(x) for x in raw) if t)
    return frozenset(t for t in (s.strip() for s in _text(raw).split("|")) if t)


def normalize_row(row: Mapping[str, Any]) -> Optional[ClueRecord]:
    """
    Build a ClueRecord from a raw row in the JSON/CSV field layout.

    Returns None when the clue or response is empty after trimming.
    """
    clue = _text(row.get("clue"))
    response = _text(row.get("response"))
    if not clue or not response:
        return None
    return ClueRecord(
        id=_text(row.get("id")) or uuid.uuid4().hex,
        round=Round.parse(row.get("round") or "1"),
        category=_text(row.get("category")) or UNKNOWN_CATEGORY,
        value=parse_value(row.get("value")),
        clue_text=clue,
        response_text=response,
        tags=parse_tags(row.get("subject_tags")),
        air_date=_text(row.get("air_date")),
        source_url=_text(row.get("source_url")),
    )


def looks_like_tsv(text: str) -> bool:
    """True if the first line is a tab-separated jwolle1 style header."""
    first_line = text.splitlines()[0] if text else ""
    return "\t" in first_line and any(hint in first_line for hint in _TSV_HEADER_HINTS)


def _rows(text: str, delimiter: str) -> Iterable[dict]:
    reader = csv.DictReader(io.StringIO(text), delimiter=delimiter)
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
    for row in reader:
        if any(_text(v) for v in row.values() if not isinstance(v, list)):
            yield row


def parse_json(text: str) -> List[ClueRecord]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DatasetError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise DatasetError("JSON dataset must be an array of clue objects")
    records = []
    for item in data:
        if isinstance(item, Mapping):
            record = normalize_row(item)
            if record is not None:
                records.append(record)
    return records


def parse_csv(text: str) -> List[ClueRecord]:
    records = []
    for row in _rows(text, ","):
        record = normalize_row(row)
        if record is not None:
            records.append(record)
    return records


def parse_tsv(text: str) -> List[ClueRecord]:
    """
    Parse a jwolle1 TSV export.

    Ids are ``{air_date}_{round}_{row}`` where ``row`` counts non-blank
    data rows from zero.
    """
    records = []
    for index, row in enumerate(_rows(text, "\t")):
        round_raw = _text(row.get("round"))
        air_date = _text(row.get("air_date"))
        record = normalize_row({
            "id": f"{air_date or 'nodate'}_{round_raw or 'r'}_{index}",
            "round": round_raw or "1",
            "category": row.get("category"),
            "value": row.get("clue_value"),
            "clue": row.get("answer"),
            "response": row.get("question"),
            "air_date": air_date,
        })
        if record is not None:
            records.append(record)
    return records


def load_dataset_text(text: str, filename: str = "") -> List[ClueRecord]:
    """
    Parse dataset text, choosing the format from the file name and header.

    Raises:
        DatasetError: Malformed input or zero usable clues
    """
    name = filename.lower()
    text = text.lstrip("\ufeff")
    if name.endswith(".json"):
        fmt, records = "json", parse_json(text)
    elif name.endswith(".tsv") or looks_like_tsv(text):
        fmt, records = "tsv", parse_tsv(text)
    else:
        fmt, records = "csv", parse_csv(text)

    if not records:
        raise DatasetError(f"Import produced 0 clues from {filename or 'input'}")
    logger.info(f"Parsed {len(records)} clues from {filename or 'input'} ({fmt})")
    return records


def load_dataset(path: Union[str, Path]) -> List[ClueRecord]:
    """
    Read and parse a dataset file.

    Raises:
        DatasetError: Unreadable file, malformed input or zero usable clues
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetError(f"Cannot read {path.name}: {e}") from e
    return load_dataset_text(text, path.name)
