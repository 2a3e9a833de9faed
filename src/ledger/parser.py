from __future__ import annotations

import re
from typing import Any

from ledger.data_models import HistoricalRecord

FIELD_DELIMITER = ","

_HEADER_TOKENS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("brand", ("brand",)),
    ("model", ("model",)),
    ("variant", ("variant",)),
    ("year", ("year",)),
    ("date", ("date",)),
    ("bought_price", ("bought", "purchase")),
    ("sold_price", ("sold", "sale")),
)

_NUMERIC_FIELDS = {"bought_price", "sold_price"}

_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(cell: str | None) -> float:
    """Parse the leading numeric prefix of a cell; ``nan`` when there is none."""
    if cell is None:
        return float("nan")
    match = _LEADING_NUMBER.match(cell.strip())
    if match is None:
        return float("nan")
    return float(match.group(0))


def map_header(header_line: str) -> list[tuple[int, str]]:
    """Return ``(column_index, field)`` pairs; one column may feed several fields."""
    mapping: list[tuple[int, str]] = []
    for idx, cell in enumerate(header_line.split(FIELD_DELIMITER)):
        name = cell.strip().lower()
        for field_name, tokens in _HEADER_TOKENS:
            if any(token in name for token in tokens):
                mapping.append((idx, field_name))
    return mapping


def parse_ledger(text: str | None) -> list[HistoricalRecord]:
    """
    Turn newline/comma separated ledger text into records, in row order.

    Column names are matched loosely (``Purchase Price`` and ``BoughtPrice``
    both land in ``bought_price``). Rows are never rejected: short or garbled
    rows produce partial records. Quoted fields are not supported, so a comma
    inside a value shifts the rest of that row.
    """
    if not text or not text.strip():
        return []

    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        return []

    mapping = map_header(lines[0])
    records: list[HistoricalRecord] = []
    for line in lines[1:]:
        cells = [c.strip() for c in line.split(FIELD_DELIMITER)]
        values: dict[str, Any] = {}
        for idx, field_name in mapping:
            cell = cells[idx] if idx < len(cells) else None
            if field_name in _NUMERIC_FIELDS:
                values[field_name] = parse_number(cell)
            else:
                values[field_name] = cell or None
        records.append(HistoricalRecord(**values))
    return records
