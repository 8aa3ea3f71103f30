"""
CSV interchange for inventory snapshots.

Encodes a snapshot to comma-separated text with a fixed column order and
decodes it back. Quoted fields may contain commas, doubled quotes and
embedded newlines. Ids and image references are not part of the
interchange format; the collection assigns fresh ids on import.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .errors import FormatError, ValidationError
from .models import Entry, Status

logger = logging.getLogger("minivault.csv_codec")

CSV_HEADERS: Tuple[str, ...] = ("name", "category", "group", "status", "quantity", "notes")

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass
class DecodeResult:
    """Entries accepted from a table plus the rows that were skipped"""
    entries: Tuple[Entry, ...] = ()
    skipped: List[ValidationError] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.entries)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def escape_field(value) -> str:
    """Render one field, quoting it only when it holds a comma, quote or newline."""
    if value is None:
        return ""
    if isinstance(value, Status):
        value = value.value
    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def encode_snapshot(snapshot: Iterable[Entry]) -> str:
    """Encode entries as CSV text: header row first, LF separated, no trailing newline."""
    rows = [",".join(CSV_HEADERS)]
    for entry in snapshot:
        rows.append(",".join(escape_field(getattr(entry, column)) for column in CSV_HEADERS))
    return "\n".join(rows)


def logical_rows(text: str) -> List[Tuple[int, str]]:
    """Join physical lines so that quoted newlines stay inside their row.

    Returns ``(line_number, row_text)`` pairs where ``line_number`` is the
    1-based physical line the row starts on.
    """
    rows: List[Tuple[int, str]] = []
    pending: Optional[str] = None
    start = 0
    for number, line in enumerate(_LINE_BREAK.split(text), start=1):
        if pending is None:
            pending, start = line, number
        else:
            pending = pending + "\n" + line
        if pending.count('"') % 2 == 0:
            rows.append((start, pending))
            pending = None
    if pending is not None:
        # unterminated quote: keep what we have, the scanner closes it at end of row
        rows.append((start, pending))
    return rows


def split_row(row: str) -> List[str]:
    """Split one logical row on commas outside quotes, unescaping doubled quotes."""
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    while i < len(row):
        char = row[i]
        if in_quotes:
            if char == '"':
                if i + 1 < len(row) and row[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(char)
        elif char == '"':
            in_quotes = True
        elif char == ",":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    fields.append("".join(current))
    return fields


def _parse_quantity(value: str, line_number: int) -> int:
    try:
        quantity = int(value.strip())
    except ValueError:
        raise FormatError(f"Invalid quantity {value!r} in row {line_number}")
    if quantity < 1:
        raise FormatError(f"Quantity must be at least 1 in row {line_number}, got {quantity}")
    return quantity


def _build_entry(values: List[str], line_number: int) -> Entry:
    name, category, group, status_text, quantity_text, notes = values
    quantity = _parse_quantity(quantity_text, line_number)
    try:
        status = Status.parse(status_text)
    except ValueError:
        raise FormatError(f"Unknown status {status_text!r} in row {line_number}")
    if not name.strip():
        raise FormatError(f"Missing name in row {line_number}")
    return Entry(
        name=name,
        category=category,
        group=group,
        status=status,
        quantity=quantity,
        notes=notes,
    )


def decode_table(text: str) -> DecodeResult:
    """Decode CSV text into id-less entries.

    A wrong header or an unparseable quantity/status raises FormatError and
    nothing is returned. Rows whose field count differs from the header are
    skipped and reported in ``DecodeResult.skipped``.
    """
    rows = logical_rows(text)
    if not rows or not rows[0][1].strip():
        raise FormatError("CSV input is empty; expected a header row")

    header = [token.strip() for token in split_row(rows[0][1].lstrip("\ufeff"))]
    if tuple(header) != CSV_HEADERS:
        raise FormatError(
            f'Invalid CSV header. Expected: "{",".join(CSV_HEADERS)}" but got: "{",".join(header)}"'
        )

    entries: List[Entry] = []
    skipped: List[ValidationError] = []
    for line_number, row in rows[1:]:
        if not row.strip():
            continue
        values = split_row(row)
        if len(values) != len(CSV_HEADERS):
            problem = ValidationError(line_number, len(CSV_HEADERS), len(values), row)
            logger.warning("Skipping CSV row: %s", problem)
            skipped.append(problem)
            continue
        entries.append(_build_entry(values, line_number))

    logger.debug("Decoded %d entries, skipped %d rows", len(entries), len(skipped))
    return DecodeResult(entries=tuple(entries), skipped=skipped)
