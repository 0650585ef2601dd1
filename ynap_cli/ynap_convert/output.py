"""CSV output in the five-column budgeting layout."""

from __future__ import annotations

import csv
from collections.abc import Iterable
from io import StringIO
from typing import TextIO

from .types import Record


def write_records(records: Iterable[Record], stream: TextIO) -> int:
    """Write the header and one row per record; return the number of rows written."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(Record.header())
    count = 0
    for record in records:
        writer.writerow(record.to_row())
        count += 1
    return count


def render_records(records: Iterable[Record]) -> str:
    buffer = StringIO()
    write_records(records, buffer)
    return buffer.getvalue()
