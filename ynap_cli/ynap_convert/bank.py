"""Bank format descriptors.

A bank format describes how one bank's CSV export is laid out: how many
preamble lines to skip, which lines to drop, the delimiter, and one
:class:`~ynap_cli.ynap_convert.types.Field` per column. Descriptors are written
in YAML, for example::

    name: Volksbanken / Girokonto
    file_pattern: 'Umsaetze_[A-Z]{2}\\d{20}_\\d{4}.\\d{2}.\\d{2}.csv'
    ignore_header_rows: 16
    ignore_patterns:
      - '^;;;;;;;;;;;;;$'
    delimiter: ';'
    columns:
      - { type: date, args: "%d.%m.%Y" }
      - { type: ignore }
      - { type: payee }
      - { type: inflow, args: comma }
      - { type: cdflag, args: "S" }
    rule_files:
      - ./rules.yaml
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path
from typing import Any

import yaml

from ynap_cli.shared.exceptions import ConfigurationError, ConversionError, MappingError

from .types import Field, Record

DEFAULT_FALLBACK_ENCODING = "iso-8859-1"
_BANK_SUFFIXES = (".yaml", ".yml")


@dataclass(slots=True)
class BankFormat:
    """Parsed bank format descriptor."""

    name: str
    columns: list[Field]
    delimiter: str = ","
    ignore_header_rows: int = 0
    ignore_patterns: list[re.Pattern[str]] = field(default_factory=list)
    file_pattern: re.Pattern[str] | None = None
    rule_files: list[Path] = field(default_factory=list)
    source_path: Path | None = None

    def matches_filename(self, filename: str) -> bool:
        """Return True if ``filename`` fits the descriptor's ``file_pattern``."""
        if self.file_pattern is None:
            return True
        return self.file_pattern.fullmatch(filename) is not None

    def read_from_path(
        self,
        path: str | Path,
        *,
        fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
    ) -> list[Record]:
        data = Path(path).read_bytes()
        return self.read_from_string(decode_bytes(data, fallback_encoding))

    def read_from_string(self, text: str) -> list[Record]:
        """Convert CSV text into records.

        Raises:
            MappingError: If a row does not fit the column mapping. The message
                names the line of the original input.
            ConversionError: If the CSV itself is malformed.
        """
        records: list[Record] = []
        for line_number, row in self._iter_rows(text):
            try:
                records.append(Record.from_row(row, self.columns))
            except MappingError as exc:
                raise type(exc)(f"Line {line_number}: {exc}") from exc
        return records

    def _iter_rows(self, text: str) -> Iterator[tuple[int, list[str]]]:
        kept: list[tuple[int, str]] = []
        # Only "\n" and "\r\n" end a line. str.splitlines() would also split on
        # U+0085, which Latin-1 decoding produces from the cp1252 ellipsis byte.
        for index, line in enumerate(text.split("\n")):
            line = line.removesuffix("\r")
            if index < self.ignore_header_rows:
                continue
            if any(pattern.search(line) for pattern in self.ignore_patterns):
                continue
            kept.append((index + 1, line))

        # Rows are parsed one line at a time so errors can point at the input
        # line; quoted cells spanning several lines are not supported.
        for line_number, line in kept:
            if not line:
                continue
            try:
                rows = list(csv.reader(StringIO(line), delimiter=self.delimiter))
            except csv.Error as exc:
                raise ConversionError(f"Line {line_number}: invalid CSV ({exc})") from exc
            for row in rows:
                yield line_number, row


def decode_bytes(data: bytes, fallback_encoding: str = DEFAULT_FALLBACK_ENCODING) -> str:
    """Decode ``data`` as UTF-8, falling back to a single-byte encoding."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode(fallback_encoding, errors="replace")


def resolve_bank_path(name_or_path: str | Path, search_dirs: Sequence[Path] = ()) -> Path:
    """Return the descriptor file for a path or a bare bank name.

    Raises:
        ConfigurationError: If nothing matches.
    """
    candidate = Path(name_or_path).expanduser()
    if candidate.is_file():
        return candidate

    name = str(name_or_path)
    for directory in search_dirs:
        for suffix in _BANK_SUFFIXES:
            path = Path(directory) / f"{name}{suffix}"
            if path.is_file():
                return path

    searched = ", ".join(str(d) for d in search_dirs) or "no bank directories configured"
    raise ConfigurationError(f"Bank format '{name}' not found (searched: {searched})")


def load_bank(path: str | Path) -> BankFormat:
    """Load and parse a bank format descriptor from YAML.

    Raises:
        ConfigurationError: If the file is missing or the descriptor is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Bank format file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Bank format {path} is not valid YAML: {exc}") from exc

    return parse_bank(data, source_path=path)


def parse_bank(data: Any, source_path: Path | None = None) -> BankFormat:
    """Parse YAML data into a BankFormat."""
    where = str(source_path) if source_path else "bank format"
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where}: descriptor must be a mapping")

    name = data.get("name")
    if not name:
        raise ConfigurationError(f"{where}: missing required field 'name'")

    columns_data = data.get("columns")
    if not isinstance(columns_data, list) or not columns_data:
        raise ConfigurationError(f"{where}: 'columns' must be a non-empty list")
    try:
        columns = [Field.from_config(column) for column in columns_data]
    except ConfigurationError as exc:
        raise ConfigurationError(f"{where}: {exc}") from exc

    delimiter = data.get("delimiter", ",")
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ConfigurationError(f"{where}: delimiter must be a single character")

    ignore_header_rows = data.get("ignore_header_rows", 0)
    if not isinstance(ignore_header_rows, int) or ignore_header_rows < 0:
        raise ConfigurationError(f"{where}: ignore_header_rows must be a non-negative integer")

    file_pattern = data.get("file_pattern")
    base_dir = source_path.parent if source_path else Path.cwd()

    return BankFormat(
        name=str(name),
        columns=columns,
        delimiter=delimiter,
        ignore_header_rows=ignore_header_rows,
        ignore_patterns=[
            _compile(pattern, where, "ignore_patterns")
            for pattern in data.get("ignore_patterns") or []
        ],
        file_pattern=_compile(file_pattern, where, "file_pattern") if file_pattern else None,
        rule_files=[base_dir / str(p) for p in data.get("rule_files") or []],
        source_path=source_path,
    )


def _compile(pattern: Any, where: str, key: str) -> re.Pattern[str]:
    try:
        return re.compile(str(pattern))
    except re.error as exc:
        raise ConfigurationError(f"{where}: invalid regex in {key} '{pattern}': {exc}") from exc
