"""Canonical record and column mapping types."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ynap_cli.shared.exceptions import ConfigurationError, DateParseError, MappingError

CANONICAL_KEYS = ("date", "payee", "category", "memo", "amount")
OUTPUT_HEADER = ("Date", "Payee", "Category", "Memo", "Amount")
ISO_DATE_FORMAT = "%Y-%m-%d"


class DecimalSeparator(Enum):
    """Decimal mark convention of an amount column."""

    PERIOD = "period"
    COMMA = "comma"

    def simplify(self, value: str) -> str:
        """Strip grouping marks and normalise the decimal mark to ``.``."""
        if self is DecimalSeparator.PERIOD:
            return value.replace(",", "")
        return value.replace(".", "").replace(",", ".")


class FieldKind(Enum):
    IGNORE = "ignore"
    DATE = "date"
    PAYEE = "payee"
    CATEGORY = "category"
    MEMO = "memo"
    INFLOW = "inflow"
    OUTFLOW = "outflow"
    EXTRA = "extra"
    CDFLAG = "cdflag"


_TEXT_KINDS = {
    FieldKind.PAYEE: "payee",
    FieldKind.CATEGORY: "category",
    FieldKind.MEMO: "memo",
}


@dataclass(frozen=True, slots=True)
class Field:
    """How a single input column populates a Record.

    ``arg`` carries the variant payload: the source date format for ``date``,
    the :class:`DecimalSeparator` for ``inflow``/``outflow``, the slot name for
    ``extra`` and the debit marker for ``cdflag``.
    """

    kind: FieldKind
    arg: Any = None

    @classmethod
    def ignore(cls) -> Field:
        return cls(FieldKind.IGNORE)

    @classmethod
    def date(cls, date_format: str = "") -> Field:
        return cls(FieldKind.DATE, date_format)

    @classmethod
    def payee(cls) -> Field:
        return cls(FieldKind.PAYEE)

    @classmethod
    def category(cls) -> Field:
        return cls(FieldKind.CATEGORY)

    @classmethod
    def memo(cls) -> Field:
        return cls(FieldKind.MEMO)

    @classmethod
    def inflow(cls, separator: DecimalSeparator = DecimalSeparator.PERIOD) -> Field:
        return cls(FieldKind.INFLOW, separator)

    @classmethod
    def outflow(cls, separator: DecimalSeparator = DecimalSeparator.PERIOD) -> Field:
        return cls(FieldKind.OUTFLOW, separator)

    @classmethod
    def extra(cls, key: str) -> Field:
        return cls(FieldKind.EXTRA, key)

    @classmethod
    def cdflag(cls, debit_marker: str) -> Field:
        return cls(FieldKind.CDFLAG, debit_marker)

    @classmethod
    def from_config(cls, data: Any) -> Field:
        """Parse the ``{type: ..., args: ...}`` shape used in bank descriptors."""
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Column definition must be a mapping, got {data!r}")
        raw_type = data.get("type")
        try:
            kind = FieldKind(str(raw_type).lower())
        except ValueError as exc:
            raise ConfigurationError(f"Unknown column type '{raw_type}'") from exc

        args = data.get("args")
        if kind is FieldKind.DATE:
            if args is None:
                raise ConfigurationError("Column type 'date' requires args (use \"\" for ISO dates)")
            return cls.date(str(args))
        if kind in (FieldKind.INFLOW, FieldKind.OUTFLOW):
            try:
                separator = DecimalSeparator(str(args or "period").lower())
            except ValueError as exc:
                raise ConfigurationError(
                    f"Column type '{kind.value}' expects args 'period' or 'comma', got '{args}'"
                ) from exc
            return cls(kind, separator)
        if kind in (FieldKind.EXTRA, FieldKind.CDFLAG):
            if not args or not isinstance(args, str):
                raise ConfigurationError(f"Column type '{kind.value}' requires a text args value")
            return cls(kind, args)
        return cls(kind)


def negate_amount(value: str) -> str:
    if value.startswith("-"):
        return value[1:]
    return f"-{value}"


@dataclass(slots=True)
class Record:
    """One transaction in the five-column budgeting layout plus extra fields."""

    date: str = ""
    payee: str = ""
    category: str = ""
    memo: str = ""
    amount: str = ""
    extra: dict[str, str] = field(default_factory=dict)
    transformed: bool = False

    @classmethod
    def from_row(cls, row: Sequence[str], columns: Sequence[Field]) -> Record:
        """Build a Record by applying ``columns`` positionally to ``row``.

        Raises:
            MappingError: If the row has fewer cells than there are columns.
            DateParseError: If a date cell does not match its declared format.
        """
        if len(row) < len(columns):
            raise MappingError(
                f"Row has {len(row)} columns but the bank format expects {len(columns)}"
            )

        record = cls()
        debit_flagged = False
        for column, value in zip(columns, row):
            kind = column.kind
            if kind is FieldKind.IGNORE:
                continue
            if kind is FieldKind.DATE:
                record.date = _parse_date(value, column.arg)
            elif kind in _TEXT_KINDS:
                setattr(record, _TEXT_KINDS[kind], value)
            elif kind in (FieldKind.INFLOW, FieldKind.OUTFLOW):
                cleaned = value.strip()
                if not cleaned:
                    continue
                amount = column.arg.simplify(cleaned)
                record.amount = negate_amount(amount) if kind is FieldKind.OUTFLOW else amount
            elif kind is FieldKind.EXTRA:
                record.extra[column.arg] = value
            elif kind is FieldKind.CDFLAG:
                debit_flagged = value.strip() == column.arg

        if debit_flagged and record.amount:
            record.amount = negate_amount(record.amount)
        return record

    def get(self, key: str) -> str | None:
        if key in CANONICAL_KEYS:
            return getattr(self, key)
        return self.extra.get(key)

    def replace(self, key: str, value: str) -> str | None:
        """Store ``value`` under ``key`` and return the previous value.

        Canonical slots always exist, so only a previously absent extra key
        yields ``None``.
        """
        if key in CANONICAL_KEYS:
            previous = getattr(self, key)
            setattr(self, key, value)
            return previous
        previous = self.extra.get(key)
        self.extra[key] = value
        return previous

    def keys(self) -> Iterator[str]:
        yield from CANONICAL_KEYS
        yield from self.extra

    @staticmethod
    def header() -> list[str]:
        return list(OUTPUT_HEADER)

    def to_row(self) -> list[str]:
        return [self.date, self.payee, self.category, self.memo, self.amount]


def _parse_date(value: str, date_format: str) -> str:
    if not date_format:
        return value
    try:
        parsed = datetime.strptime(value.strip(), date_format)
    except ValueError as exc:
        raise DateParseError(
            f"Date '{value}' does not match format '{date_format}'"
        ) from exc
    return parsed.strftime(ISO_DATE_FORMAT)
