from __future__ import annotations

import pytest

from ynap_cli.shared.exceptions import ConfigurationError, TemplateError
from ynap_cli.ynap_convert.types import Record
from ynap_cli.ynap_rules.matcher import Matcher


def test_matcher_rewrites_from_named_captures() -> None:
    matcher = Matcher({"payee": r"^FOO(?P<n>\d+)$"}, {"memo": "id=${n}"})
    record = Record(payee="FOO42")

    assert matcher.is_match(record)
    assert matcher.transform(record) is True
    assert record.memo == "id=42"
    assert record.payee == "FOO42"
    assert record.transformed is True


def test_matcher_does_not_fire_on_mismatch() -> None:
    matcher = Matcher({"payee": r"^FOO(?P<n>\d+)$"}, {"memo": "id=${n}"})
    record = Record(payee="BAR", memo="keep")

    assert not matcher.is_match(record)
    assert matcher.transform(record) is False
    assert record == Record(payee="BAR", memo="keep")


def test_matcher_requires_all_search_fields() -> None:
    matcher = Matcher({"payee": "SHOP", "memo": "card"}, {"category": "Shopping"})

    partial = Record(payee="SHOP 1", memo="cash")
    full = Record(payee="SHOP 1", memo="card 1234")

    assert matcher.transform(partial) is False
    assert partial.category == ""
    assert matcher.transform(full) is True
    assert full.category == "Shopping"


def test_matcher_absent_extra_field_does_not_match() -> None:
    matcher = Matcher({"iban": "DE"}, {"category": "Transfer"})
    record = Record()

    assert not matcher.is_match(record)
    assert matcher.transform(record) is False

    record.extra["iban"] = "DE0012"
    assert matcher.transform(record) is True


def test_matcher_with_empty_search_always_fires() -> None:
    matcher = Matcher({}, {"category": "Uncategorized"})
    record = Record()

    assert matcher.is_match(record)
    assert matcher.transform(record) is True
    assert record.category == "Uncategorized"


def test_matcher_falls_back_to_record_values_and_writes_extras() -> None:
    matcher = Matcher(
        {"payee": r"^(?P<who>\w+)"},
        {"memo": "${who} / ${memo} / ${unknown}", "source": "${payee|lowercase}"},
    )
    record = Record(payee="ACME Corp", memo="invoice")

    matcher.transform(record)

    assert record.memo == "ACME / invoice / "
    assert record.get("source") == "acme corp"


def test_matcher_later_pattern_overwrites_same_capture_name() -> None:
    matcher = Matcher(
        {"payee": r"(?P<x>payee)", "memo": r"(?P<x>memo)"},
        {"category": "${x}"},
    )
    record = Record(payee="payee", memo="memo")

    matcher.transform(record)

    assert record.category == "memo"


def test_matcher_unmatched_optional_group_falls_back_to_record() -> None:
    matcher = Matcher({"payee": r"^X(?P<memo>\d+)?"}, {"category": "${memo}"})
    record = Record(payee="X", memo="from record")

    matcher.transform(record)

    assert record.category == "from record"


def test_matcher_template_errors_propagate() -> None:
    matcher = Matcher({"payee": "."}, {"memo": "${category|not_empty}"})
    with pytest.raises(TemplateError):
        matcher.transform(Record(payee="x"))


def test_matcher_from_config() -> None:
    matcher = Matcher.from_config(
        {"label": "rent", "match": {"payee": "^Landlord$"}, "replace": {"category": "Rent"}}
    )
    record = Record(payee="Landlord")

    assert matcher.label == "rent"
    assert matcher.describe() == "rent"
    assert matcher.transform(record)
    assert record.category == "Rent"


@pytest.mark.parametrize(
    "data, message",
    [
        ({"label": "broken", "match": {"payee": "("}, "replace": {}}, "broken"),
        ({"match": {"payee": "x"}, "replace": {"memo": "${a|shout}"}}, "shout"),
        ({"match": ["payee"], "replace": {}}, "mappings"),
        ({"match": {"payee": "x"}}, "missing required key(s): replace"),
        ({"replace": {"category": "Oops"}}, "missing required key(s): match"),
        ({"matches": {"payee": "x"}, "replace": {"category": "Oops"}}, "unknown key(s): matches"),
        ("payee", "mapping"),
    ],
)
def test_matcher_from_config_rejects_invalid(data, message: str) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        Matcher.from_config(data, position=3)
    assert message in str(excinfo.value)
    assert "rule #3" in str(excinfo.value)
