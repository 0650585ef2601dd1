from __future__ import annotations

import pytest

from ynap_cli.shared.exceptions import TemplateError
from ynap_cli.ynap_rules.template import interpolate, placeholders, validate_template

WORDS = {"a": "hello", "b": "world"}


def _lookup(key: str) -> str:
    return WORDS.get(key, "")


@pytest.mark.parametrize(
    "template, expected",
    [
        ("${a} ${b}!", "hello world!"),
        ("${a|title_case} ${b}!", "Hello world!"),
        ("${a|not_empty} ${b|uppercase}!", "hello WORLD!"),
        ("${a|lowercase}", "hello"),
        ("[${missing}]", "[]"),
        ("${a}${a}", "hellohello"),
    ],
)
def test_interpolate(template: str, expected: str) -> None:
    assert interpolate(template, _lookup) == expected


@pytest.mark.parametrize("template", ["", "plain text", "$a {b}", "${}", "${a b}", "$${"])
def test_interpolate_without_placeholders_is_identity(template: str) -> None:
    def lookup(key: str) -> str:
        raise AssertionError("lookup must not be called")

    assert interpolate(template, lookup) == template


def test_interpolate_calls_lookup_once_per_placeholder_in_order() -> None:
    calls: list[str] = []

    def lookup(key: str) -> str:
        calls.append(key)
        return key.upper()

    assert interpolate("${x}-${y}-${x}", lookup) == "X-Y-X"
    assert calls == ["x", "y", "x"]


def test_interpolate_title_case_capitalizes_each_word() -> None:
    assert interpolate("${v|title_case}", lambda key: "COFFEE corner 12") == "Coffee Corner 12"


def test_interpolate_not_empty_fails_on_empty_value() -> None:
    with pytest.raises(TemplateError) as excinfo:
        interpolate("${a|not_empty} ${b|uppercase}!", lambda key: "" if key == "a" else "world")
    assert "'a'" in str(excinfo.value)


def test_interpolate_unknown_command_fails() -> None:
    with pytest.raises(TemplateError) as excinfo:
        interpolate("${a|reverse}", _lookup)
    assert "reverse" in str(excinfo.value)


def test_interpolate_treats_none_as_empty() -> None:
    assert interpolate("<${a}>", lambda key: None) == "<>"


def test_placeholders_and_validation() -> None:
    assert placeholders("${a} and ${b|uppercase}") == [("a", None), ("b", "uppercase")]
    validate_template("${a|title_case}")
    with pytest.raises(TemplateError):
        validate_template("${a|shout}")


def test_interpolate_title_case_keeps_spacing() -> None:
    assert interpolate("[${v|title_case}]", lambda key: "REWE  Markt ") == "[Rewe  Markt ]"
