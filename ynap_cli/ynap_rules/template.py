"""Placeholder interpolation for replacement templates.

Templates contain ``${name}`` or ``${name|command}`` placeholders, where both
``name`` and ``command`` are word characters. Everything else is copied as-is::

    >>> interpolate("${a|title_case} ${b}!", {"a": "hello", "b": "world"}.get)
    'Hello world!'
"""

from __future__ import annotations

import re
from collections.abc import Callable

from ynap_cli.shared.exceptions import TemplateError

PLACEHOLDER_RE = re.compile(r"\$\{(\w+)(?:\|(\w+))?\}")
_WORD_RE = re.compile(r"\S+")


def _title_case(key: str, value: str) -> str:
    # Capitalize word by word; the whitespace between words is kept as-is.
    return _WORD_RE.sub(lambda match: match.group(0).capitalize(), value)


def _not_empty(key: str, value: str) -> str:
    if not value:
        raise TemplateError(f"Value of key '{key}' cannot be empty")
    return value


COMMANDS: dict[str, Callable[[str, str], str]] = {
    "title_case": _title_case,
    "lowercase": lambda key, value: value.lower(),
    "uppercase": lambda key, value: value.upper(),
    "not_empty": _not_empty,
}


def interpolate(template: str, lookup: Callable[[str], str | None]) -> str:
    """Expand every placeholder in ``template`` using ``lookup``.

    ``lookup`` is called once per placeholder, left to right; a ``None`` result
    counts as an empty string. A template without placeholders is returned
    unchanged and ``lookup`` is never called.

    Raises:
        TemplateError: On an unknown command or a failed ``not_empty`` check.
    """
    if PLACEHOLDER_RE.search(template) is None:
        return template

    def expand(match: re.Match[str]) -> str:
        key, command = match.group(1), match.group(2)
        value = lookup(key) or ""
        if command is None:
            return value
        handler = COMMANDS.get(command)
        if handler is None:
            raise TemplateError(f"Invalid command '{command}' in placeholder '{match.group(0)}'")
        return handler(key, value)

    return PLACEHOLDER_RE.sub(expand, template)


def placeholders(template: str) -> list[tuple[str, str | None]]:
    """Return the ``(name, command)`` pairs referenced by ``template``."""
    return [(m.group(1), m.group(2)) for m in PLACEHOLDER_RE.finditer(template)]


def validate_template(template: str) -> None:
    """Raise TemplateError if ``template`` uses a command that does not exist."""
    for _, command in placeholders(template):
        if command is not None and command not in COMMANDS:
            raise TemplateError(f"Invalid command '{command}' in template '{template}'")
