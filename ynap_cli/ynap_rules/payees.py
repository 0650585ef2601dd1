"""Payee alias resolution."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from ynap_cli.shared.exceptions import ConfigurationError
from ynap_cli.shared.logging import Logger, get_logger
from ynap_cli.ynap_convert.types import Record

from .base import Transformer


def alias_pattern(alias: str) -> str:
    """Return the regex source for one configured alias.

    Aliases written as ``^...$`` are used as regular expressions; anything else
    matches as a literal substring.
    """
    if alias.startswith("^") and alias.endswith("$"):
        return alias
    return re.escape(alias)


def compile_aliases(
    aliases: Iterable[str], *, case_insensitive: bool = False
) -> list[re.Pattern[str]]:
    """Compile each alias on its own; a payee matches when any of them does."""
    flags = re.IGNORECASE if case_insensitive else 0
    return [re.compile(alias_pattern(str(alias)), flags) for alias in aliases]


class Payees(Transformer):
    """Map raw payee strings onto canonical payee names.

    Canonical names are tried in the order of ``aliases``. In non-strict mode
    the first matching name wins. Strict mode also keeps the first match but
    checks every candidate and logs a warning when more than one name matches,
    since that usually means an alias is too broad.
    """

    def __init__(
        self,
        aliases: Mapping[str, Iterable[str]] | None = None,
        *,
        strict: bool = False,
        case_insensitive: bool = False,
        logger: Logger | None = None,
        label: str | None = None,
    ) -> None:
        self.strict = strict
        self.case_insensitive = case_insensitive
        self.label = label
        self._logger = logger or get_logger()
        self.aliases: dict[str, list[re.Pattern[str]]] = {}
        for name, patterns in (aliases or {}).items():
            if isinstance(patterns, str):
                patterns = [patterns]
            try:
                self.aliases[str(name)] = compile_aliases(
                    patterns, case_insensitive=case_insensitive
                )
            except re.error as exc:
                raise ConfigurationError(
                    f"Invalid alias pattern for payee '{name}': {exc}"
                ) from exc

    def __len__(self) -> int:
        return len(self.aliases)

    def is_match(self, record: Record) -> bool:
        return any(_matches(patterns, record.payee) for patterns in self.aliases.values())

    def transform(self, record: Record) -> bool:
        original = record.payee
        matched: list[str] = []
        for name, patterns in self.aliases.items():
            if not _matches(patterns, original):
                continue
            matched.append(name)
            if len(matched) == 1:
                record.payee = name
            if not self.strict:
                break

        if len(matched) > 1:
            names = "\n".join(f"  - {name}" for name in matched)
            self._logger.warning(
                f"Multiple aliases match payee '{original}', using '{matched[0]}':\n{names}"
            )
        if matched:
            record.transformed = True
        return bool(matched)


def _matches(patterns: list[re.Pattern[str]], value: str) -> bool:
    return any(pattern.search(value) for pattern in patterns)
