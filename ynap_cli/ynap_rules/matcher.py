"""Field rewrite rules driven by regex captures."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from ynap_cli.shared.exceptions import ConfigurationError, TemplateError
from ynap_cli.ynap_convert.types import Record

from .base import Transformer
from .template import interpolate, validate_template

_RULE_KEYS = {"label", "match", "replace"}


class Matcher(Transformer):
    """Rewrite fields of records whose fields all match a set of patterns.

    ``search`` maps a record key to a pattern that must be found in that key's
    value (``re.search``). Named groups from every pattern end up in one capture
    table; when two patterns share a group name the later one wins. ``replace``
    maps a record key to a template that is expanded against the capture table,
    falling back to the record's own values.
    """

    def __init__(
        self,
        search: Mapping[str, str | re.Pattern[str]] | None = None,
        replace: Mapping[str, str] | None = None,
        *,
        label: str | None = None,
    ) -> None:
        self.search: dict[str, re.Pattern[str]] = {
            key: pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
            for key, pattern in (search or {}).items()
        }
        self.replace: dict[str, str] = dict(replace or {})
        self.label = label

    @classmethod
    def from_config(cls, data: Any, *, position: int | None = None) -> Matcher:
        """Build a Matcher from a ``{label?, match, replace}`` mapping.

        Raises:
            ConfigurationError: On a malformed entry, an invalid regex or a
                template using an unknown command.
        """
        where = f"rule #{position}" if position is not None else "rule"
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"{where} must be a mapping")
        label = data.get("label")
        if label:
            where = f"{where} ({label})"

        unknown = sorted(set(map(str, data)) - _RULE_KEYS)
        if unknown:
            raise ConfigurationError(f"{where}: unknown key(s): {', '.join(unknown)}")
        missing = [key for key in ("match", "replace") if key not in data]
        if missing:
            raise ConfigurationError(f"{where}: missing required key(s): {', '.join(missing)}")

        search = data["match"]
        replace = data["replace"]
        if not isinstance(search, Mapping) or not isinstance(replace, Mapping):
            raise ConfigurationError(f"{where}: 'match' and 'replace' must be mappings")

        compiled: dict[str, re.Pattern[str]] = {}
        for key, pattern in search.items():
            try:
                compiled[str(key)] = re.compile(str(pattern))
            except re.error as exc:
                raise ConfigurationError(
                    f"{where}: invalid regex for '{key}' ({pattern!r}): {exc}"
                ) from exc

        templates = {str(key): str(value) for key, value in replace.items()}
        for template in templates.values():
            try:
                validate_template(template)
            except TemplateError as exc:
                raise ConfigurationError(f"{where}: {exc}") from exc

        return cls(compiled, templates, label=str(label) if label else None)

    def is_match(self, record: Record) -> bool:
        for key, pattern in self.search.items():
            value = record.get(key)
            if value is None or pattern.search(value) is None:
                return False
        return True

    def transform(self, record: Record) -> bool:
        captures: dict[str, str] = {}
        for key, pattern in self.search.items():
            value = record.get(key)
            if value is None:
                return False
            match = pattern.search(value)
            if match is None:
                return False
            captures.update(
                (name, group) for name, group in match.groupdict().items() if group is not None
            )

        def lookup(key: str) -> str:
            if key in captures:
                return captures[key]
            return record.get(key) or ""

        for key, template in self.replace.items():
            record.replace(key, interpolate(template, lookup))

        record.transformed = True
        return True

    def __repr__(self) -> str:
        patterns = {key: pattern.pattern for key, pattern in self.search.items()}
        return f"Matcher(label={self.label!r}, search={patterns!r}, replace={self.replace!r})"
