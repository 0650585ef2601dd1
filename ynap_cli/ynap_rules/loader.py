"""Rule file loading.

A rule file has three optional sections::

    pre_transform:
      - label: strip card prefix
        match: { payee: '^VISA (?P<rest>.*)$' }
        replace: { payee: '${rest}' }
    payees:
      Coffee Shop: [COFFEE, '^CAFE \\d+$']
    post_transform:
      - match: { payee: '^Coffee Shop$' }
        replace: { category: 'Food: Coffee' }
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ynap_cli.shared.exceptions import ConfigurationError

from .matcher import Matcher

_KNOWN_SECTIONS = {"pre_transform", "payees", "post_transform"}


@dataclass(slots=True)
class RuleSet:
    """Parsed contents of one or more rule files."""

    pre_transform: list[Matcher] = field(default_factory=list)
    payees: dict[str, list[str]] = field(default_factory=dict)
    post_transform: list[Matcher] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pre_transform) + len(self.payees) + len(self.post_transform)


def load_rules(path: str | Path) -> RuleSet:
    """Load and parse a rule file.

    Raises:
        ConfigurationError: If the file is missing or its content is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Rule file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Rule file {path} is not valid YAML: {exc}") from exc

    return parse_rules(data, source=str(path))


def parse_rules(data: Any, source: str = "rules") -> RuleSet:
    """Parse YAML data into a RuleSet."""
    if data is None:
        return RuleSet()
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{source}: rule file must define a mapping root object")

    unknown = sorted(set(data) - _KNOWN_SECTIONS)
    if unknown:
        raise ConfigurationError(f"{source}: unknown section(s): {', '.join(map(str, unknown))}")

    try:
        return RuleSet(
            pre_transform=_parse_matchers(data.get("pre_transform"), "pre_transform"),
            payees=_parse_payees(data.get("payees")),
            post_transform=_parse_matchers(data.get("post_transform"), "post_transform"),
        )
    except ConfigurationError as exc:
        raise ConfigurationError(f"{source}: {exc}") from exc


def _parse_matchers(data: Any, section: str) -> list[Matcher]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigurationError(f"'{section}' must be a list")
    return [
        Matcher.from_config(entry, position=index)
        for index, entry in enumerate(data, start=1)
    ]


def _parse_payees(data: Any) -> dict[str, list[str]]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError("'payees' must map payee names to alias lists")
    payees: dict[str, list[str]] = {}
    for name, aliases in data.items():
        if isinstance(aliases, str):
            aliases = [aliases]
        if not isinstance(aliases, list):
            raise ConfigurationError(f"Aliases for payee '{name}' must be a list")
        payees[str(name)] = [str(alias) for alias in aliases]
    return payees


def merge_rule_sets(*rule_sets: RuleSet) -> RuleSet:
    """Combine rule sets, keeping declaration order.

    Matchers are concatenated. Aliases for a payee that appears in several sets
    are appended to the first occurrence.
    """
    merged = RuleSet()
    for rule_set in rule_sets:
        merged.pre_transform.extend(rule_set.pre_transform)
        merged.post_transform.extend(rule_set.post_transform)
        for name, aliases in rule_set.payees.items():
            merged.payees.setdefault(name, []).extend(aliases)
    return merged


def load_rule_files(paths: Iterable[str | Path]) -> RuleSet:
    return merge_rule_sets(*(load_rules(path) for path in paths))
