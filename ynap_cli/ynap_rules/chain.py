"""Ordered composition of rules."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ynap_cli.shared.logging import Logger
from ynap_cli.ynap_convert.types import Record

from .base import Transformer
from .loader import RuleSet
from .payees import Payees


class RuleChain(Transformer):
    """Apply a sequence of rules to each record, in order.

    Every rule runs regardless of whether an earlier one fired, so later rules
    see the output of earlier ones.
    """

    def __init__(self, rules: Iterable[Transformer] = (), *, label: str | None = None) -> None:
        self.rules: tuple[Transformer, ...] = tuple(rules)
        self.label = label

    def __iter__(self) -> Iterator[Transformer]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def is_match(self, record: Record) -> bool:
        return any(rule.is_match(record) for rule in self.rules)

    def transform(self, record: Record) -> bool:
        fired = False
        for rule in self.rules:
            fired = rule.transform(record) or fired
        return fired

    def apply(self, records: Iterable[Record]) -> int:
        """Transform every record; return how many had at least one rule fire."""
        return sum(1 for record in records if self.transform(record))


def build_chain(
    rule_set: RuleSet,
    *,
    case_insensitive_payees: bool = True,
    logger: Logger | None = None,
) -> RuleChain:
    """Build the conversion pipeline from a rule set.

    Pre-transform matchers run first, on the raw bank fields. The strict payee
    resolver follows, and post-transform matchers run last so they can rely on
    canonical payee names.
    """
    payees = Payees(
        rule_set.payees,
        strict=True,
        case_insensitive=case_insensitive_payees,
        logger=logger,
        label="payees",
    )
    return RuleChain([*rule_set.pre_transform, payees, *rule_set.post_transform])
