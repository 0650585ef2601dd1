"""Base class shared by every rule kind."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ynap_cli.ynap_convert.types import Record


class Transformer(ABC):
    """A rule that may rewrite a Record.

    Implemented by :class:`~ynap_cli.ynap_rules.matcher.Matcher`,
    :class:`~ynap_cli.ynap_rules.payees.Payees` and
    :class:`~ynap_cli.ynap_rules.chain.RuleChain`.
    """

    label: str | None = None

    @abstractmethod
    def is_match(self, record: Record) -> bool:
        """Return True if the rule would fire for ``record``."""

    @abstractmethod
    def transform(self, record: Record) -> bool:
        """Apply the rule to ``record`` in place; return True if it fired."""

    def describe(self) -> str:
        return self.label or type(self).__name__
