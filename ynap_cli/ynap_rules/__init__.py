"""Rule engine: template interpolation, matchers, payee aliases and rule chains."""

from __future__ import annotations

from .base import Transformer
from .chain import RuleChain, build_chain
from .loader import RuleSet, load_rule_files, load_rules, merge_rule_sets, parse_rules
from .matcher import Matcher
from .payees import Payees
from .template import interpolate

__all__ = [
    "Matcher",
    "Payees",
    "RuleChain",
    "RuleSet",
    "Transformer",
    "build_chain",
    "interpolate",
    "load_rule_files",
    "load_rules",
    "merge_rule_sets",
    "parse_rules",
]
