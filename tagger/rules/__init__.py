"""Tagging rules: declarations, compilation and the prefix index."""

from tagger.rules.loader import load_rules, parse_rules
from tagger.rules.models import Rule, RuleSet, RuleSpec
from tagger.rules.prefix_tree import PrefixTree

__all__ = [
    "PrefixTree",
    "Rule",
    "RuleSet",
    "RuleSpec",
    "load_rules",
    "parse_rules",
]
