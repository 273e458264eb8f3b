"""Byte trie over the literal prefixes of rules.

Each node has 256 child slots, one per possible next byte, so paths are
walked as raw bytes without any text decoding.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from tagger.corpus.models import Metric
from tagger.rules.models import Rule


class PrefixTree:
    """One trie node. The root stands for the empty prefix."""

    __slots__ = ("next", "rules")

    def __init__(self) -> None:
        self.next: list[PrefixTree | None] = [None] * 256
        self.rules: list[Rule] | None = None

    @classmethod
    def from_rules(cls, rules: Iterable[Rule]) -> PrefixTree:
        """Index every rule carrying a literal prefix."""
        tree = cls()
        for rule in rules:
            if rule.has_prefix is not None:
                tree.add(rule.has_prefix, rule)
        return tree

    def add(self, prefix: bytes, rule: Rule) -> None:
        x = self
        for b in prefix:
            child = x.next[b]
            if child is None:
                child = x.next[b] = PrefixTree()
            x = child
        if x.rules is None:
            x.rules = []
        x.rules.append(rule)

    def walk(self, path: bytes) -> Iterator[Rule]:
        """Yield the rules attached to every trie node *path* passes through.

        Stops at the first byte with no child edge: no indexed prefix can
        match past that point.
        """
        x = self
        for b in path:
            x = x.next[b]
            if x is None:
                return
            if x.rules is not None:
                yield from x.rules

    def match_and_mark(self, metric: Metric) -> int:
        """Apply every candidate rule to *metric*; returns the match count."""
        matched = 0
        for rule in self.walk(metric.path):
            if rule.match_and_mark(metric):
                matched += 1
        return matched

    def node_count(self) -> int:
        """Number of nodes, root included."""
        return 1 + sum(c.node_count() for c in self.next if c is not None)
