"""Rule matching over a corpus: a prefix-tree pass then a full-scan pass."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from tagger.corpus.models import Corpus, Metric
from tagger.rules.models import Rule, RuleSet
from tagger.rules.prefix_tree import PrefixTree

logger = logging.getLogger(__name__)


@dataclass
class MatchStats:
    """Counters from one Matcher.run()."""

    metrics: int = 0
    indexed_matches: int = 0
    fullscan_matches: int = 0

    @property
    def total_matches(self) -> int:
        return self.indexed_matches + self.fullscan_matches


def _chunks(metrics: Sequence[Metric], n: int) -> list[Sequence[Metric]]:
    size = -(-len(metrics) // n)
    return [metrics[i : i + size] for i in range(0, len(metrics), size)]


class Matcher:
    """Populates each metric's tags from direct rule matches.

    Rules with a literal prefix are reached through the PrefixTree; all other
    rules are tested against every metric. The two passes touch disjoint rule
    subsets, so their order does not affect the result.
    """

    def __init__(
        self,
        rules: RuleSet,
        prefix_tree: PrefixTree | None = None,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self.rules = rules
        self.prefix_tree = prefix_tree or PrefixTree.from_rules(rules)
        self.fullscan_rules: tuple[Rule, ...] = rules.unindexed
        self.workers = workers

    def match_indexed(self, metrics: Sequence[Metric]) -> int:
        tree = self.prefix_tree
        return sum(tree.match_and_mark(m) for m in metrics)

    def match_fullscan(self, metrics: Sequence[Metric]) -> int:
        matched = 0
        for m in metrics:
            for rule in self.fullscan_rules:
                if rule.match_and_mark(m):
                    matched += 1
        return matched

    def _run_pass(
        self, fn: Callable[[Sequence[Metric]], int], metrics: Sequence[Metric]
    ) -> int:
        # Chunks own disjoint metrics; each metric's tags have one writer.
        if self.workers == 1 or len(metrics) < 2:
            return fn(metrics)
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return sum(pool.map(fn, _chunks(metrics, self.workers)))

    def run_indexed(self, corpus: Corpus) -> int:
        """Prefix-tree pass over the whole corpus."""
        return self._run_pass(self.match_indexed, corpus.metrics)

    def run_fullscan(self, corpus: Corpus) -> int:
        """Full-scan pass over the whole corpus."""
        return self._run_pass(self.match_fullscan, corpus.metrics)

    def run(self, corpus: Corpus) -> MatchStats:
        stats = MatchStats(metrics=len(corpus))
        stats.indexed_matches = self.run_indexed(corpus)
        stats.fullscan_matches = self.run_fullscan(corpus)
        logger.debug(
            "matched %d metrics: %d indexed, %d fullscan",
            stats.metrics,
            stats.indexed_matches,
            stats.fullscan_matches,
        )
        return stats
