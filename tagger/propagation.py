"""Hierarchical tag closure over the dotted metric namespace.

Ancestors are resolved directly through the corpus index (``a.b.c`` looks
up ``a.b.`` and ``a.`` itself), so each direction is one linear pass with
no fixed-point iteration.

The phases always run down then up. Going up first would let tags that a
node received from one child flow back down into its other children.
"""

from __future__ import annotations

import logging

from tagger.corpus.models import Corpus

logger = logging.getLogger(__name__)


def propagate_down(corpus: Corpus) -> int:
    """Copy every ancestor's tags into each of its descendants.

    Returns the number of (metric, ancestor) links visited.
    """
    links = 0
    for m in corpus:
        tags = m.tags
        for parent in corpus.ancestors(m):
            tags |= parent.tags
            links += 1
    return links


def propagate_up(corpus: Corpus) -> int:
    """Copy every metric's tags into each of its ancestors.

    Returns the number of (metric, ancestor) links visited.
    """
    links = 0
    for m in corpus:
        tags = m.tags
        for parent in corpus.ancestors(m):
            parent.tags |= tags
            links += 1
    return links


class PropagationEngine:
    """Runs both closure phases over a corpus, in the fixed order."""

    def __init__(self, corpus: Corpus) -> None:
        self.corpus = corpus

    def down(self) -> int:
        return propagate_down(self.corpus)

    def up(self) -> int:
        return propagate_up(self.corpus)

    def close(self) -> None:
        links = self.down()
        self.up()
        logger.debug("closed %d metrics over %d ancestor links", len(self.corpus), links)


def close(corpus: Corpus) -> Corpus:
    """Propagate tags down then up through *corpus*; returns it for chaining."""
    PropagationEngine(corpus).close()
    return corpus
