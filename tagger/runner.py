"""Batch runner: rules + corpus -> matched, closed and emitted tags."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from tagger.config.models import TaggerConfig
from tagger.corpus.decoder import decode_corpus
from tagger.corpus.models import Corpus
from tagger.corpus.source import ClickHouseSource, read_corpus_file
from tagger.matcher import Matcher, MatchStats
from tagger.output.sink import Sink
from tagger.propagation import PropagationEngine
from tagger.rules.loader import load_rules
from tagger.rules.models import RuleSet
from tagger.rules.prefix_tree import PrefixTree

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one batch run."""

    corpus: Corpus
    stats: MatchStats
    emitted: int = 0
    timings: dict[str, float] = field(default_factory=dict)


@contextmanager
def _stage(name: str, timings: dict[str, float]) -> Iterator[None]:
    start = time.perf_counter()
    yield
    elapsed = time.perf_counter() - start
    timings[name] = elapsed
    logger.info("%s took %.3fs", name, elapsed, extra={"stage": name, "duration": elapsed})


def tag_corpus(
    rules: RuleSet,
    corpus: Corpus,
    *,
    workers: int = 1,
    timings: dict[str, float] | None = None,
) -> MatchStats:
    """Match *rules* against *corpus* and close the tags over the hierarchy.

    Every stage runs to completion before the next one starts.
    """
    timings = timings if timings is not None else {}

    with _stage("make prefix tree", timings):
        tree = PrefixTree.from_rules(rules)
    matcher = Matcher(rules, tree, workers=workers)
    stats = MatchStats(metrics=len(corpus))

    with _stage("prefix tree match", timings):
        stats.indexed_matches = matcher.run_indexed(corpus)
    with _stage("fullscan match", timings):
        stats.fullscan_matches = matcher.run_fullscan(corpus)

    engine = PropagationEngine(corpus)
    with _stage("copy tags from parents to childs", timings):
        engine.down()
    with _stage("copy tags from childs to parents", timings):
        engine.up()

    return stats


def emit_results(corpus: Corpus, sink: Sink) -> int:
    """Send every tagged metric to *sink* in corpus order."""
    emitted = 0
    for m in corpus.tagged():
        sink.emit(m.path, m.tags)
        emitted += 1
    return emitted


def prepare_batch(
    rules_file: str | Path,
    read_corpus: Callable[[], bytes],
    *,
    workers: int = 1,
) -> BatchResult:
    """Load, match and close a batch without emitting anything."""
    timings: dict[str, float] = {}

    with _stage("parse rules", timings):
        rules = load_rules(rules_file)
    logger.debug("loaded %d rules (%d indexed)", len(rules), len(rules.indexed))

    with _stage("read and parse metrics", timings):
        corpus = decode_corpus(read_corpus())
    logger.debug("decoded %d metrics", len(corpus))

    stats = tag_corpus(rules, corpus, workers=workers, timings=timings)
    return BatchResult(corpus=corpus, stats=stats, timings=timings)


def finish_batch(result: BatchResult, sink: Sink) -> BatchResult:
    """Emit a prepared batch to *sink*."""
    with _stage("emit", result.timings):
        result.emitted = emit_results(result.corpus, sink)
    logger.info("tagged %d of %d metrics", result.emitted, len(result.corpus))
    return result


def run_batch(
    rules_file: str | Path,
    read_corpus: Callable[[], bytes],
    sink: Sink,
    *,
    workers: int = 1,
) -> BatchResult:
    """Run one full batch.

    Any error is raised before the first emit, so a failed batch never
    produces partial output.
    """
    result = prepare_batch(rules_file, read_corpus, workers=workers)
    return finish_batch(result, sink)


def corpus_reader(config: TaggerConfig) -> Callable[[], bytes]:
    """Pick the corpus source configured in *config*."""
    cfg = config.corpus
    if cfg.source == "clickhouse":
        ch = cfg.clickhouse
        return ClickHouseSource(ch.url, table=ch.table, day=ch.date, timeout=ch.timeout).fetch
    return lambda: read_corpus_file(cfg.path)


def make(config: TaggerConfig, sink: Sink) -> BatchResult:
    """Run a batch entirely from configuration."""
    return run_batch(
        config.rules_file,
        corpus_reader(config),
        sink,
        workers=config.matcher.workers,
    )
