"""Tests for the two-pass Matcher."""

from __future__ import annotations

import pytest

from tagger.corpus.models import Corpus
from tagger.matcher import Matcher, MatchStats
from tagger.rules import PrefixTree


def _direct_tags(corpus: Corpus) -> dict[bytes, set[str]]:
    return {m.path: set(m.tags) for m in corpus}


def test_direct_matches(sample_rules, sample_corpus):
    stats = Matcher(sample_rules).run(sample_corpus)
    tags = _direct_tags(sample_corpus)

    assert tags[b"servers."] == {"category=servers"}
    assert tags[b"servers.web01.cpu.load"] == {"category=servers", "kind=cpu", "tier=web"}
    assert tags[b"db.primary.latency"] == {"role=db"}
    assert tags[b"db.primary."] == set()
    assert tags[b"other.metric"] == set()

    assert stats.metrics == len(sample_corpus)
    assert stats.indexed_matches == 5
    assert stats.fullscan_matches == 2
    assert stats.total_matches == 7


def test_passes_are_separable(sample_rules, sample_corpus):
    matcher = Matcher(sample_rules)
    assert matcher.run_fullscan(sample_corpus) == 2
    assert sample_corpus.get(b"servers.").tags == set()
    assert matcher.run_indexed(sample_corpus) == 5
    assert sample_corpus.get(b"servers.").tags == {"category=servers"}


def test_fullscan_only_uses_unindexed_rules(sample_rules):
    matcher = Matcher(sample_rules)
    assert all(not r.indexed for r in matcher.fullscan_rules)
    assert len(matcher.fullscan_rules) == 2


def test_uses_given_prefix_tree(sample_rules, sample_corpus):
    empty_tree = PrefixTree()
    stats = Matcher(sample_rules, empty_tree).run(sample_corpus)
    assert stats.indexed_matches == 0


def test_rule_without_conditions_tags_everything(make_ruleset):
    rules = make_ruleset({"tags": ["all"]})
    corpus = Corpus.from_paths([b"a.", b"a.b", b"c"])
    Matcher(rules).run(corpus)
    assert all(m.tags == {"all"} for m in corpus)


@pytest.mark.parametrize("workers", [2, 3, 8, 50])
def test_threaded_matching_equals_serial(sample_rules, sample_paths, workers):
    """Chunked threaded passes produce the same tags as a serial run."""
    serial = Corpus.from_paths(sample_paths)
    threaded = Corpus.from_paths(sample_paths)
    s1 = Matcher(sample_rules).run(serial)
    s2 = Matcher(sample_rules, workers=workers).run(threaded)
    assert _direct_tags(serial) == _direct_tags(threaded)
    assert s1 == s2


def test_invalid_workers(sample_rules):
    with pytest.raises(ValueError):
        Matcher(sample_rules, workers=0)


def test_empty_corpus(sample_rules):
    assert Matcher(sample_rules, workers=4).run(Corpus([])) == MatchStats()
