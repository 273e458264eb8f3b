"""Rule-based tagging of Graphite metric trees."""

from tagger.corpus import Corpus, Metric, decode_corpus, encode_corpus
from tagger.errors import (
    CorpusDecodeError,
    CorpusFetchError,
    RuleCompileError,
    RuleLoadError,
    TaggerError,
)
from tagger.matcher import Matcher, MatchStats
from tagger.propagation import PropagationEngine, close
from tagger.rules import PrefixTree, Rule, RuleSet, RuleSpec, load_rules
from tagger.runner import BatchResult, make, run_batch, tag_corpus

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "Corpus",
    "CorpusDecodeError",
    "CorpusFetchError",
    "MatchStats",
    "Matcher",
    "Metric",
    "PrefixTree",
    "PropagationEngine",
    "Rule",
    "RuleCompileError",
    "RuleLoadError",
    "RuleSet",
    "RuleSpec",
    "TaggerError",
    "close",
    "decode_corpus",
    "encode_corpus",
    "load_rules",
    "make",
    "run_batch",
    "tag_corpus",
]
