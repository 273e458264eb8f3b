"""Metric corpus: model, wire codec and sources."""

from tagger.corpus.decoder import count_metrics, decode_corpus, encode_corpus
from tagger.corpus.models import Corpus, Metric, ancestor_keys
from tagger.corpus.source import ClickHouseSource, build_tree_query, read_corpus_file
from tagger.corpus.varint import encode_uvarint, read_uvarint

__all__ = [
    "ClickHouseSource",
    "Corpus",
    "Metric",
    "ancestor_keys",
    "build_tree_query",
    "count_metrics",
    "decode_corpus",
    "encode_corpus",
    "encode_uvarint",
    "read_corpus_file",
    "read_uvarint",
]
