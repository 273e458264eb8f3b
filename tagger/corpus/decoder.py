"""Decoder for the varint-length-prefixed metric corpus format.

A corpus buffer is a plain concatenation of ``(uvarint N)(N path bytes)``
entries. This is the layout ClickHouse produces for a single ``String``
column in ``RowBinary`` format.
"""

from __future__ import annotations

from collections.abc import Iterable

from tagger.corpus.models import Corpus, Metric
from tagger.corpus.varint import encode_uvarint, read_uvarint
from tagger.errors import CorpusDecodeError


def count_metrics(buf: bytes) -> int:
    """Walk the length prefixes and return the number of entries.

    Raises CorpusDecodeError unless the entries end exactly at the end of
    the buffer.
    """
    count = 0
    offset = 0
    end = len(buf)
    while offset < end:
        length, data_start = read_uvarint(buf, offset)
        offset = data_start + length
        count += 1
    if offset != end:
        raise CorpusDecodeError(
            f"entry overruns buffer by {offset - end} bytes", end
        )
    return count


def decode_corpus(buf: bytes) -> Corpus:
    """Decode *buf* into a Corpus.

    The buffer is validated in full before any Metric is built, so a
    malformed buffer never yields a partial corpus.
    """
    count = count_metrics(buf)
    metrics: list[Metric] = []
    seen: set[bytes] = set()

    offset = 0
    for _ in range(count):
        length, data_start = read_uvarint(buf, offset)
        offset = data_start + length
        path = bytes(buf[data_start:offset])
        if path in seen:
            raise CorpusDecodeError(f"duplicate path {path!r}", data_start)
        seen.add(path)
        metrics.append(Metric(path=path))

    return Corpus(metrics)


def encode_corpus(paths: Iterable[bytes]) -> bytes:
    """Inverse of decode_corpus: concatenate varint-prefixed paths."""
    out = bytearray()
    for path in paths:
        out += encode_uvarint(len(path))
        out += path
    return bytes(out)
