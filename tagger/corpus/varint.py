"""Unsigned LEB128 varints, as used by ClickHouse RowBinary string lengths."""

from __future__ import annotations

from tagger.errors import CorpusDecodeError

# A uint64 needs at most 10 groups of 7 bits.
MAX_VARINT_LEN = 10


def read_uvarint(buf: bytes | memoryview, offset: int = 0) -> tuple[int, int]:
    """Decode one varint starting at *offset*.

    Returns ``(value, next_offset)``. Raises CorpusDecodeError when the
    buffer ends mid-varint or the value does not fit in 64 bits.
    """
    value = 0
    shift = 0
    end = len(buf)
    pos = offset
    for i in range(MAX_VARINT_LEN):
        if pos >= end:
            raise CorpusDecodeError("truncated length prefix", offset)
        b = buf[pos]
        pos += 1
        if b < 0x80:
            if i == MAX_VARINT_LEN - 1 and b > 1:
                raise CorpusDecodeError("length prefix overflows uint64", offset)
            return value | (b << shift), pos
        value |= (b & 0x7F) << shift
        shift += 7
    raise CorpusDecodeError("length prefix overflows uint64", offset)


def encode_uvarint(value: int) -> bytes:
    """Encode a non-negative integer as a varint."""
    if value < 0:
        raise ValueError(f"varint must be non-negative, got {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)
