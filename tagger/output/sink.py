"""Result sinks for tagged metrics."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from typing import IO, Literal, Protocol, runtime_checkable


def decode_path(path: bytes) -> str:
    """Decode a raw path for text output without losing undecodable bytes."""
    return path.decode("utf-8", errors="surrogateescape")


@runtime_checkable
class Sink(Protocol):
    """Receives one call per tagged metric after propagation completes."""

    def emit(self, path: bytes, tags: Iterable[str]) -> None: ...


class TextSink:
    """``<path> <tag>,<tag>`` lines, tags sorted.

    When the stream has a binary ``buffer`` (stdout, files opened in text
    mode) paths go out as their raw bytes, whatever the stream encoding.
    Plain text streams get the surrogate-escaped form.
    """

    def __init__(self, stream: IO[str] | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self._raw: IO[bytes] | None = getattr(self.stream, "buffer", None)
        if self._raw is not None:
            # anything already queued on the text layer goes first
            self.stream.flush()

    def emit(self, path: bytes, tags: Iterable[str]) -> None:
        joined = ",".join(sorted(tags))
        if self._raw is not None:
            self._raw.write(path + b" " + joined.encode("utf-8") + b"\n")
        else:
            self.stream.write(f"{decode_path(path)} {joined}\n")


class JsonLinesSink:
    """One ``{"path": ..., "tags": [...]}`` object per line."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def emit(self, path: bytes, tags: Iterable[str]) -> None:
        record = {
            "path": path.decode("utf-8", errors="backslashreplace"),
            "tags": sorted(tags),
        }
        self.stream.write(json.dumps(record) + "\n")


class CollectSink:
    """Keeps results in memory, in emission order."""

    def __init__(self) -> None:
        self.results: list[tuple[bytes, frozenset[str]]] = []

    def emit(self, path: bytes, tags: Iterable[str]) -> None:
        self.results.append((path, frozenset(tags)))

    def as_dict(self) -> dict[bytes, frozenset[str]]:
        return dict(self.results)


def create_sink(format: Literal["text", "jsonl"], stream: IO[str] | None = None) -> Sink:
    if format == "text":
        return TextSink(stream)
    if format == "jsonl":
        return JsonLinesSink(stream)
    raise ValueError(f"Unknown output format: {format}")
