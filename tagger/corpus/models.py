"""Corpus data model: metrics and the path -> metric ancestor index."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

SEPARATOR = ord(".")


@dataclass(eq=False)
class Metric:
    """One corpus entry. ``tags`` only ever grows."""

    path: bytes
    tags: set[str] = field(default_factory=set)

    @property
    def is_directory(self) -> bool:
        return self.path.endswith(b".")


def ancestor_keys(path: bytes) -> Iterator[bytes]:
    """Yield the directory keys of every ancestor of *path*, longest first.

    ``b"a.b.c"`` and ``b"a.b.c."`` both yield ``b"a.b."`` then ``b"a."``.
    """
    if path and path[-1] == SEPARATOR:
        path = path[:-1]
    index = path.rfind(b".")
    while index >= 0:
        yield path[: index + 1]
        path = path[:index]
        index = path.rfind(b".")


class Corpus:
    """Fixed-size collection of metrics with O(1) lookup by path."""

    def __init__(self, metrics: list[Metric]) -> None:
        self.metrics = metrics
        self.index: dict[bytes, Metric] = {m.path: m for m in metrics}

    @classmethod
    def from_paths(cls, paths: list[bytes]) -> Corpus:
        return cls([Metric(path=p) for p in paths])

    def __len__(self) -> int:
        return len(self.metrics)

    def __iter__(self) -> Iterator[Metric]:
        return iter(self.metrics)

    def __contains__(self, path: object) -> bool:
        return path in self.index

    def get(self, path: bytes) -> Metric | None:
        return self.index.get(path)

    def ancestors(self, metric: Metric) -> Iterator[Metric]:
        """Every ancestor of *metric* present in the corpus, found directly."""
        index = self.index
        for key in ancestor_keys(metric.path):
            parent = index.get(key)
            if parent is not None:
                yield parent

    def tagged(self) -> Iterator[Metric]:
        """Metrics with a non-empty tag set, in corpus order."""
        return (m for m in self.metrics if m.tags)

    def tag_map(self) -> dict[bytes, frozenset[str]]:
        """Snapshot of every metric's tags keyed by path."""
        return {m.path: frozenset(m.tags) for m in self.metrics}
