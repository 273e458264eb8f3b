"""Rule declarations (pydantic) and their compiled, byte-level form."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tagger.corpus.models import Metric
from tagger.errors import RuleCompileError


class RuleSpec(BaseModel):
    """One rule entry as written in a rule file.

    Every condition that is set must hold for the rule to match. A rule with
    no conditions matches every metric.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    equal: str | None = None
    contains: str | None = None
    has_prefix: str | None = Field(default=None, alias="has-prefix")
    has_suffix: str | None = Field(default=None, alias="has-suffix")
    regexp: str | None = None
    tags: list[str] = Field(min_length=1)

    @field_validator("equal", "contains", "has_prefix", "has_suffix", "regexp")
    @classmethod
    def _empty_is_unset(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("tags", mode="before")
    @classmethod
    def _wrap_single_tag(cls, v: object) -> object:
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("tags")
    @classmethod
    def _no_blank_tags(cls, v: list[str]) -> list[str]:
        if any(not t.strip() for t in v):
            raise ValueError("tags must be non-empty strings")
        return v


def _encode(value: str | None) -> bytes | None:
    return value.encode("utf-8") if value is not None else None


@dataclass(frozen=True)
class Rule:
    """A compiled rule. Literals are raw bytes, the regexp is a bytes pattern."""

    index: int
    tags: tuple[str, ...]
    equal: bytes | None = None
    contains: bytes | None = None
    has_prefix: bytes | None = None
    has_suffix: bytes | None = None
    pattern: re.Pattern[bytes] | None = None

    @classmethod
    def compile(cls, index: int, spec: RuleSpec, source: str | None = None) -> Rule:
        pattern = None
        if spec.regexp is not None:
            try:
                pattern = re.compile(spec.regexp.encode("utf-8"))
            except re.error as e:
                raise RuleCompileError(index, spec.regexp, e, source) from e
        return cls(
            index=index,
            tags=tuple(dict.fromkeys(spec.tags)),
            equal=_encode(spec.equal),
            contains=_encode(spec.contains),
            has_prefix=_encode(spec.has_prefix),
            has_suffix=_encode(spec.has_suffix),
            pattern=pattern,
        )

    @property
    def indexed(self) -> bool:
        return self.has_prefix is not None

    def matches(self, path: bytes) -> bool:
        if self.equal is not None and path != self.equal:
            return False
        if self.has_prefix is not None and not path.startswith(self.has_prefix):
            return False
        if self.has_suffix is not None and not path.endswith(self.has_suffix):
            return False
        if self.contains is not None and self.contains not in path:
            return False
        if self.pattern is not None and self.pattern.search(path) is None:
            return False
        return True

    def match_and_mark(self, metric: Metric) -> bool:
        """Add this rule's tags to *metric* if it matches. Returns the match."""
        if not self.matches(metric.path):
            return False
        metric.tags.update(self.tags)
        return True


class RuleSet:
    """Ordered, compiled rules. Declaration order is application order."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        self.rules: tuple[Rule, ...] = tuple(rules)

    @classmethod
    def compile(cls, specs: Iterable[RuleSpec], source: str | None = None) -> RuleSet:
        """Compile every spec; the first bad regexp aborts with RuleCompileError."""
        return cls(Rule.compile(i, spec, source) for i, spec in enumerate(specs))

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    @property
    def indexed(self) -> tuple[Rule, ...]:
        """Rules with a literal prefix; matched through the prefix tree."""
        return tuple(r for r in self.rules if r.indexed)

    @property
    def unindexed(self) -> tuple[Rule, ...]:
        """Rules without a literal prefix; matched by full scan."""
        return tuple(r for r in self.rules if not r.indexed)

    @property
    def tag_names(self) -> set[str]:
        return {t for r in self.rules for t in r.tags}
