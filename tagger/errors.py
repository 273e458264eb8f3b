"""Exception hierarchy for the tagger."""

from __future__ import annotations


class TaggerError(Exception):
    """Base class for every fatal tagger error."""


class RuleLoadError(TaggerError):
    """Raised when a rule file is unreadable or structurally invalid."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class RuleCompileError(RuleLoadError):
    """Raised when a rule's regular expression does not compile."""

    def __init__(
        self, index: int, pattern: str, cause: Exception, source: str | None = None
    ) -> None:
        self.index = index
        self.pattern = pattern
        super().__init__(f"rule #{index}: invalid regexp {pattern!r}: {cause}", source)
        self.__cause__ = cause


class CorpusDecodeError(TaggerError):
    """Raised when a corpus buffer does not decode exactly."""

    def __init__(self, message: str, offset: int) -> None:
        self.offset = offset
        super().__init__(f"{message} (offset {offset})")


class CorpusFetchError(TaggerError):
    """Wraps I/O failures of a corpus source."""

    def __init__(self, source: str, cause: Exception) -> None:
        self.source = source
        super().__init__(f"fetching corpus from {source} failed: {cause}")
        self.__cause__ = cause
