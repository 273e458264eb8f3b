import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ClickHouseConfig(BaseModel):
    url: str = "http://localhost:8123"
    table: str = "graphite_tree"
    date: datetime.date | None = None
    timeout: float = 60.0


class CorpusConfig(BaseModel):
    source: Literal["file", "clickhouse"] = "file"
    path: str = "tree.bin"
    clickhouse: ClickHouseConfig = Field(default_factory=ClickHouseConfig)


class MatcherConfig(BaseModel):
    workers: int = Field(default=1, ge=1)


class OutputConfig(BaseModel):
    format: Literal["text", "jsonl"] = "text"
    path: str | None = None


class TaggerConfig(BaseModel):
    rules_file: str = "tagger.toml"
    corpus: CorpusConfig = Field(default_factory=CorpusConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
