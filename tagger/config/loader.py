"""Locate, read and validate tagger.yaml."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TaggerConfig

CONFIG_FILENAME = "tagger.yaml"

# ${VAR} or ${VAR:-fallback}
_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def config_search_path(cli_path: str | None = None) -> list[Path]:
    """Config files consulted by load_config, highest priority first.

    An explicit path replaces the search entirely.
    """
    if cli_path:
        return [Path(cli_path)]
    return [Path(CONFIG_FILENAME), Path.home() / ".tagger" / "config.yaml"]


def load_config(cli_path: str | None = None) -> TaggerConfig:
    """Return the first config found on the search path, else defaults.

    Raises ValueError when an explicit *cli_path* does not exist or when
    the chosen file is not a valid config.
    """
    for path in config_search_path(cli_path):
        if path.is_file():
            return _parse_config_file(path)
        if cli_path:
            raise ValueError(f"Config file not found: {path}")
    return TaggerConfig()


def _parse_config_file(path: Path) -> TaggerConfig:
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return TaggerConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: top level must be a mapping")
    try:
        return TaggerConfig.model_validate(_expand_env_vars(raw))
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def _expand_env_vars(value: object) -> object:
    """Substitute environment references in every string of a YAML tree.

    Unset variables without a fallback become the empty string.
    """
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    return value


# Written by `tagger config init`
DEFAULT_CONFIG_TEMPLATE = """\
# tagger.yaml

# Tagging rules (.toml with [[tag]] tables, or .yaml with a `rules:` list)
rules_file: "tagger.toml"

# Metric corpus
corpus:
  source: "file"               # file | clickhouse
  path: "tree.bin"             # varint-length-prefixed path dump
  # clickhouse:
  #   url: "${CLICKHOUSE_URL:-http://localhost:8123}"
  #   table: "graphite_tree"
  #   date: "2026-01-01"        # omit to read every date
  #   timeout: 60

# Matching
matcher:
  workers: 1                   # threads for the matching passes

# Output
output:
  format: "text"               # text | jsonl
  # path: "tags.txt"           # default: stdout

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
