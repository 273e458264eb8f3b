"""Rule file loading (YAML, or the TOML ``[[tag]]`` layout)."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import yaml
from pydantic import ValidationError

from tagger.errors import RuleLoadError
from tagger.rules.models import RuleSet, RuleSpec

logger = logging.getLogger(__name__)

# Top-level keys that may hold the rule list
RULE_KEYS = ("rules", "tag")


def parse_rules(raw: object, source: str | None = None) -> list[RuleSpec]:
    """Validate a decoded rule document into RuleSpecs, keeping file order."""
    if raw is None:
        return []
    if isinstance(raw, dict):
        present = [k for k in RULE_KEYS if k in raw]
        unknown = set(raw) - set(RULE_KEYS)
        if unknown:
            raise RuleLoadError(f"unknown top-level keys: {sorted(unknown)}", source)
        if len(present) > 1:
            raise RuleLoadError("use either 'rules' or 'tag', not both", source)
        entries = raw[present[0]] if present else []
    else:
        entries = raw
    if not isinstance(entries, list):
        raise RuleLoadError("rule list must be a list of tables", source)

    specs: list[RuleSpec] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise RuleLoadError(f"rule #{i} must be a table, got {type(entry).__name__}", source)
        try:
            specs.append(RuleSpec.model_validate(entry))
        except ValidationError as e:
            raise RuleLoadError(f"rule #{i} is invalid: {e}", source) from e
    return specs


def _read(path: Path) -> object:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".toml":
        return tomllib.loads(text)
    return yaml.safe_load(text)


def load_rules(path: str | Path) -> RuleSet:
    """Load and compile a rule file.

    Raises RuleLoadError for unreadable or malformed files and
    RuleCompileError for a bad regular expression.
    """
    path = Path(path)
    source = str(path)
    try:
        raw = _read(path)
    except OSError as e:
        raise RuleLoadError(f"cannot read rule file: {e}", source) from e
    except (yaml.YAMLError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise RuleLoadError(f"cannot parse rule file: {e}", source) from e

    rules = RuleSet.compile(parse_rules(raw, source), source)
    if not len(rules):
        logger.warning("rule file %s defines no rules", path)
    return rules
