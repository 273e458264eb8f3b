"""Shared test fixtures for the tagger."""

import pytest

from tagger.config.models import TaggerConfig
from tagger.corpus.decoder import encode_corpus
from tagger.corpus.models import Corpus
from tagger.rules.models import RuleSet, RuleSpec


SAMPLE_RULES_TOML = """\
[[tag]]
has-prefix = "servers."
tags = ["category=servers"]

[[tag]]
regexp = 'db\\.primary\\.latency'
tags = ["role=db"]

[[tag]]
has-suffix = ".cpu.load"
contains = "web"
tags = ["kind=cpu", "tier=web"]
"""

SAMPLE_RULES_YAML = """\
rules:
  - has-prefix: "servers."
    tags: ["category=servers"]
  - regexp: 'db\\.primary\\.latency'
    tags: "role=db"
"""

SAMPLE_PATHS = [
    b"servers.",
    b"servers.web01.",
    b"servers.web01.cpu.load",
    b"servers.db01.",
    b"servers.db01.disk.used",
    b"db.",
    b"db.primary.",
    b"db.primary.latency",
    b"other.metric",
]


def _compile_rules(*specs: dict) -> RuleSet:
    return RuleSet.compile(RuleSpec.model_validate(s) for s in specs)


@pytest.fixture
def make_ruleset():
    """Factory compiling rule dicts written with rule-file keys."""
    return _compile_rules


@pytest.fixture
def sample_paths():
    return list(SAMPLE_PATHS)


@pytest.fixture
def sample_corpus(sample_paths):
    return Corpus.from_paths(sample_paths)


@pytest.fixture
def sample_buffer(sample_paths):
    return encode_corpus(sample_paths)


@pytest.fixture
def sample_rules():
    return _compile_rules(
        {"has-prefix": "servers.", "tags": ["category=servers"]},
        {"regexp": r"db\.primary\.latency", "tags": ["role=db"]},
        {"has-suffix": ".cpu.load", "contains": "web", "tags": ["kind=cpu", "tier=web"]},
    )


@pytest.fixture
def rules_toml(tmp_path):
    path = tmp_path / "tagger.toml"
    path.write_text(SAMPLE_RULES_TOML)
    return path


@pytest.fixture
def rules_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(SAMPLE_RULES_YAML)
    return path


@pytest.fixture
def corpus_file(tmp_path, sample_buffer):
    path = tmp_path / "tree.bin"
    path.write_bytes(sample_buffer)
    return path


@pytest.fixture
def sample_config():
    return TaggerConfig()
