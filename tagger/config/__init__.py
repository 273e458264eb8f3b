from .loader import CONFIG_FILENAME, DEFAULT_CONFIG_TEMPLATE, config_search_path, load_config
from .models import (
    ClickHouseConfig,
    CorpusConfig,
    MatcherConfig,
    OutputConfig,
    TaggerConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_TEMPLATE",
    "ClickHouseConfig",
    "CorpusConfig",
    "MatcherConfig",
    "OutputConfig",
    "TaggerConfig",
    "config_search_path",
    "load_config",
]
