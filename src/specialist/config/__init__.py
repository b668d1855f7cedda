"""Configuration loading for specialist."""

from specialist.config.loader import (
    get_home_config_path,
    get_local_config_path,
    load_composition_config,
    load_yaml_config,
)
from specialist.config.schema import DEFAULT_CONFIG, CompositionConfig

__all__ = [
    "CompositionConfig",
    "DEFAULT_CONFIG",
    "get_home_config_path",
    "get_local_config_path",
    "load_composition_config",
    "load_yaml_config",
]
