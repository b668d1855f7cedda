"""Configuration file loading and layering."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from specialist.config.schema import DEFAULT_CONFIG, CompositionConfig
from specialist.templates.base import SpecialistTemplate

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = ".specialist"
CONFIG_FILENAME = "config.yaml"

# Environment variable -> config field
ENV_VARS: dict[str, str] = {
    "SPECIALIST_LLM_ENABLED": "enabled",
    "SPECIALIST_LLM_PROVIDER": "provider",
    "SPECIALIST_SELECTION_MODEL": "selection_model",
    "SPECIALIST_EXTRACTION_MODEL": "extraction_model",
    "SPECIALIST_ENRICHMENT_MODEL": "enrichment_model",
    "SPECIALIST_SELECTION_TIMEOUT_MS": "timeout_ms",
    "SPECIALIST_CACHE_TTL_MS": "cache_ttl_ms",
    "SPECIALIST_FALLBACK_TO_STATIC": "fallback_to_static",
}


def get_home_config_path() -> Path:
    """Get path to global config: ~/.specialist/config.yaml."""
    return Path.home() / CONFIG_DIRNAME / CONFIG_FILENAME


def get_local_config_path(project_root: Path | None = None) -> Path:
    """Get path to project config: ./.specialist/config.yaml."""
    return (project_root or Path.cwd()) / CONFIG_DIRNAME / CONFIG_FILENAME


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found or empty."""
    if not path.exists():
        return None
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None
    result: dict[str, object] = data
    return result


def config_from_env(environ: Mapping[str, str] | None = None) -> CompositionConfig:
    """Build a config layer from SPECIALIST_* environment variables."""
    env = os.environ if environ is None else environ
    data = {field: env[var] for var, field in ENV_VARS.items() if env.get(var)}
    return CompositionConfig.from_dict(data)


def load_composition_config(
    template: SpecialistTemplate | None = None,
    *,
    project_root: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> CompositionConfig:
    """Load the merged composition configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Template ``llm_config``
    3. Global config (~/.specialist/config.yaml)
    4. Project config (./.specialist/config.yaml)
    5. SPECIALIST_* environment variables
    """
    config = DEFAULT_CONFIG

    if template is not None and template.llm_config:
        config = config.merge(CompositionConfig.from_dict(template.llm_config))

    for path in (get_home_config_path(), get_local_config_path(project_root)):
        data = load_yaml_config(path)
        if data:
            config = config.merge(CompositionConfig.from_dict(data))

    return config.merge(config_from_env(environ))

