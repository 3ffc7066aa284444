"""
config.py - Project configuration store
Single responsibility: read and write .issuemap/config.json.
"""
import json
import logging
import os

from issuemap.domain.errors import ConfigError
from issuemap.domain.models import ProjectConfig

logger = logging.getLogger(__name__)


def load_config(path: str) -> ProjectConfig:
    """Read the project config. A missing file yields the defaults."""
    if not os.path.exists(path):
        return ProjectConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Config file %s is not valid JSON: %s", path, e)
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    defaults = ProjectConfig()
    saved = data.get("saved_searches") or {}
    if not isinstance(saved, dict):
        raise ConfigError(f"saved_searches in {path} must be an object")
    try:
        default_limit = int(data.get("default_limit", defaults.default_limit))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"default_limit in {path} must be an integer") from e
    if default_limit < 0:
        raise ConfigError(f"default_limit in {path} must not be negative")
    return ProjectConfig(
        name=data.get("name", defaults.name),
        default_limit=default_limit,
        colors=bool(data.get("colors", defaults.colors)),
        saved_searches={str(k): str(v) for k, v in saved.items()},
    )


def save_config(path: str, config: ProjectConfig) -> None:
    data = {
        "name": config.name,
        "default_limit": config.default_limit,
        "colors": config.colors,
        "saved_searches": dict(config.saved_searches),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    logger.debug("Config written: %s", path)
