"""
saved_search_service.py - Saved searches
Single responsibility: name -> raw query string mapping kept in the project
config. Raw strings are stored untouched and re-parsed on every run.
"""
import logging

from issuemap.database.repositories import config as config_repo
from issuemap.domain.errors import SavedSearchNotFoundError

logger = logging.getLogger(__name__)


def save(config_path: str, name: str, raw_query: str) -> None:
    """Store raw_query under name; an existing entry is overwritten."""
    name = (name or "").strip()
    if not name:
        raise ValueError("Saved search name is required")
    config = config_repo.load_config(config_path)
    if name in config.saved_searches:
        logger.info("Overwriting saved search '%s'", name)
    config.saved_searches[name] = raw_query
    config_repo.save_config(config_path, config)


def load(config_path: str, name: str) -> str:
    config = config_repo.load_config(config_path)
    try:
        return config.saved_searches[name]
    except KeyError:
        raise SavedSearchNotFoundError(name) from None


def list_all(config_path: str) -> dict[str, str]:
    return dict(config_repo.load_config(config_path).saved_searches)


def delete(config_path: str, name: str) -> None:
    config = config_repo.load_config(config_path)
    if name not in config.saved_searches:
        raise SavedSearchNotFoundError(name)
    del config.saved_searches[name]
    config_repo.save_config(config_path, config)
