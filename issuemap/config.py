"""
config.py - Path resolution and app constants
issuemap v0.1
"""

import os
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------

PROJECT_DIR_NAME = ".issuemap"
DB_FILENAME = "issues.db"
CONFIG_FILENAME = "config.json"


@dataclass(frozen=True)
class ProjectPaths:
    root: Path
    db_path: str
    config_path: str


def find_project_dir(start: str | Path | None = None) -> Path | None:
    """
    Locate the .issuemap directory.
    - ISSUEMAP_DIR set: that directory, as given
    - otherwise      : walk up from start (default cwd) like git does for .git
    Returns None when no project directory exists.
    """
    override = os.environ.get("ISSUEMAP_DIR")
    if override:
        return Path(override)

    current = Path(start).resolve() if start else Path.cwd()
    while True:
        candidate = current / PROJECT_DIR_NAME
        if candidate.is_dir():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def init_target_dir(explicit: str | Path | None = None) -> Path:
    """Where `issuemap init` creates the project directory."""
    if explicit:
        return Path(explicit)
    override = os.environ.get("ISSUEMAP_DIR")
    if override:
        return Path(override)
    return Path.cwd() / PROJECT_DIR_NAME


def project_paths(root: str | Path) -> ProjectPaths:
    root = Path(root)
    return ProjectPaths(
        root=root,
        db_path=str(root / DB_FILENAME),
        config_path=str(root / CONFIG_FILENAME),
    )


# ---------------------------------------------------------------------------
# App constants
# ---------------------------------------------------------------------------

APP_NAME = "issuemap"
APP_VERSION = "0.1.0"
DEFAULT_SEARCH_LIMIT = 50  # applied when a query carries no limit:N
LOG_LEVEL_ENV = "ISSUEMAP_LOG_LEVEL"

# ---------------------------------------------------------------------------
# Color palette (rich style names, GitHub-like)
# ---------------------------------------------------------------------------

COLOR_OPEN = "green"
COLOR_IN_PROGRESS = "yellow"
COLOR_REVIEW = "cyan"
COLOR_DONE = "blue"
COLOR_CLOSED = "magenta"
COLOR_TEXT_MUTED = "dim"
COLOR_PRIMARY = "bold blue"
COLOR_DANGER = "bold red"
COLOR_WARNING = "yellow"
COLOR_SUCCESS = "green"

STATUS_COLORS = {
    "open": COLOR_OPEN,
    "in-progress": COLOR_IN_PROGRESS,
    "review": COLOR_REVIEW,
    "done": COLOR_DONE,
    "closed": COLOR_CLOSED,
}

PRIORITY_COLORS = {
    "low": COLOR_TEXT_MUTED,
    "medium": "white",
    "high": COLOR_WARNING,
    "critical": COLOR_DANGER,
}
