"""
helpers.py - CLI helper functions
Single responsibility: small formatting and parsing helpers used across the CLI.
"""
import getpass
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import typer
from rich.console import Console

from issuemap.config import (
    COLOR_DANGER,
    COLOR_TEXT_MUTED,
    PRIORITY_COLORS,
    PROJECT_DIR_NAME,
    STATUS_COLORS,
    ProjectPaths,
    find_project_dir,
    project_paths,
)


@dataclass
class CliContext:
    """Per-invocation settings handed to every command through ctx.obj."""

    project_dir: Path | None
    console: Console
    requested_dir: Path | None = None

    def paths(self) -> ProjectPaths:
        if self.project_dir is None or not self.project_dir.is_dir():
            fail(
                self.console,
                f"No {PROJECT_DIR_NAME} directory found. Run 'issuemap init' first.",
            )
        return project_paths(self.project_dir)


def fail(console: Console, message: str, code: int = 1):
    console.print(f"[{COLOR_DANGER}]Error:[/] {message}")
    raise typer.Exit(code)


def resolve_project_dir(explicit: Path | None) -> Path | None:
    if explicit is not None:
        return explicit
    return find_project_dir()


def current_user() -> str:
    return getpass.getuser()


def format_datetime(value: datetime | None) -> str:
    """datetime to "YYYY-MM-DD HH:MM"; missing values give an empty string."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M")


def status_style(status: str) -> str:
    return STATUS_COLORS.get(status, COLOR_TEXT_MUTED)


def priority_style(priority: str) -> str:
    return PRIORITY_COLORS.get(priority, COLOR_TEXT_MUTED)


def parse_labels(text: str | None) -> list[str] | None:
    """Normalize comma/newline-separated labels into a unique list.

    None means "not given" and is passed through so edits can leave labels alone.
    """
    if text is None:
        return None
    labels = []
    seen = set()
    raw = text.replace("\n", ",")
    for part in raw.split(","):
        name = part.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        labels.append(name)
    return labels
