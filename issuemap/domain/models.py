"""
models.py - Domain models
Single responsibility: typed containers for core entities.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from issuemap.config import APP_NAME, DEFAULT_SEARCH_LIMIT

# Ordered by workflow / severity; the order doubles as the sort rank.
ISSUE_TYPES: tuple[str, ...] = ("bug", "feature", "task", "epic", "improvement")
STATUSES: tuple[str, ...] = ("open", "in-progress", "review", "done", "closed")
PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "critical")

DEFAULT_TYPE = "task"
DEFAULT_STATUS = "open"
DEFAULT_PRIORITY = "medium"

# Statuses that stamp closed_at
CLOSED_STATUSES = frozenset({"done", "closed"})


@dataclass
class Issue:
    title: str
    description: str = ""
    type: str = DEFAULT_TYPE
    status: str = DEFAULT_STATUS
    priority: str = DEFAULT_PRIORITY
    assignee: str = ""
    branch: str = ""
    labels: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    id: Optional[int] = None


@dataclass
class ProjectConfig:
    name: str = APP_NAME
    default_limit: int = DEFAULT_SEARCH_LIMIT
    colors: bool = True
    saved_searches: dict[str, str] = field(default_factory=dict)
