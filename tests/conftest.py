"""Shared fixtures for issuemap tests."""

from datetime import datetime
from pathlib import Path

import pytest

from issuemap.config import ProjectPaths, project_paths
from issuemap.database.schema import initialize_schema
from issuemap.domain.models import Issue

NOW = datetime(2024, 1, 8, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def project(tmp_path: Path) -> ProjectPaths:
    """An initialized .issuemap directory with an empty database."""
    root = tmp_path / ".issuemap"
    root.mkdir()
    paths = project_paths(root)
    initialize_schema(paths.db_path)
    return paths


@pytest.fixture
def make_issue():
    """Factory for in-memory issues with sensible defaults."""
    counter = {"next": 1}

    def _make(**overrides) -> Issue:
        issue_id = overrides.pop("id", counter["next"])
        counter["next"] = max(counter["next"], issue_id) + 1
        defaults = {
            "title": f"Issue {issue_id}",
            "created_at": datetime(2024, 1, 1, 9, 0),
            "updated_at": datetime(2024, 1, 1, 9, 0),
        }
        defaults.update(overrides)
        return Issue(id=issue_id, **defaults)

    return _make
