"""
issue_service.py - Issue service layer
Single responsibility: orchestrate issue operations and enforce policies.
"""
import logging

from issuemap.database.repositories import issues as issue_repo
from issuemap.database.repositories import labels as label_repo
from issuemap.database.repositories.labels import normalize_labels
from issuemap.domain.errors import IssueNotFoundError
from issuemap.domain.models import (
    DEFAULT_PRIORITY,
    DEFAULT_TYPE,
    ISSUE_TYPES,
    PRIORITIES,
    STATUSES,
    Issue,
)
from issuemap.utils.time import now

logger = logging.getLogger(__name__)


def _ensure_allowed(kind: str, value: str, allowed: tuple[str, ...]) -> str:
    normalized = (value or "").strip().lower()
    if normalized not in allowed:
        raise ValueError(f"Unsupported {kind}: {value} (expected one of: {', '.join(allowed)})")
    return normalized


def list_issues(db_path: str, status: str | None = None) -> list[Issue]:
    issues = issue_repo.list_all(db_path)
    if status:
        status = _ensure_allowed("status", status, STATUSES)
        issues = [i for i in issues if i.status == status]
    return issues


def list_labels(db_path: str) -> list[str]:
    """Labels currently attached to at least one issue, by name."""
    return label_repo.list_all(db_path)


def get_issue(db_path: str, issue_id: int) -> Issue:
    issue = issue_repo.get_issue(db_path, issue_id)
    if issue is None:
        raise IssueNotFoundError(issue_id)
    return issue


def create_issue(
    db_path: str,
    title: str,
    description: str = "",
    issue_type: str = DEFAULT_TYPE,
    priority: str = DEFAULT_PRIORITY,
    assignee: str = "",
    branch: str = "",
    labels: list[str] | None = None,
) -> int:
    title = (title or "").strip()
    if not title:
        raise ValueError("Title is required")
    stamp = now()
    issue = Issue(
        title=title,
        description=description or "",
        type=_ensure_allowed("type", issue_type, ISSUE_TYPES),
        priority=_ensure_allowed("priority", priority, PRIORITIES),
        assignee=(assignee or "").strip(),
        branch=(branch or "").strip(),
        labels=normalize_labels(labels),
        created_at=stamp,
        updated_at=stamp,
    )
    issue_id = issue_repo.create_issue(db_path, issue)
    logger.info("Created issue #%d: %s", issue_id, title)
    return issue_id


def update_issue(
    db_path: str,
    issue_id: int,
    title: str | None = None,
    description: str | None = None,
    issue_type: str | None = None,
    priority: str | None = None,
    assignee: str | None = None,
    branch: str | None = None,
    labels: list[str] | None = None,
) -> Issue:
    """Apply the fields that are not None; returns the updated issue."""
    get_issue(db_path, issue_id)
    fields: dict[str, str] = {}
    if title is not None:
        if not title.strip():
            raise ValueError("Title is required")
        fields["title"] = title.strip()
    if description is not None:
        fields["description"] = description
    if issue_type is not None:
        fields["type"] = _ensure_allowed("type", issue_type, ISSUE_TYPES)
    if priority is not None:
        fields["priority"] = _ensure_allowed("priority", priority, PRIORITIES)
    if assignee is not None:
        fields["assignee"] = assignee.strip()
    if branch is not None:
        fields["branch"] = branch.strip()
    issue_repo.update_issue(db_path, issue_id, labels=labels, **fields)
    return get_issue(db_path, issue_id)


def set_status(db_path: str, issue_id: int, status: str) -> Issue:
    status = _ensure_allowed("status", status, STATUSES)
    get_issue(db_path, issue_id)
    previous = issue_repo.set_status(db_path, issue_id, status)
    logger.info("Issue #%d: %s -> %s", issue_id, previous, status)
    return get_issue(db_path, issue_id)


def close_issue(db_path: str, issue_id: int) -> Issue:
    return set_status(db_path, issue_id, "closed")


def reopen_issue(db_path: str, issue_id: int) -> Issue:
    return set_status(db_path, issue_id, "open")


def delete_issue(db_path: str, issue_id: int) -> None:
    # labels links are cascade
    if not issue_repo.delete_issue(db_path, issue_id):
        raise IssueNotFoundError(issue_id)
