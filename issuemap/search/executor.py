"""
executor.py - Search query executor
Single responsibility: evaluate a SearchQuery against an in-memory issue
snapshot, then sort and limit the matches.
"""
import logging
import time
from datetime import datetime
from typing import Callable, Iterable

from issuemap.domain.models import PRIORITIES, STATUSES, Issue
from issuemap.domain.query import BOOL_OR, SORT_DESC, SearchQuery, SearchResult
from issuemap.search import dates

logger = logging.getLogger(__name__)

# Fields compared after lowercasing; everything else is exact.
CASE_INSENSITIVE_FIELDS = frozenset({"type", "status", "priority"})

DATE_ATTRIBUTES = {
    "created": "created_at",
    "updated": "updated_at",
    "closed": "closed_at",
}


def _field_matches(issue: Issue, field: str, expected: tuple[str, ...]) -> bool:
    if field == "labels":
        return any(label in issue.labels for label in expected)
    actual = getattr(issue, field) or ""
    if field in CASE_INSENSITIVE_FIELDS:
        actual = actual.lower()
        return any(actual == value.lower() for value in expected)
    return actual in expected


def _text_matches(issue: Issue, text: str) -> bool:
    haystack = f"{issue.title}\n{issue.description or ''}".lower()
    return text.lower() in haystack


def evaluate(query: SearchQuery, issue: Issue, now: datetime) -> bool:
    """True when the issue satisfies the query's combined predicates."""
    results: list[bool] = []

    for field, expected in query.filters.items():
        result = _field_matches(issue, field, expected)
        results.append(not result if field in query.negated else result)

    for field, bounds in query.date_filters.items():
        timestamp = getattr(issue, DATE_ATTRIBUTES[field])
        result = all(dates.matches(bound, timestamp, now) for bound in bounds)
        results.append(not result if field in query.negated else result)

    if query.text:
        results.append(_text_matches(issue, query.text))

    if not results:
        return True
    if query.bool_operator == BOOL_OR:
        return any(results)
    return all(results)


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

_PRIORITY_RANK = {p: i for i, p in enumerate(PRIORITIES)}
_STATUS_RANK = {s: i for i, s in enumerate(STATUSES)}

SORT_KEYS: dict[str, Callable[[Issue], object]] = {
    "id": lambda i: i.id,
    "title": lambda i: (i.title or "").lower() or None,
    "type": lambda i: (i.type or "").lower() or None,
    "status": lambda i: _STATUS_RANK.get((i.status or "").lower(), len(STATUSES)),
    "priority": lambda i: _PRIORITY_RANK.get((i.priority or "").lower(), -1),
    "assignee": lambda i: i.assignee or None,
    "branch": lambda i: i.branch or None,
    "created": lambda i: i.created_at,
    "updated": lambda i: i.updated_at,
    "closed": lambda i: i.closed_at,
}


def sort_issues(issues: Iterable[Issue], sort_by: str, sort_order: str) -> list[Issue]:
    """Stable sort; ties stay in id order and missing values go last."""
    key = SORT_KEYS[sort_by]
    by_id = sorted(issues, key=lambda i: i.id or 0)
    present = [i for i in by_id if key(i) is not None]
    missing = [i for i in by_id if key(i) is None]
    # reverse=True keeps equal elements in their original (id) order
    present.sort(key=key, reverse=sort_order == SORT_DESC)
    return present + missing


def execute(query: SearchQuery, issues: Iterable[Issue], now: datetime) -> SearchResult:
    started = time.perf_counter()

    matches = [issue for issue in issues if evaluate(query, issue, now)]
    total = len(matches)

    if query.sort_by:
        matches = sort_issues(matches, query.sort_by, query.sort_order)
    else:
        matches.sort(key=lambda i: i.id or 0)

    if query.limit:
        matches = matches[: query.limit]

    duration = time.perf_counter() - started
    logger.debug("Search matched %d issue(s), returning %d in %.4fs", total, len(matches), duration)
    return SearchResult(
        issues=tuple(matches),
        total=total,
        count=len(matches),
        duration=duration,
    )
