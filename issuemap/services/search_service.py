"""
search_service.py - Search entry points for the CLI
Single responsibility: wire the query engine to the issue repository and
the saved search store.
"""
import dataclasses
import logging
from datetime import datetime

from issuemap.database.repositories import issues as issue_repo
from issuemap.domain.query import SearchQuery, SearchResult
from issuemap.search import executor, parser
from issuemap.services import saved_search_service
from issuemap.utils.time import now as clock_now

logger = logging.getLogger(__name__)


def parse_search_query(raw: str) -> SearchQuery:
    return parser.parse_query(raw)


def execute_search(
    db_path: str,
    query: SearchQuery,
    now: datetime | None = None,
    default_limit: int = 0,
) -> SearchResult:
    """Run a parsed query over every issue in the project.

    A query without limit:N takes default_limit (0 keeps it unbounded);
    an explicit limit:0 stays unbounded.
    """
    if query.limit is None and default_limit > 0:
        query = dataclasses.replace(query, limit=default_limit)
    issues = issue_repo.list_all(db_path)
    result = executor.execute(query, issues, now or clock_now())
    logger.info(
        "Search over %d issue(s): %d match(es), %d shown", len(issues), result.total, result.count
    )
    return result


def search(
    db_path: str,
    raw: str,
    now: datetime | None = None,
    default_limit: int = 0,
) -> SearchResult:
    # Parse first so a bad query never touches the database
    query = parse_search_query(raw)
    return execute_search(db_path, query, now=now, default_limit=default_limit)


def run_saved_search(
    db_path: str,
    config_path: str,
    name: str,
    now: datetime | None = None,
    default_limit: int = 0,
) -> tuple[str, SearchResult]:
    """Load a saved query by name, re-parse it and execute it."""
    raw = saved_search_service.load(config_path, name)
    return raw, search(db_path, raw, now=now, default_limit=default_limit)
