"""Tests for the search query executor."""

from datetime import datetime

import pytest

from issuemap.domain.errors import ConflictingNegationError
from issuemap.domain.query import SearchQuery
from issuemap.search.executor import execute
from issuemap.search.parser import parse_query


def ids(result) -> list[int]:
    return [issue.id for issue in result.issues]


class TestScenarios:
    """Documented end-to-end behaviours."""

    def test_and_filters(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, type="bug", priority="high"),
            make_issue(id=2, type="bug", priority="low"),
        ]
        result = execute(parse_query("type:bug AND priority:high"), issues, now)
        assert ids(result) == [1]
        assert result.total == 1
        assert result.count == 1

    def test_not_status(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=1, status="open"), make_issue(id=2, status="closed")]
        assert ids(execute(parse_query("NOT status:closed"), issues, now)) == [1]

    def test_labels_match_any(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, labels=["urgent"]),
            make_issue(id=2, labels=["docs"]),
            make_issue(id=3, labels=["bug", "ui"]),
        ]
        assert ids(execute(parse_query("labels:urgent,bug"), issues, now)) == [1, 3]

    def test_relative_date(self, make_issue) -> None:
        issues = [
            make_issue(id=1, updated_at=datetime(2024, 1, 5)),
            make_issue(id=2, updated_at=datetime(2023, 12, 1)),
        ]
        result = execute(parse_query("updated:<7d"), issues, datetime(2024, 1, 8))
        assert ids(result) == [1]

    def test_or_filters(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, assignee="john"),
            make_issue(id=2, assignee="jane"),
            make_issue(id=3, assignee="bob"),
        ]
        assert ids(execute(parse_query("assignee:john OR assignee:jane"), issues, now)) == [1, 2]

    def test_or_across_fields(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, type="bug", priority="low"),
            make_issue(id=2, type="task", priority="critical"),
            make_issue(id=3, type="task", priority="low"),
        ]
        assert ids(execute(parse_query("type:bug OR priority:critical"), issues, now)) == [1, 2]


class TestPredicates:
    """Test individual predicate kinds."""

    def test_empty_query_matches_everything(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=i) for i in (3, 1, 2)]
        for raw in ("", "AND", "OR"):
            result = execute(parse_query(raw), issues, now)
            assert ids(result) == [1, 2, 3]
            assert result.total == 3

    def test_text_is_case_insensitive(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, title="Login fails on Safari"),
            make_issue(id=2, title="Crash", description="the LOGIN FAILS sometimes"),
            make_issue(id=3, title="Login", description="fails"),
        ]
        assert ids(execute(parse_query('"login fails"'), issues, now)) == [1, 2]

    def test_enum_comparison_ignores_case(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=1, status="OPEN"), make_issue(id=2, status="review")]
        assert ids(execute(parse_query("status:open"), issues, now)) == [1]

    def test_assignee_is_exact(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=1, assignee="jane"), make_issue(id=2, assignee="janet")]
        assert ids(execute(parse_query("assignee:jane"), issues, now)) == [1]

    def test_date_range(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, created_at=datetime(2023, 12, 31)),
            make_issue(id=2, created_at=datetime(2024, 1, 1, 10)),
            make_issue(id=3, created_at=datetime(2024, 1, 31)),
            make_issue(id=4, created_at=datetime(2024, 2, 1)),
        ]
        query = parse_query("created:>=2024-01-01 created:<2024-02-01")
        assert ids(execute(query, issues, now)) == [2, 3]

    def test_closed_filter_skips_open_issues(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, status="closed", closed_at=datetime(2024, 1, 7)),
            make_issue(id=2, status="open"),
        ]
        assert ids(execute(parse_query("closed:<7d"), issues, now)) == [1]
        # negating flips the missing timestamp too
        assert ids(execute(parse_query("NOT closed:<7d"), issues, now)) == [2]

    def test_text_is_not_negated(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, title="login", status="open"),
            make_issue(id=2, title="login", status="closed"),
            make_issue(id=3, title="other", status="open"),
        ]
        assert ids(execute(parse_query("login NOT status:closed"), issues, now)) == [1]


class TestNegation:
    """Negation is an overlay on the base predicate."""

    def test_double_negation_matches_plain_filter(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=1, status="open"), make_issue(id=2, status="closed")]
        plain = execute(parse_query("status:closed"), issues, now)
        double = execute(parse_query("NOT NOT status:closed"), issues, now)
        assert ids(plain) == ids(double) == [2]

    def test_negation_complements(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=i, type=t) for i, t in enumerate(["bug", "task", "epic", "bug"], 1)]
        positive = set(ids(execute(parse_query("type:bug"), issues, now)))
        negative = set(ids(execute(parse_query("NOT type:bug"), issues, now)))
        assert positive | negative == {1, 2, 3, 4}
        assert positive & negative == set()

    def test_repeated_negated_values_exclude_each(self, make_issue, now: datetime) -> None:
        issues = [make_issue(id=1, status="open"), make_issue(id=2, status="closed"), make_issue(id=3, status="done")]
        assert ids(execute(parse_query("NOT status:closed NOT status:done"), issues, now)) == [1]

    def test_negated_date_range_excludes_the_range(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, created_at=datetime(2023, 12, 15)),
            make_issue(id=2, created_at=datetime(2024, 3, 1)),
            make_issue(id=3, created_at=datetime(2024, 7, 1)),
        ]
        query = parse_query("NOT created:>=2024-01-01 NOT created:<2024-06-01")
        assert ids(execute(query, issues, now)) == [1, 3]

    @pytest.mark.parametrize(
        "raw",
        [
            "status:open NOT status:closed",
            "NOT status:closed status:open",
            "created:>=2024-01-01 NOT created:>2024-06-01",
            "NOT created:>2024-06-01 created:>=2024-01-01",
        ],
    )
    def test_mixed_polarity_never_reaches_execution(self, raw: str) -> None:
        with pytest.raises(ConflictingNegationError):
            parse_query(raw)


class TestSortAndLimit:
    """Test ordering and truncation."""

    @pytest.fixture
    def issues(self, make_issue):
        return [
            make_issue(id=4, priority="low", updated_at=datetime(2024, 1, 4)),
            make_issue(id=1, priority="high", updated_at=datetime(2024, 1, 2)),
            make_issue(id=3, priority="critical", updated_at=datetime(2024, 1, 3)),
            make_issue(id=2, priority="high", updated_at=datetime(2024, 1, 5)),
        ]

    def test_default_order_is_id(self, issues, now: datetime) -> None:
        assert ids(execute(SearchQuery(), issues, now)) == [1, 2, 3, 4]

    def test_priority_sorts_by_rank(self, issues, now: datetime) -> None:
        assert ids(execute(parse_query("sort:priority"), issues, now)) == [4, 1, 2, 3]

    def test_desc_keeps_id_tie_break(self, issues, now: datetime) -> None:
        assert ids(execute(parse_query("sort:priority:desc"), issues, now)) == [3, 1, 2, 4]

    def test_sort_by_date_desc(self, issues, now: datetime) -> None:
        assert ids(execute(parse_query("sort:updated:desc"), issues, now)) == [2, 4, 3, 1]

    def test_missing_values_sort_last(self, make_issue, now: datetime) -> None:
        issues = [
            make_issue(id=1, assignee=""),
            make_issue(id=2, assignee="zed"),
            make_issue(id=3, assignee="amy"),
        ]
        assert ids(execute(parse_query("sort:assignee"), issues, now)) == [3, 2, 1]
        assert ids(execute(parse_query("sort:assignee:desc"), issues, now)) == [2, 3, 1]

    def test_limit_truncates_after_sort(self, issues, now: datetime) -> None:
        result = execute(parse_query("sort:updated:desc limit:2"), issues, now)
        assert ids(result) == [2, 4]
        assert result.total == 4
        assert result.count == 2

    @pytest.mark.parametrize("limit", [0, 1, 3, 4, 10])
    def test_count_matches_limit(self, issues, now: datetime, limit: int) -> None:
        result = execute(parse_query(f"limit:{limit}"), issues, now)
        assert result.total >= result.count
        expected = min(result.total, limit) if limit > 0 else result.total
        assert result.count == expected == len(result.issues)

    def test_deterministic(self, issues, now: datetime) -> None:
        query = parse_query("priority:high OR priority:low sort:priority:desc")
        first = ids(execute(query, issues, now))
        second = ids(execute(query, list(reversed(issues)), now))
        assert first == second


class TestExecution:
    """Test executor contract details."""

    def test_no_issues(self, now: datetime) -> None:
        result = execute(parse_query("type:bug"), [], now)
        assert result.issues == ()
        assert result.total == 0
        assert result.count == 0

    def test_duration_is_recorded(self, make_issue, now: datetime) -> None:
        result = execute(SearchQuery(), [make_issue()], now)
        assert result.duration >= 0

    def test_issues_are_not_mutated(self, make_issue, now: datetime) -> None:
        issue = make_issue(id=1, labels=["b", "a"], status="open")
        execute(parse_query("labels:a sort:title:desc"), [issue], now)
        assert issue.labels == ["b", "a"]
        assert issue.status == "open"
