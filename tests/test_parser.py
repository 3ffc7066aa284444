"""Tests for the search query parser."""

from datetime import date

import pytest

from issuemap.domain.errors import (
    ConflictingNegationError,
    InvalidDateError,
    InvalidFieldValueError,
    InvalidLimitError,
    InvalidNegationError,
    InvalidSortError,
    SearchQueryError,
    UnknownFieldError,
)
from issuemap.domain.query import DateFilter, SearchQuery
from issuemap.search.parser import parse_query, tokenize


class TestTokenize:
    """Test query tokenization."""

    def test_splits_on_whitespace(self) -> None:
        assert tokenize("fix  login\tbug") == ["fix", "login", "bug"]

    def test_quoted_phrase_is_one_token(self) -> None:
        assert tokenize('type:bug "login error" now') == ["type:bug", '"login error"', "now"]

    def test_quoted_field_value_stays_attached(self) -> None:
        assert tokenize('assignee:"Jane Doe" x') == ['assignee:"Jane Doe"', "x"]

    def test_unterminated_quote_is_dropped(self) -> None:
        assert tokenize('"login error') == ["login", "error"]

    def test_empty_input(self) -> None:
        assert tokenize("") == []
        assert tokenize("   ") == []


class TestFieldFilters:
    """Test field:value tokens."""

    def test_empty_query(self) -> None:
        query = parse_query("")
        assert query == SearchQuery()
        assert query.is_empty
        assert query.bool_operator == "AND"
        assert query.limit is None

    def test_enum_fields_are_lowercased(self) -> None:
        query = parse_query("type:Bug status:OPEN priority:High")
        assert query.filters == {
            "type": ("bug",),
            "status": ("open",),
            "priority": ("high",),
        }

    def test_field_name_is_case_insensitive(self) -> None:
        assert parse_query("TYPE:bug").filters == {"type": ("bug",)}

    def test_assignee_and_branch_keep_case(self) -> None:
        query = parse_query("assignee:Jane branch:feature/Login-1")
        assert query.filters == {"assignee": ("Jane",), "branch": ("feature/Login-1",)}

    def test_quoted_value(self) -> None:
        assert parse_query('assignee:"Jane Doe"').filters == {"assignee": ("Jane Doe",)}

    def test_labels_split_on_comma(self) -> None:
        query = parse_query("labels:urgent, bug")
        # "bug" after the space is a separate bare word
        assert query.filters == {"labels": ("urgent",)}
        assert query.text == "bug"

        query = parse_query("labels:urgent,bug,urgent")
        assert query.filters == {"labels": ("urgent", "bug")}

    def test_label_alias(self) -> None:
        assert parse_query("label:ui").filters == {"labels": ("ui",)}

    def test_repeated_field_collects_values(self) -> None:
        query = parse_query("assignee:john OR assignee:jane")
        assert query.filters == {"assignee": ("john", "jane")}
        assert query.bool_operator == "OR"

    def test_unknown_field(self) -> None:
        with pytest.raises(UnknownFieldError) as exc:
            parse_query("milestone:v1")
        assert exc.value.field == "milestone"
        assert exc.value.token == "milestone"

    def test_invalid_enum_value(self) -> None:
        with pytest.raises(InvalidFieldValueError) as exc:
            parse_query("status:whatever")
        assert exc.value.token == "status:whatever"

    def test_empty_value(self) -> None:
        with pytest.raises(InvalidFieldValueError):
            parse_query("assignee:")
        with pytest.raises(InvalidFieldValueError):
            parse_query("labels:,")

    def test_errors_share_base_class(self) -> None:
        with pytest.raises(SearchQueryError):
            parse_query("foo:bar")
        with pytest.raises(ValueError):
            parse_query("limit:x")


class TestText:
    """Test free-text and phrase handling."""

    def test_bare_words_join(self) -> None:
        assert parse_query("fix login").text == "fix login"

    def test_phrase_and_words_keep_order(self) -> None:
        query = parse_query('crash "login error" type:bug today')
        assert query.text == "crash login error today"
        assert query.filters == {"type": ("bug",)}

    def test_quoted_field_lookalike_is_text(self) -> None:
        query = parse_query('"status:open"')
        assert query.text == "status:open"
        assert query.filters == {}

    def test_colon_without_field_name_is_text(self) -> None:
        assert parse_query("12:30").text == "12:30"


class TestBooleanOperators:
    """Test AND / OR handling."""

    def test_or(self) -> None:
        assert parse_query("type:bug or type:task").bool_operator == "OR"

    def test_and_is_default(self) -> None:
        assert parse_query("type:bug priority:high").bool_operator == "AND"

    def test_last_operator_wins(self, caplog) -> None:
        with caplog.at_level("WARNING"):
            query = parse_query("type:bug AND priority:high OR status:open")
        assert query.bool_operator == "OR"
        assert "mixes AND and OR" in caplog.text


class TestNegation:
    """Test NOT handling."""

    def test_not_records_field(self) -> None:
        query = parse_query("NOT status:closed")
        assert query.negated == frozenset({"status"})
        # the stored value is never inverted
        assert query.filters == {"status": ("closed",)}

    def test_not_is_case_insensitive(self) -> None:
        assert parse_query("not type:bug").negated == frozenset({"type"})

    def test_double_not_cancels(self) -> None:
        query = parse_query("NOT NOT status:closed")
        assert query.negated == frozenset()
        assert query == parse_query("status:closed")

    def test_not_date_field(self) -> None:
        assert parse_query("NOT closed:>7d").negated == frozenset({"closed"})

    def test_repeated_negated_field_accumulates(self) -> None:
        query = parse_query("NOT status:closed NOT status:done")
        assert query.filters == {"status": ("closed", "done")}
        assert query.negated == frozenset({"status"})

    @pytest.mark.parametrize(
        "raw",
        [
            "status:open NOT status:closed",
            "NOT status:closed status:open",
            "created:>=2024-01-01 NOT created:>2024-06-01",
            "NOT created:>2024-06-01 created:>=2024-01-01",
            "labels:ui NOT label:docs",
        ],
    )
    def test_field_cannot_be_both_negated_and_plain(self, raw: str) -> None:
        with pytest.raises(ConflictingNegationError) as exc:
            parse_query(raw)
        assert exc.value.token == raw.split()[-1]

    def test_double_not_keeps_plain_polarity(self) -> None:
        query = parse_query("status:open NOT NOT status:review")
        assert query.filters == {"status": ("open", "review")}
        assert query.negated == frozenset()

    @pytest.mark.parametrize(
        "raw",
        ["NOT login", 'NOT "login error"', "NOT", "type:bug NOT", "NOT sort:id", "NOT limit:3", "NOT OR type:bug"],
    )
    def test_invalid_negation(self, raw: str) -> None:
        with pytest.raises(InvalidNegationError):
            parse_query(raw)


class TestDateFilters:
    """Test created/updated/closed expressions."""

    def test_absolute_with_operator(self) -> None:
        query = parse_query("created:>=2024-01-01")
        assert query.date_filters == {
            "created": (DateFilter(operator=">=", value=date(2024, 1, 1)),)
        }

    def test_default_operator_is_equals(self) -> None:
        (bound,) = parse_query("closed:2024-03-05").date_filters["closed"]
        assert bound.operator == "="
        assert bound.value == date(2024, 3, 5)

    def test_relative(self) -> None:
        (bound,) = parse_query("updated:<7d").date_filters["updated"]
        assert bound == DateFilter(operator="<", relative="7d")
        assert bound.is_relative

    @pytest.mark.parametrize("token", ["1d", "2w", "3m", "1y"])
    def test_relative_units(self, token: str) -> None:
        (bound,) = parse_query(f"created:>{token}").date_filters["created"]
        assert bound.relative == token

    def test_range_keeps_both_bounds(self) -> None:
        query = parse_query("created:>=2024-01-01 created:<2024-02-01")
        assert [b.operator for b in query.date_filters["created"]] == [">=", "<"]

    @pytest.mark.parametrize(
        "raw",
        ["created:yesterday", "updated:>7x", "updated:<", "closed:2024-13-01", "created:>>2024-01-01", "created:7"],
    )
    def test_invalid_dates(self, raw: str) -> None:
        with pytest.raises(InvalidDateError) as exc:
            parse_query(raw)
        assert exc.value.token == raw

    def test_malformed_date_filter_is_rejected(self) -> None:
        with pytest.raises(InvalidDateError):
            DateFilter(operator=">")
        with pytest.raises(InvalidDateError):
            DateFilter(operator=">", value=date(2024, 1, 1), relative="7d")


class TestDirectives:
    """Test sort: and limit:."""

    def test_sort_with_direction(self) -> None:
        query = parse_query("sort:created:desc")
        assert (query.sort_by, query.sort_order) == ("created", "desc")

    def test_sort_defaults_to_asc(self) -> None:
        query = parse_query("sort:priority")
        assert (query.sort_by, query.sort_order) == ("priority", "asc")

    def test_sort_unknown_field(self) -> None:
        with pytest.raises(UnknownFieldError):
            parse_query("sort:labels")

    def test_sort_bad_direction(self) -> None:
        with pytest.raises(InvalidSortError):
            parse_query("sort:id:sideways")

    def test_limit(self) -> None:
        assert parse_query("limit:10").limit == 10
        assert parse_query("limit:0").limit == 0
        assert parse_query("type:bug").limit is None

    @pytest.mark.parametrize("raw", ["limit:-1", "limit:ten", "limit:", "limit:1.5"])
    def test_invalid_limit(self, raw: str) -> None:
        with pytest.raises(InvalidLimitError) as exc:
            parse_query(raw)
        assert exc.value.token == raw

    def test_full_query(self) -> None:
        query = parse_query('"fix login" AND type:bug NOT status:closed updated:<7d sort:updated:desc limit:5')
        assert query.text == "fix login"
        assert query.filters == {"type": ("bug",), "status": ("closed",)}
        assert query.negated == frozenset({"status"})
        assert set(query.date_filters) == {"updated"}
        assert query.sort_by == "updated"
        assert query.sort_order == "desc"
        assert query.limit == 5

    def test_query_is_immutable(self) -> None:
        query = parse_query("type:bug")
        with pytest.raises(AttributeError):
            query.limit = 3
