"""
parser.py - Search query parser
Single responsibility: turn a raw query string into an immutable SearchQuery.

Grammar (whitespace separated, quoted segments are atomic):
    field:value                 type, status, priority, assignee, branch
    labels:a,b                  any of the listed labels
    created|updated|closed:<op><YYYY-MM-DD | N[dwmy]>
    NOT field:value             invert that field's predicate; a field is
                                either always negated or never
    AND | OR                    how predicates combine (last one wins)
    sort:<field>[:asc|desc]
    limit:<n>                   0 = unbounded; omitted = caller default
    "a phrase" / bare words     free text over title and description
"""
import logging
import re

from issuemap.domain.errors import (
    ConflictingNegationError,
    InvalidFieldValueError,
    InvalidLimitError,
    InvalidNegationError,
    InvalidSortError,
    UnknownFieldError,
)
from issuemap.domain.models import ISSUE_TYPES, PRIORITIES, STATUSES
from issuemap.domain.query import BOOL_AND, BOOL_OR, SORT_ASC, SORT_DESC, DateFilter, SearchQuery
from issuemap.search.dates import parse_date_expression

logger = logging.getLogger(__name__)

# Runs of non-space characters and quoted segments; a lone quote is skipped.
TOKEN_PATTERN = re.compile(r'(?:[^\s"]+|"[^"]*")+')
FIELD_TOKEN_PATTERN = re.compile(r"^([A-Za-z_]+):(.*)$", re.DOTALL)
LIMIT_PATTERN = re.compile(r"^\d+$")

FILTER_FIELDS: tuple[str, ...] = ("type", "status", "priority", "assignee", "branch", "labels")
DATE_FIELDS: tuple[str, ...] = ("created", "updated", "closed")
DIRECTIVE_FIELDS: tuple[str, ...] = ("sort", "limit")
FIELD_ALIASES = {"label": "labels"}
ENUM_VALUES: dict[str, tuple[str, ...]] = {
    "type": ISSUE_TYPES,
    "status": STATUSES,
    "priority": PRIORITIES,
}
SORT_FIELDS: tuple[str, ...] = (
    "id",
    "title",
    "type",
    "status",
    "priority",
    "assignee",
    "branch",
    "created",
    "updated",
    "closed",
)

KNOWN_FIELDS = frozenset(FILTER_FIELDS + DATE_FIELDS + DIRECTIVE_FIELDS)


def tokenize(raw: str) -> list[str]:
    return TOKEN_PATTERN.findall(raw or "")


def _canonical_field(name: str) -> str:
    field = name.lower()
    field = FIELD_ALIASES.get(field, field)
    if field not in KNOWN_FIELDS:
        raise UnknownFieldError(name)
    return field


def _unquote(value: str) -> str:
    return value.replace('"', "")


class _QueryBuilder:
    """Mutable scratch state; only the finished SearchQuery leaves the parser."""

    def __init__(self):
        self.text_parts: list[str] = []
        self.filters: dict[str, list[str]] = {}
        self.date_filters: dict[str, list[DateFilter]] = {}
        self.negated: set[str] = set()
        # field -> whether its filters were negated; one polarity per field
        self.polarity: dict[str, bool] = {}
        self.bool_operator = BOOL_AND
        self.explicit_operator: str | None = None
        self.sort_by: str | None = None
        self.sort_order = SORT_ASC
        self.limit: int | None = None

    def set_operator(self, op: str) -> None:
        if self.explicit_operator and self.explicit_operator != op:
            logger.warning(
                "Query mixes AND and OR; using %s for the whole query", op
            )
        self.explicit_operator = op
        self.bool_operator = op

    def add_filter(self, field: str, value: str, token: str, negated: bool = False) -> None:
        if self.polarity.setdefault(field, negated) != negated:
            raise ConflictingNegationError(field, token)
        if negated:
            self.negated.add(field)

        if field in DATE_FIELDS:
            self.date_filters.setdefault(field, []).append(
                parse_date_expression(value, token)
            )
            return

        if field == "labels":
            values = [v.strip() for v in value.split(",") if v.strip()]
        elif field in ENUM_VALUES:
            normalized = value.strip().lower()
            if normalized not in ENUM_VALUES[field]:
                raise InvalidFieldValueError(field, value, ENUM_VALUES[field])
            values = [normalized]
        else:
            values = [value.strip()] if value.strip() else []

        if not values:
            raise InvalidFieldValueError(field, value)

        current = self.filters.setdefault(field, [])
        for v in values:
            if v not in current:
                current.append(v)

    def set_sort(self, value: str) -> None:
        sort_field, _, direction = value.partition(":")
        sort_field = sort_field.lower()
        if not sort_field:
            raise InvalidFieldValueError("sort", value, SORT_FIELDS)
        if sort_field not in SORT_FIELDS:
            raise UnknownFieldError(sort_field)
        direction = direction.lower() or SORT_ASC
        if direction not in (SORT_ASC, SORT_DESC):
            raise InvalidSortError(direction)
        self.sort_by = sort_field
        self.sort_order = direction

    def set_limit(self, value: str, token: str) -> None:
        if not LIMIT_PATTERN.match(value):
            raise InvalidLimitError(token)
        self.limit = int(value)

    def build(self) -> SearchQuery:
        return SearchQuery(
            text=" ".join(self.text_parts),
            filters={k: tuple(v) for k, v in self.filters.items()},
            date_filters={k: tuple(v) for k, v in self.date_filters.items()},
            bool_operator=self.bool_operator,
            negated=frozenset(self.negated),
            sort_by=self.sort_by,
            sort_order=self.sort_order,
            limit=self.limit,
        )


def parse_query(raw: str) -> SearchQuery:
    """Parse a query string. Raises a SearchQueryError subclass on bad input."""
    builder = _QueryBuilder()
    # None: no NOT pending. True/False: parity of the pending NOT run.
    negation: bool | None = None

    for token in tokenize(raw):
        upper = token.upper()

        if upper == "NOT":
            negation = True if negation is None else not negation
            continue

        if upper in (BOOL_AND, BOOL_OR):
            if negation is not None:
                raise InvalidNegationError(token)
            builder.set_operator(upper)
            continue

        match = None if token.startswith('"') else FIELD_TOKEN_PATTERN.match(token)
        if match:
            field = _canonical_field(match.group(1))
            value = _unquote(match.group(2))
            if field in DIRECTIVE_FIELDS:
                if negation is not None:
                    raise InvalidNegationError(token)
                if field == "sort":
                    builder.set_sort(value)
                else:
                    builder.set_limit(value, token)
                continue
            builder.add_filter(field, value, token, negated=bool(negation))
            negation = None
            continue

        if negation is not None:
            raise InvalidNegationError(token)
        text = _unquote(token).strip()
        if text:
            builder.text_parts.append(text)

    if negation is not None:
        raise InvalidNegationError("")

    query = builder.build()
    logger.debug("Parsed query %r -> %s", raw, query)
    return query
