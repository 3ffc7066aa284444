"""
query.py - Search DTOs
Single responsibility: carry parsed search queries and their results.
"""
from dataclasses import dataclass, field
from datetime import date

from issuemap.domain.errors import InvalidDateError
from issuemap.domain.models import Issue

DATE_OPERATORS: tuple[str, ...] = (">=", "<=", ">", "<", "=")
BOOL_AND = "AND"
BOOL_OR = "OR"
SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass(frozen=True)
class DateFilter:
    operator: str = "="
    value: date | None = None
    relative: str | None = None

    def __post_init__(self):
        if self.operator not in DATE_OPERATORS:
            raise InvalidDateError(self.operator, "unknown operator")
        # Exactly one of the absolute / relative forms
        if (self.value is None) == (self.relative is None):
            raise InvalidDateError(
                str(self.value or self.relative or ""),
                "expected either an absolute date or a relative duration",
            )

    @property
    def is_relative(self) -> bool:
        return self.relative is not None

    def describe(self) -> str:
        if self.relative is not None:
            return f"{self.operator} {self.relative} (relative)"
        return f"{self.operator} {self.value.isoformat()}"


@dataclass(frozen=True)
class SearchQuery:
    text: str = ""
    filters: dict[str, tuple[str, ...]] = field(default_factory=dict)
    date_filters: dict[str, tuple[DateFilter, ...]] = field(default_factory=dict)
    bool_operator: str = BOOL_AND
    negated: frozenset[str] = frozenset()
    sort_by: str | None = None
    sort_order: str = SORT_ASC
    # None: no limit:N in the query; 0: explicitly unbounded
    limit: int | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.text or self.filters or self.date_filters)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "filters": {k: list(v) for k, v in self.filters.items()},
            "date_filters": {
                k: [
                    {
                        "operator": f.operator,
                        "value": f.value.isoformat() if f.value else None,
                        "relative": f.relative,
                    }
                    for f in v
                ]
                for k, v in self.date_filters.items()
            },
            "bool_operator": self.bool_operator,
            "negated": sorted(self.negated),
            "sort_by": self.sort_by,
            "sort_order": self.sort_order,
            "limit": self.limit,
        }


@dataclass(frozen=True)
class SearchResult:
    issues: tuple[Issue, ...] = ()
    total: int = 0
    count: int = 0
    duration: float = 0.0
