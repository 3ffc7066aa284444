"""
errors.py - Domain error taxonomy
Single responsibility: exceptions raised by the query engine and stores.
"""


class SearchQueryError(ValueError):
    """Base class for query parse errors. Carries the offending token."""

    def __init__(self, message: str, token: str = ""):
        super().__init__(message)
        self.token = token


class UnknownFieldError(SearchQueryError):
    def __init__(self, field: str):
        super().__init__(f"unknown field: {field}", field)
        self.field = field


class InvalidDateError(SearchQueryError):
    def __init__(self, token: str, reason: str = ""):
        message = f"invalid date expression: {token}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, token)


class InvalidLimitError(SearchQueryError):
    def __init__(self, token: str):
        super().__init__(f"invalid limit: {token} (expected a non-negative integer)", token)


class InvalidFieldValueError(SearchQueryError):
    def __init__(self, field: str, value: str, allowed: tuple[str, ...] = ()):
        message = f"invalid value for {field}: {value!r}"
        if allowed:
            message = f"{message} (expected one of: {', '.join(allowed)})"
        super().__init__(message, f"{field}:{value}")
        self.field = field
        self.value = value


class InvalidNegationError(SearchQueryError):
    def __init__(self, token: str):
        target = token or "end of query"
        super().__init__(f"NOT must precede a field filter, got: {target}", token)


class InvalidSortError(SearchQueryError):
    def __init__(self, token: str):
        super().__init__(f"invalid sort direction: {token} (expected asc or desc)", token)


class ConflictingNegationError(SearchQueryError):
    """A field filtered both with and without NOT in the same query."""

    def __init__(self, field: str, token: str):
        super().__init__(f"{field} is used both with and without NOT: {token}", token)
        self.field = field


class SavedSearchNotFoundError(KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"saved search '{self.name}' not found"


class IssueNotFoundError(LookupError):
    def __init__(self, issue_id: int):
        super().__init__(f"Issue {issue_id} not found")
        self.issue_id = issue_id


class ConfigError(Exception):
    """Project configuration could not be read."""
