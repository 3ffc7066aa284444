"""
dates.py - Date expression resolver
Single responsibility: turn created/updated/closed expressions into
comparable boundaries and evaluate them against issue timestamps.

Relative durations are calendar-naive: a month is 30 days and a year is 365
days. Exact calendar arithmetic is not needed for "updated in the last 2m".
"""
import operator
import re
from datetime import date, datetime, time, timedelta

from issuemap.domain.errors import InvalidDateError
from issuemap.domain.query import DATE_OPERATORS, DateFilter

RELATIVE_PATTERN = re.compile(r"^(\d+)([dwmy])$")
ABSOLUTE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

UNIT_DAYS = {"d": 1, "w": 7, "m": 30, "y": 365}

_COMPARATORS = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
}

# A relative token states an age ("<7d" = younger than 7 days), so the
# comparison against the resolved point in time runs the other way.
_AGE_TO_TIME = {">": "<", ">=": "<=", "<": ">", "<=": ">=", "=": "="}


def parse_date_expression(expression: str, token: str | None = None) -> DateFilter:
    """Parse "[op]YYYY-MM-DD" or "[op]<N><d|w|m|y>" into a DateFilter.

    token is the full query token, reported in errors when given.
    """
    token = token or expression
    op = "="
    rest = expression
    # DATE_OPERATORS lists two-char operators first so ">=" wins over ">"
    for candidate in DATE_OPERATORS:
        if expression.startswith(candidate):
            op = candidate
            rest = expression[len(candidate):]
            break

    if RELATIVE_PATTERN.match(rest):
        return DateFilter(operator=op, relative=rest)

    if ABSOLUTE_PATTERN.match(rest):
        try:
            value = date.fromisoformat(rest)
        except ValueError as e:
            raise InvalidDateError(token, str(e)) from e
        return DateFilter(operator=op, value=value)

    raise InvalidDateError(token)


def relative_delta(token: str) -> timedelta:
    match = RELATIVE_PATTERN.match(token)
    if not match:
        raise InvalidDateError(token)
    amount, unit = match.groups()
    return timedelta(days=int(amount) * UNIT_DAYS[unit])


def resolve(date_filter: DateFilter, now: datetime) -> datetime:
    """Return the point in time a filter compares against.

    Absolute filters resolve to midnight of their date. Relative filters
    resolve to now minus the duration, so the same saved query slides
    forward with the clock.
    """
    if date_filter.relative is None:
        return datetime.combine(date_filter.value, time.min)
    try:
        return now - relative_delta(date_filter.relative)
    except OverflowError:
        return datetime.min


def matches(date_filter: DateFilter, timestamp: datetime | None, now: datetime) -> bool:
    if timestamp is None:
        return False
    boundary = resolve(date_filter, now)

    if date_filter.operator == "=":
        return timestamp.date() == boundary.date()

    if date_filter.is_relative:
        compare = _COMPARATORS[_AGE_TO_TIME[date_filter.operator]]
        return compare(timestamp, boundary)

    # Absolute dates are day-granular
    compare = _COMPARATORS[date_filter.operator]
    return compare(timestamp.date(), boundary.date())
