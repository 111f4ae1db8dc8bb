"""Translate filters into SQL predicate strings.

A filter is either a raw predicate string, passed through untouched, or a
flat mapping of field name to value that becomes ``"field" = literal``
clauses joined with ``AND``. Literals are formatted by kind: strings are
single-quoted with embedded quotes doubled, numbers and booleans stay bare,
and None becomes an ``IS NULL`` test.
"""

import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Mapping, Union

Filter = Union[str, Mapping[str, Any]]

FIELD_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SQLITE_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def quote_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def format_literal(value: Any) -> str:
    """Format a Python value as a SQL literal."""
    # bool first, it is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        # storage format of SQLAlchemy DateTime on SQLite
        return quote_string(value.strftime(SQLITE_DATETIME_FORMAT))
    if isinstance(value, date):
        # stored as midnight of that day
        return quote_string(datetime.combine(value, time()).strftime(SQLITE_DATETIME_FORMAT))
    return quote_string(str(value))


def format_clause(field: str, value: Any) -> str:
    if not isinstance(field, str) or not FIELD_PATTERN.match(field):
        raise ValueError(f"Invalid filter field name: {field!r}")
    if value is None:
        return f'"{field}" IS NULL'
    return f'"{field}" = {format_literal(value)}'


def convert_filter(filter: Filter) -> str:
    """Convert a filter into a predicate string.

    Examples:
        >>> convert_filter("age > 21")
        'age > 21'
        >>> print(convert_filter({"a": 1, "b": "x"}))
        "a" = 1 AND "b" = 'x'
    """
    if isinstance(filter, str):
        return filter
    if isinstance(filter, Mapping):
        return " AND ".join(format_clause(field, value) for field, value in filter.items())
    raise TypeError(f"Filter must be a string or a mapping, got {type(filter).__name__}")
