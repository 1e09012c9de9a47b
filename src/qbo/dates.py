"""QBO timestamp helpers.

QBO sends timestamps as `YYYY-MM-DDTHH:MM:SS±HH:MM` (sometimes with
milliseconds) and plain dates as `YYYY-MM-DD`. Both parse to an aware
`datetime`; rendering always uses the long form.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

LONG_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
LONG_FORMAT_FRACTIONAL = "%Y-%m-%dT%H:%M:%S.%f%z"
SHORT_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> datetime:
    """Parse a QBO timestamp, falling back to the bare date format.

    A bare date is read as midnight UTC. Raises ValueError when neither
    format matches.
    """

    text = value.strip()
    for fmt in (LONG_FORMAT, LONG_FORMAT_FRACTIONAL):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.strptime(text, SHORT_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        raise ValueError(f"Unrecognized QBO timestamp: {value!r}") from None


def format_date(value: datetime | date) -> str:
    """Render `value` in the long QBO format, e.g. 2014-11-06T15:37:25-08:00.

    Naive datetimes and plain dates are taken to be UTC.
    """

    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.replace(microsecond=0).isoformat()


def _coerce_date(value: Any) -> Any:
    if isinstance(value, str):
        return parse_date(value)
    return value


QBODate = Annotated[
    datetime,
    BeforeValidator(_coerce_date),
    PlainSerializer(format_date, return_type=str),
]
"""Pydantic field type for QBO timestamps."""
