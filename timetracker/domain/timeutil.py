"""Conversion between epoch seconds and calendar timestamps (UTC)."""

import datetime
from decimal import Decimal

from .errors import ParseError

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
SECONDS_PER_DAY = 86400

# Bounds of the 64-bit INTEGER columns
I64_MIN = -2 ** 63
I64_MAX = 2 ** 63 - 1


def to_datetime(value: int) -> datetime.datetime:
    """Epoch seconds -> timezone-aware UTC datetime."""
    return EPOCH + datetime.timedelta(seconds=value)


def to_i64(moment: datetime.datetime) -> int:
    """
    UTC datetime -> epoch seconds, dropping sub-second precision.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return (moment - EPOCH) // datetime.timedelta(seconds=1)


def now_epoch() -> int:
    return to_i64(datetime.datetime.now(datetime.timezone.utc))


def start_of_day(value: int) -> int:
    """UTC midnight at or before the given epoch second."""
    return value - value % SECONDS_PER_DAY


def hours_to_seconds(text: str) -> int:
    """Parse decimal hours ("4.5") into whole seconds, truncating.

    The result must fit a 64-bit column.
    """
    try:
        seconds = int(Decimal(text.strip()) * 3600)
    except (ArithmeticError, ValueError) as e:
        # InvalidOperation, decimal Overflow and OverflowError are all ArithmeticError
        raise ParseError(f"Not a number of hours: {text!r}") from e
    if not I64_MIN <= seconds <= I64_MAX:
        raise ParseError(f"Too many hours: {text!r}")
    return seconds
