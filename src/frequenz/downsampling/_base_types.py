# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Timeseries basic types."""

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypeAlias

from frequenz.quantities import Quantity

from ._exceptions import ConfigurationError

UNIX_EPOCH = datetime.fromtimestamp(0.0, tz=timezone.utc)
"""The UNIX epoch (in UTC)."""

TimeStamp: TypeAlias = int
"""Milliseconds since the UNIX epoch."""

Interval: TypeAlias = int
"""A signed span of time, in milliseconds."""

_MILLIS_PER_UNIT: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
    "w": 7 * 24 * 60 * 60 * 1000,
}

_DURATION_RE = re.compile(r"^\s*(?P<amount>\d+)\s*(?P<unit>ms|s|m|h|d|w)?\s*$")


def to_timestamp(when: datetime) -> TimeStamp:
    """Convert a datetime to a millisecond timestamp.

    Naive datetimes are interpreted as UTC.

    Args:
        when: The datetime to convert.

    Returns:
        The number of milliseconds since the UNIX epoch.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return (when - UNIX_EPOCH) // timedelta(milliseconds=1)


def to_datetime(timestamp: TimeStamp) -> datetime:
    """Convert a millisecond timestamp to a UTC datetime.

    Args:
        timestamp: Milliseconds since the UNIX epoch.

    Returns:
        The corresponding timezone-aware datetime.
    """
    return UNIX_EPOCH + timedelta(milliseconds=timestamp)


def to_interval(span: timedelta) -> Interval:
    """Convert a timedelta to a millisecond interval, truncating sub-millis."""
    return span // timedelta(milliseconds=1)


def parse_interval(text: str) -> Interval:
    """Parse a duration such as `250ms`, `30s`, `5m`, `1h`, `7d` or `2w`.

    A bare integer is taken as a number of milliseconds.

    Args:
        text: The duration to parse.

    Returns:
        The duration in milliseconds.

    Raises:
        ConfigurationError: If the text is not a valid duration.
    """
    match = _DURATION_RE.match(text)
    if match is None:
        raise ConfigurationError(f"Invalid duration: {text!r}")
    unit = match.group("unit") or "ms"
    return int(match.group("amount")) * _MILLIS_PER_UNIT[unit]


def format_interval(interval: Interval) -> str:
    """Render an interval as seconds with millisecond precision, e.g. `1.500s`."""
    sign = "-" if interval < 0 else ""
    secs, millis = divmod(abs(interval), 1000)
    return f"{sign}{secs}.{millis:03}s"


def check_interval(interval: Interval) -> None:
    """Check that an interval can be used as a bucket width.

    Args:
        interval: The interval to check.

    Raises:
        ConfigurationError: If the interval is not strictly positive.
    """
    if interval <= 0:
        raise ConfigurationError(f"interval ({interval}) must be positive")


@dataclass(frozen=True)
class Reading:
    """A measurement taken at a particular point in time.

    The `value` could be `None` if a source is malfunctioning or data is
    lacking for another reason.
    """

    timestamp: datetime
    """The time when this reading was taken."""

    value: Quantity | float | None = None
    """The value of this reading."""

    def base_value(self) -> float | None:
        """Return the plain value of this reading.

        Returns:
            The value as a float, or `None` if it is missing or NaN.
        """
        if self.value is None:
            return None
        value = (
            self.value.base_value
            if isinstance(self.value, Quantity)
            else float(self.value)
        )
        if math.isnan(value):
            return None
        return value
