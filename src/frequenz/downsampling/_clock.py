# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Sources of the current time."""

from datetime import datetime, timezone
from typing import Protocol

from typing_extensions import override

from ._base_types import TimeStamp, to_timestamp


class Clock(Protocol):
    """Something that can tell the current time."""

    def now(self) -> TimeStamp:
        """Return the current time.

        Returns:
            The current time, in milliseconds since the UNIX epoch.
        """


class WallClock(Clock):
    """A clock following the system's wall clock."""

    @override
    def now(self) -> TimeStamp:
        """Return the current time.

        Returns:
            The current UTC time, in milliseconds since the UNIX epoch.
        """
        return to_timestamp(datetime.now(timezone.utc))
