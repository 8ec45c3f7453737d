# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Downsampling exceptions."""


class ConfigurationError(ValueError):
    """A series or tier was requested with invalid parameters.

    Raised for non-positive intervals, an `end_ts` before the `start_ts`,
    unknown aggregation names and invalid tier configurations. No partial
    series is produced when this is raised.
    """


class OutOfOrderSampleError(IndexError):
    """A sample was pushed with a timestamp older than the newest one."""

    def __init__(self, timestamp: int, last_timestamp: int) -> None:
        """Create an instance.

        Args:
            timestamp: The timestamp of the rejected sample.
            last_timestamp: The newest timestamp already in the series.
        """
        super().__init__(
            f"Timestamp {timestamp} too old (newest timestamp is {last_timestamp})."
        )
        self.timestamp = timestamp
        """The timestamp of the rejected sample."""

        self.last_timestamp = last_timestamp
        """The newest timestamp in the series when the sample was rejected."""

    def __repr__(self) -> str:
        """Return the representation of the instance.

        Returns:
            The representation of the instance.
        """
        return (
            f"{self.__class__.__name__}({self.timestamp!r}, {self.last_timestamp!r})"
        )


class StaleWindowError(RuntimeError):
    """A window was used after the series it points into was appended to."""
