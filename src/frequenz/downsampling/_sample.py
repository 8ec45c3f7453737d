# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""The sample value model.

A [`Sample`][frequenz.downsampling.Sample] is one of four variants:

* [`Point`][frequenz.downsampling.Point]: a real observed or aggregated value.
* [`Zero`][frequenz.downsampling.Zero]: an explicit reset marker, a counter
  restarted here. It counts as `0` in arithmetic.
* [`Fake`][frequenz.downsampling.Fake]: a value synthesized by extrapolation or
  carry-forward. Reductions over a window containing a `Fake` produce a `Fake`.
* [`Err`][frequenz.downsampling.Err]: no valid value. It counts as `0` in
  arithmetic, so check `is_err()` before trusting a value for reporting.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from ._base_types import TimeStamp


class _BaseSample:
    """Behaviour shared by all sample variants."""

    def is_err(self) -> bool:
        """Return whether this sample carries no valid value."""
        return False

    def is_fake(self) -> bool:
        """Return whether this sample was synthesized rather than observed."""
        return False


@dataclass(frozen=True)
class Point(_BaseSample):
    """A real observed or aggregated value."""

    value: float
    """The value of this sample."""

    def __str__(self) -> str:
        """Return the rendering of this sample.

        Returns:
            The rendered sample.
        """
        return f"Point({self.value})"


@dataclass(frozen=True)
class Fake(_BaseSample):
    """A value produced by extrapolation instead of observation."""

    value: float
    """The synthesized value."""

    def is_fake(self) -> bool:
        """Return whether this sample was synthesized rather than observed."""
        return True

    def __str__(self) -> str:
        """Return the rendering of this sample.

        Returns:
            The rendered sample.
        """
        return f"Fake({self.value})"


@dataclass(frozen=True)
class Zero(_BaseSample):
    """A counter reset marker."""

    @property
    def value(self) -> float:
        """Return the arithmetic value of a reset, always zero."""
        return 0.0

    def __str__(self) -> str:
        """Return the rendering of this sample.

        Returns:
            The rendered sample.
        """
        return "Zero(0)"


@dataclass(frozen=True)
class Err(_BaseSample):
    """A missing or invalidated value."""

    @property
    def value(self) -> float:
        """Return the arithmetic value of an error, always zero."""
        return 0.0

    def is_err(self) -> bool:
        """Return whether this sample carries no valid value."""
        return True

    def __str__(self) -> str:
        """Return the rendering of this sample.

        Returns:
            The rendered sample.
        """
        return "Err"


Sample: TypeAlias = Point | Zero | Fake | Err
"""The state of one reading."""


@dataclass(frozen=True)
class Element:
    """A single timestamped sample."""

    timestamp: TimeStamp
    """The time of the sample, in milliseconds since the UNIX epoch."""

    sample: Sample
    """The sample."""

    def __iter__(self) -> Iterator[TimeStamp | Sample]:
        """Unpack the element as a `(timestamp, sample)` pair.

        Yields:
            The timestamp, then the sample.
        """
        yield self.timestamp
        yield self.sample

    def __str__(self) -> str:
        """Return the rendering of this element.

        Returns:
            The timestamp followed by the rendered sample.
        """
        return f"{self.timestamp} {self.sample}"
