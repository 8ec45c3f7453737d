# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Partitioning of raw series into epoch-aligned, fixed-width buckets.

Bucket `k` of a partition with width `interval` starting at `start_ts`
covers the half-open range `[start_ts + k * interval, start_ts + (k + 1) * interval)`.

Example:
    A series with samples at 0, 2, 3, 4, 6, 7, 9 and 15ms, split in 5ms
    buckets starting at 0ms:

    ```
    bucket      [0, 5)              [5, 10)             [10, 15)       [15, 20)
    samples     0, 2, 3, 4          6, 7, 9                            15
    window      RangeWindow(0, 3)   RangeWindow(4, 6)   EmptyWindow()  RangeWindow(7, 7)
    ```
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from typing import TYPE_CHECKING, TypeAlias

from ._base_types import Interval, TimeStamp, check_interval
from ._exceptions import ConfigurationError, StaleWindowError
from ._sample import Element, Sample
from .ops import ElementOp

if TYPE_CHECKING:
    from ._raw_series import RawSeries


@dataclasses.dataclass(frozen=True)
class EmptyWindow:
    """A bucket in which no raw samples fall."""


@dataclasses.dataclass(frozen=True)
class RangeWindow:
    """A bucket covering an inclusive range of indices into a raw series."""

    start: int
    """The index of the first element in the bucket."""

    end: int
    """The index of the last element in the bucket (inclusive)."""

    # Not part of the comparison, two windows over the same indices are equal.
    generation: int | None = dataclasses.field(default=None, compare=False)
    """The generation of the series when this window was produced."""

    def __len__(self) -> int:
        """Return the number of elements in the window.

        Returns:
            The number of elements in the window.
        """
        return self.end - self.start + 1


Window: TypeAlias = EmptyWindow | RangeWindow
"""A view on the elements of one bucket of a raw series."""


class WindowIterator(Iterator[Window]):
    """An iterator over the buckets of a raw series.

    The iterator does a single forward pass over the series, regardless of
    the number of buckets: the index of the first unconsumed element only
    ever moves forward.

    It yields exactly `(last_ts - start_ts) // interval + 1` windows, or none
    if the series is empty or its newest element is older than `start_ts`.
    Elements older than `start_ts` are not covered by any window.
    """

    def __init__(
        self, series: RawSeries, interval: Interval, start_ts: TimeStamp
    ) -> None:
        """Create an instance.

        Args:
            series: The series to partition.
            interval: The width of each bucket, in milliseconds.
            start_ts: The start of the first bucket.
        """
        check_interval(interval)
        self._series = series
        self._interval = interval
        self._start_ts = start_ts
        self._generation = series.generation

        last_ts = series.last_timestamp
        self._num_windows: int = (
            0
            if last_ts is None or last_ts < start_ts
            else (last_ts - start_ts) // interval + 1
        )

        self._current_window: int = 0
        """The index of the next bucket to produce."""

        self._last_index: int = 0
        """The lowest index of the series not consumed yet."""

    @property
    def interval(self) -> Interval:
        """Return the width of each bucket, in milliseconds."""
        return self._interval

    @property
    def start_ts(self) -> TimeStamp:
        """Return the start of the first bucket."""
        return self._start_ts

    @property
    def num_windows(self) -> int:
        """Return the total number of buckets this iterator produces."""
        return self._num_windows

    def set_end_ts(self, end_ts: TimeStamp) -> None:
        """Stop producing buckets that start after `end_ts`.

        Args:
            end_ts: The inclusive cutoff for bucket start times.

        Raises:
            ConfigurationError: If `end_ts` is before the start of the first
                bucket.
        """
        if end_ts < self._start_ts:
            raise ConfigurationError(
                f"end_ts ({end_ts}) must be greater than or equal to "
                f"start_ts ({self._start_ts})"
            )
        self._num_windows = min(
            self._num_windows, (end_ts - self._start_ts) // self._interval + 1
        )

    def window_start(self, index: int) -> TimeStamp:
        """Return the start timestamp of the bucket with the given index."""
        return self._start_ts + index * self._interval

    def timestamps(self) -> Iterator[TimeStamp]:
        """Iterate over the start timestamps of all buckets.

        This doesn't consume the iterator.

        Yields:
            The start timestamp of each bucket.
        """
        for index in range(self._num_windows):
            yield self.window_start(index)

    def __iter__(self) -> WindowIterator:
        """Return this iterator.

        Returns:
            This iterator.
        """
        return self

    def __length_hint__(self) -> int:
        """Return the number of buckets left to produce.

        Returns:
            The number of buckets left.
        """
        return self._num_windows - self._current_window

    def __next__(self) -> Window:
        """Produce the next bucket.

        Returns:
            The window of the next bucket.

        Raises:
            StopIteration: When all buckets were produced.
            StaleWindowError: If the series was appended to since this
                iterator was created.
        """
        if self._current_window >= self._num_windows:
            raise StopIteration
        if self._series.generation != self._generation:
            raise StaleWindowError(
                "The series was appended to while iterating over its windows"
            )

        window_start = self.window_start(self._current_window)
        window_end = window_start + self._interval
        self._current_window += 1

        series = self._series
        size = len(series)
        index = self._last_index
        while index < size and series[index].timestamp < window_start:
            index += 1

        if index >= size or series[index].timestamp >= window_end:
            self._last_index = index
            return EmptyWindow()

        start_index = index
        while index < size and series[index].timestamp < window_end:
            index += 1
        self._last_index = index

        return RangeWindow(start_index, index - 1, self._generation)

    def samples(self) -> Iterator[list[Element]]:
        """Iterate over the elements of each remaining bucket.

        Yields:
            A copy of the elements in each bucket, empty for empty buckets.
        """
        for window in self:
            yield self._series.elements_in(window)

    def aggregate(self, op: ElementOp) -> Iterator[Sample]:
        """Reduce each remaining bucket to a single sample.

        Args:
            op: The aggregation operator to apply to each bucket.

        Yields:
            The aggregated sample of each bucket, in bucket order.
        """
        for elements in self.samples():
            yield op(elements)
