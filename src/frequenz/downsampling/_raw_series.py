# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Append-only series of raw timestamped samples."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterator, Sequence
from typing import assert_never, overload

import numpy as np
import numpy.typing as npt

from ._base_types import Interval, TimeStamp
from ._exceptions import OutOfOrderSampleError, StaleWindowError
from ._sample import Element, Point, Sample
from ._window import EmptyWindow, RangeWindow, Window, WindowIterator


class RawSeries(Sequence[Element]):
    """A series of raw timestamped samples, kept in timestamp order.

    The series only grows by appending. Samples must be pushed with
    non-decreasing timestamps: equal timestamps are accepted, but a sample
    older than the newest one is rejected with an
    [`OutOfOrderSampleError`][frequenz.downsampling.OutOfOrderSampleError].

    Every append bumps the series
    [`generation`][frequenz.downsampling.RawSeries.generation], so windows and
    window iterators created before the append can detect they are stale.
    """

    def __init__(self, elements: Sequence[Element] = ()) -> None:
        """Create an instance.

        Args:
            elements: Initial elements, in timestamp order.

        Raises:
            OutOfOrderSampleError: If the initial elements are not in order.
        """
        super().__init__()
        self._elements: list[Element] = []
        self._generation: int = 0
        for element in elements:
            self.push_sample(element.timestamp, element.sample)

    @property
    def generation(self) -> int:
        """Return the number of appends done to this series so far.

        Returns:
            The current generation of the series.
        """
        return self._generation

    @property
    def first_timestamp(self) -> TimeStamp | None:
        """Return the timestamp of the oldest element, or `None` if empty."""
        return self._elements[0].timestamp if self._elements else None

    @property
    def last_timestamp(self) -> TimeStamp | None:
        """Return the timestamp of the newest element, or `None` if empty."""
        return self._elements[-1].timestamp if self._elements else None

    @property
    def last_value(self) -> float:
        """Return the value of the newest sample, or `0.0` if the series is empty."""
        return self._elements[-1].sample.value if self._elements else 0.0

    def push(self, timestamp: TimeStamp, value: float) -> None:
        """Append a new value to the series.

        Args:
            timestamp: The timestamp of the value. Must not be older than the
                newest timestamp in the series.
            value: The value, stored as a `Point`.
        """
        self.push_sample(timestamp, Point(value))

    def push_sample(self, timestamp: TimeStamp, sample: Sample) -> None:
        """Append a new sample to the series.

        Args:
            timestamp: The timestamp of the sample. Must not be older than the
                newest timestamp in the series.
            sample: The sample to append.

        Raises:
            OutOfOrderSampleError: If `timestamp` is older than the newest
                timestamp in the series. The series is left untouched.
        """
        if self._elements and timestamp < self._elements[-1].timestamp:
            raise OutOfOrderSampleError(timestamp, self._elements[-1].timestamp)
        self._elements.append(Element(timestamp, sample))
        self._generation += 1

    def at_or_after(self, timestamp: TimeStamp) -> Element | None:
        """Find the oldest element at or after the given timestamp.

        Args:
            timestamp: The timestamp to look for.

        Returns:
            The first element with a timestamp greater than or equal to
                `timestamp`, or `None` if `timestamp` is past the newest
                element.
        """
        index = bisect_left(self._elements, timestamp, key=lambda e: e.timestamp)
        if index < len(self._elements):
            return self._elements[index]
        return None

    def windows(self, interval: Interval, start_ts: TimeStamp) -> WindowIterator:
        """Partition the series into fixed-width buckets.

        Args:
            interval: The width of each bucket, in milliseconds.
            start_ts: The start of the first bucket.

        Returns:
            An iterator over the windows of this series.
        """
        return WindowIterator(self, interval, start_ts)

    def elements_in(self, window: Window) -> list[Element]:
        """Get a copy of the elements covered by a window.

        Args:
            window: A window produced by iterating over this series.

        Returns:
            The elements in the window, an empty list for an empty window.

        Raises:
            StaleWindowError: If the series was appended to after the window
                was produced.
        """
        match window:
            case EmptyWindow():
                return []
            case RangeWindow(start=start, end=end, generation=generation):
                if generation is not None and generation != self._generation:
                    raise StaleWindowError(
                        f"Window {window} was produced at generation {generation}, "
                        f"but the series is at generation {self._generation}"
                    )
                return self._elements[start : end + 1]
            case unexpected:
                assert_never(unexpected)

    def to_arrays(
        self, fill_value: float = np.nan
    ) -> tuple[npt.NDArray[np.int64], npt.NDArray[np.float64]]:
        """Export the series as numpy arrays.

        Args:
            fill_value: The value to use for `Err` samples.

        Returns:
            The timestamps and the values of the series.
        """
        timestamps = np.fromiter(
            (e.timestamp for e in self._elements),
            dtype=np.int64,
            count=len(self._elements),
        )
        values = np.fromiter(
            (fill_value if e.sample.is_err() else e.sample.value for e in self._elements),
            dtype=np.float64,
            count=len(self._elements),
        )
        return timestamps, values

    def render(self) -> Iterator[tuple[TimeStamp, str]]:
        """Render the series for display.

        Yields:
            The timestamp and the rendered sample of each element.
        """
        for element in self._elements:
            yield element.timestamp, str(element.sample)

    @overload
    def __getitem__(self, index: int) -> Element: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Element]: ...

    def __getitem__(self, index: int | slice) -> Element | Sequence[Element]:
        """Get an element or a slice of this series.

        Args:
            index: The index of the element or parameters of the slice to get.

        Returns:
            The element or a copy of the slice.
        """
        return self._elements[index]

    def __len__(self) -> int:
        """Get the number of elements in this series.

        Returns:
            The number of elements in this series.
        """
        return len(self._elements)

    def __iter__(self) -> Iterator[Element]:
        """Iterate over the elements of this series.

        Returns:
            An iterator over the elements, oldest first.
        """
        return iter(self._elements)

    def __str__(self) -> str:
        """Return one rendered element per line.

        Returns:
            The rendered series.
        """
        return "".join(f"\n {ts} {sample}" for ts, sample in self.render())

    def __repr__(self) -> str:
        """Return the representation of this series.

        Returns:
            The representation of this series.
        """
        return f"{self.__class__.__name__}({self._elements!r})"
