# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Series with a fixed interval between samples."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import overload

import numpy as np
import numpy.typing as npt

from ._base_types import Interval, TimeStamp, check_interval, format_interval
from ._exceptions import ConfigurationError
from ._raw_series import RawSeries
from ._sample import Element, Point, Sample
from .ops import Aggregation, ElementOp, SampleOp

_logger = logging.getLogger(__name__)


class AlignedSeries(Sequence[Sample]):
    """A series of samples spaced exactly `interval` milliseconds apart.

    The sample at position `i` represents the bucket
    `[start_ts + i * interval, start_ts + (i + 1) * interval)`.

    Aligned series are either built incrementally by pushing samples, or in
    one pass from a [`RawSeries`][frequenz.downsampling.RawSeries] with
    [`from_raw_series()`][frequenz.downsampling.AlignedSeries.from_raw_series].
    They can be further re-aggregated into new aligned series with
    [`sliding_aggregate()`][frequenz.downsampling.AlignedSeries.sliding_aggregate]
    and [`downsample()`][frequenz.downsampling.AlignedSeries.downsample].
    """

    def __init__(
        self,
        interval: Interval,
        start_ts: TimeStamp,
        values: Iterable[Sample] = (),
    ) -> None:
        """Create an instance.

        Args:
            interval: The width of each bucket, in milliseconds.
            start_ts: The start of the first bucket.
            values: Initial samples, one per bucket.
        """
        check_interval(interval)
        self._interval: Interval = interval
        self._start_ts: TimeStamp = start_ts
        self._values: list[Sample] = list(values)

    @classmethod
    def from_raw_series(
        cls,
        series: RawSeries,
        interval: Interval,
        start_ts: TimeStamp,
        end_ts: TimeStamp | None = None,
        *,
        op: ElementOp = Aggregation.YOUNGEST,
    ) -> AlignedSeries:
        """Build an aligned series by aggregating the buckets of a raw series.

        Args:
            series: The raw series to aggregate.
            interval: The width of each bucket, in milliseconds.
            start_ts: The start of the first bucket.
            end_ts: If given, no bucket starting after this timestamp is
                produced.
            op: The operator used to reduce each bucket.

        Returns:
            A new aligned series with one sample per bucket.

        Raises:
            ConfigurationError: If `interval` is not positive or `end_ts` is
                before `start_ts`.
        """
        if end_ts is not None and end_ts < start_ts:
            raise ConfigurationError(
                f"end_ts ({end_ts}) must be greater than or equal to "
                f"start_ts ({start_ts})"
            )

        windows = series.windows(interval, start_ts)
        if end_ts is not None:
            windows.set_end_ts(end_ts)

        aligned = cls(interval, start_ts, windows.aggregate(op))
        _logger.debug(
            "Aligned %s raw samples into %s buckets of %s starting at %s",
            len(series),
            len(aligned),
            format_interval(interval),
            start_ts,
        )
        return aligned

    @property
    def interval(self) -> Interval:
        """Return the width of each bucket, in milliseconds."""
        return self._interval

    @property
    def start_ts(self) -> TimeStamp:
        """Return the start of the first bucket."""
        return self._start_ts

    @property
    def end_ts(self) -> TimeStamp:
        """Return the end (exclusive) of the last bucket."""
        return self.timestamp_at(len(self._values))

    @property
    def values(self) -> Sequence[Sample]:
        """Return the samples of this series, one per bucket."""
        return self._values

    def timestamp_at(self, index: int) -> TimeStamp:
        """Return the start timestamp of the bucket at the given position."""
        return self._start_ts + index * self._interval

    def push(self, value: float) -> None:
        """Append a new value to the series.

        Args:
            value: The value, stored as a `Point`.
        """
        self.push_sample(Point(value))

    def push_sample(self, sample: Sample) -> None:
        """Append a new sample to the series.

        Args:
            sample: The sample to append.
        """
        self._values.append(sample)

    def sliding_aggregate(self, window_len: int, op: SampleOp) -> AlignedSeries:
        """Re-aggregate the series over a sliding window.

        A window of `window_len` consecutive samples is slid one position at a
        time over the series and reduced with `op`, for example `delta` over
        pairs turns a counter into a rate-like series.

        The result is index-aligned with this series: the first
        `window_len - 1` positions, for which there is no full window yet,
        are filled with `Point(0.0)`.

        Args:
            window_len: The number of consecutive samples in each window.
            op: The operator used to reduce each window.

        Returns:
            A new aligned series with the same interval, start and length.

        Raises:
            ConfigurationError: If `window_len` is smaller than 1.
        """
        if window_len < 1:
            raise ConfigurationError(f"window_len ({window_len}) must be at least 1")

        placeholders = min(window_len - 1, len(self._values))
        result = AlignedSeries(
            self._interval, self._start_ts, [Point(0.0)] * placeholders
        )
        for index in range(len(self._values) - window_len + 1):
            result.push_sample(op(self._values[index : index + window_len]))
        return result

    def downsample(self, interval: Interval, op: SampleOp) -> AlignedSeries:
        """Derive a coarser series from this one.

        Consecutive groups of `interval // self.interval` samples are reduced
        with `op`. The last group may be partial.

        Args:
            interval: The width of each bucket of the new series. Must be a
                multiple of the interval of this series.
            op: The operator used to reduce each group.

        Returns:
            A new aligned series with the same start.

        Raises:
            ConfigurationError: If `interval` is not a positive multiple of the
                interval of this series.
        """
        check_interval(interval)
        if interval % self._interval != 0:
            raise ConfigurationError(
                f"interval ({format_interval(interval)}) must be a multiple of "
                f"{format_interval(self._interval)}"
            )

        factor = interval // self._interval
        return AlignedSeries(
            interval,
            self._start_ts,
            (
                op(self._values[index : index + factor])
                for index in range(0, len(self._values), factor)
            ),
        )

    def at_or_after(self, timestamp: TimeStamp) -> Element | None:
        """Find the first bucket starting at or after the given timestamp.

        Args:
            timestamp: The timestamp to look for.

        Returns:
            The start of the bucket and its sample, or `None` if there is no
                such bucket. Timestamps at or before the start of the series
                return the first bucket.
        """
        if timestamp <= self._start_ts:
            if not self._values:
                return None
            return Element(self._start_ts, self._values[0])

        index, remainder = divmod(timestamp - self._start_ts, self._interval)
        if remainder:
            index += 1
        if index < len(self._values):
            return Element(self.timestamp_at(index), self._values[index])
        return None

    def to_array(self, fill_value: float = np.nan) -> npt.NDArray[np.float64]:
        """Export the values of the series as a numpy array.

        Args:
            fill_value: The value to use for `Err` samples.

        Returns:
            The values of the series, one per bucket.
        """
        return np.fromiter(
            (fill_value if s.is_err() else s.value for s in self._values),
            dtype=np.float64,
            count=len(self._values),
        )

    def render(self) -> Iterator[tuple[TimeStamp, str]]:
        """Render the series for display.

        Yields:
            The start timestamp and the rendered sample of each bucket.
        """
        for index, sample in enumerate(self._values):
            yield self.timestamp_at(index), str(sample)

    @overload
    def __getitem__(self, index: int) -> Sample: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Sample]: ...

    def __getitem__(self, index: int | slice) -> Sample | Sequence[Sample]:
        """Get a sample or a slice of this series.

        Args:
            index: The position of the sample or parameters of the slice to get.

        Returns:
            The sample or a copy of the slice.
        """
        return self._values[index]

    def __len__(self) -> int:
        """Get the number of buckets in this series.

        Returns:
            The number of buckets in this series.
        """
        return len(self._values)

    def __iter__(self) -> Iterator[Sample]:
        """Iterate over the samples of this series.

        Returns:
            An iterator over the samples, oldest first.
        """
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        """Compare this series to another object.

        Returns:
            `True` if the other object is an aligned series with the same
                interval, start and samples.
        """
        if not isinstance(other, AlignedSeries):
            return NotImplemented
        return (
            self._interval == other._interval
            and self._start_ts == other._start_ts
            and self._values == other._values
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        """Return one rendered bucket per line.

        Returns:
            The rendered series.
        """
        return "".join(f"\n {ts} {sample}" for ts, sample in self.render())

    def __repr__(self) -> str:
        """Return the representation of this series.

        Returns:
            The representation of this series.
        """
        return (
            f"{self.__class__.__name__}(interval={self._interval!r}, "
            f"start_ts={self._start_ts!r}, values={self._values!r})"
        )
