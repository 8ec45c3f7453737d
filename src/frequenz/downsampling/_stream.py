# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""A metric's full retention tree: raw buffers plus downsampled tiers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeAlias

from ._aligned_series import AlignedSeries
from ._base_types import Interval, TimeStamp, format_interval
from ._raw_series import RawSeries
from ._sample import Sample
from .ops import Aggregation, samples

_logger = logging.getLogger(__name__)

TagValue: TypeAlias = str | int
"""The value of a metric tag."""


class Stream:
    """Raw samples of one metric and every tier derived from them.

    Raw samples are pushed to the most recently created raw buffer. Tiers are
    aligned series keyed by their interval and start timestamp. Building a
    tier again for the same key replaces the previous one, and never touches
    the raw data.

    Example:
        ```python
        stream = Stream()
        for ts, value in readings:
            stream.push_raw(ts, value)

        # Counter to rate, one bucket per minute
        rate = stream.align(60_000, start_ts)
        # Gauge-like tiers
        stream.downsample(60_000, start_ts, Aggregation.MAX)
        stream.derive(60_000, start_ts, 300_000, Aggregation.MAX)
        ```
    """

    def __init__(self) -> None:
        """Create an empty stream."""
        self._raw: list[RawSeries] = []
        self._aligned: dict[Interval, dict[TimeStamp, AlignedSeries]] = {}

    @property
    def raw(self) -> list[RawSeries]:
        """Return the raw buffers, oldest first."""
        return self._raw

    @property
    def aligned(self) -> dict[Interval, dict[TimeStamp, AlignedSeries]]:
        """Return the tiers, keyed by interval and start timestamp."""
        return self._aligned

    @property
    def latest_raw(self) -> RawSeries | None:
        """Return the most recently created raw buffer, if any."""
        return self._raw[-1] if self._raw else None

    def new_raw(self) -> RawSeries:
        """Start a new raw buffer.

        Returns:
            The new buffer, which receives all raw pushes from now on.
        """
        series = RawSeries()
        self._raw.append(series)
        return series

    def push_raw(self, timestamp: TimeStamp, value: float) -> None:
        """Append a value to the latest raw buffer, creating one if needed.

        Args:
            timestamp: The timestamp of the value.
            value: The value, stored as a `Point`.
        """
        self._writable_raw().push(timestamp, value)

    def push_raw_sample(self, timestamp: TimeStamp, sample: Sample) -> None:
        """Append a sample to the latest raw buffer, creating one if needed.

        Args:
            timestamp: The timestamp of the sample.
            sample: The sample to append.
        """
        self._writable_raw().push_sample(timestamp, sample)

    def new_interval(self, interval: Interval, start_ts: TimeStamp) -> AlignedSeries:
        """Register an empty tier.

        Args:
            interval: The width of each bucket of the tier.
            start_ts: The start of the first bucket of the tier.

        Returns:
            The new, empty tier.
        """
        return self.insert(AlignedSeries(interval, start_ts))

    def align(
        self,
        interval: Interval,
        start_ts: TimeStamp,
        end_ts: TimeStamp | None = None,
    ) -> AlignedSeries:
        """Build a rate-like tier from the latest raw buffer.

        The raw counter samples are sampled with `youngest` in each bucket,
        and the result is turned into per-bucket increases with a sliding
        `delta` over consecutive buckets. Only the increases are stored.

        Args:
            interval: The width of each bucket of the tier.
            start_ts: The start of the first bucket of the tier.
            end_ts: If given, no bucket starting after this timestamp is
                produced.

        Returns:
            The stored tier.
        """
        sampled = AlignedSeries.from_raw_series(
            self._readable_raw(), interval, start_ts, end_ts, op=Aggregation.YOUNGEST
        )
        return self.insert(sampled.sliding_aggregate(2, samples.delta))

    def downsample(
        self,
        interval: Interval,
        start_ts: TimeStamp,
        op: Aggregation | str,
        end_ts: TimeStamp | None = None,
    ) -> AlignedSeries:
        """Build a tier from the latest raw buffer with any aggregation.

        Args:
            interval: The width of each bucket of the tier.
            start_ts: The start of the first bucket of the tier.
            op: The aggregation, or its name, used to reduce each bucket.
            end_ts: If given, no bucket starting after this timestamp is
                produced.

        Returns:
            The stored tier.
        """
        aggregation = Aggregation.from_name(op)
        return self.insert(
            AlignedSeries.from_raw_series(
                self._readable_raw(), interval, start_ts, end_ts, op=aggregation
            )
        )

    def derive(
        self,
        source_interval: Interval,
        start_ts: TimeStamp,
        interval: Interval,
        op: Aggregation | str,
    ) -> AlignedSeries:
        """Build a coarser tier from an existing one.

        Args:
            source_interval: The interval of the existing tier.
            start_ts: The start of the existing tier, also used for the new one.
            interval: The width of each bucket of the new tier, a multiple of
                `source_interval`.
            op: The aggregation, or its name, used to reduce each group of
                source buckets.

        Returns:
            The stored tier.

        Raises:
            KeyError: If there is no tier for `(source_interval, start_ts)`.
        """
        source = self.get(source_interval, start_ts)
        if source is None:
            raise KeyError(
                f"No tier with interval {format_interval(source_interval)} "
                f"starting at {start_ts}"
            )
        aggregation = Aggregation.from_name(op)
        return self.insert(source.downsample(interval, aggregation.on_samples))

    def get(self, interval: Interval, start_ts: TimeStamp) -> AlignedSeries | None:
        """Get the tier for the given key.

        Args:
            interval: The interval of the tier.
            start_ts: The start of the tier.

        Returns:
            The tier, or `None` if there is none for this key.
        """
        return self._aligned.get(interval, {}).get(start_ts)

    def intervals(self) -> list[Interval]:
        """Return the intervals for which there are tiers, shortest first."""
        return sorted(self._aligned)

    def tiers(self) -> Iterator[AlignedSeries]:
        """Iterate over all tiers, ordered by interval and then start.

        Yields:
            Each stored tier.
        """
        for interval in self.intervals():
            by_start = self._aligned[interval]
            for start_ts in sorted(by_start):
                yield by_start[start_ts]

    def insert(self, series: AlignedSeries) -> AlignedSeries:
        """Store a tier built elsewhere, replacing any tier with the same key.

        Args:
            series: The tier to store, keyed by its interval and start.

        Returns:
            The stored tier.
        """
        by_start = self._aligned.setdefault(series.interval, {})
        if series.start_ts in by_start:
            _logger.debug(
                "Replacing tier %s starting at %s",
                format_interval(series.interval),
                series.start_ts,
            )
        by_start[series.start_ts] = series
        return series

    def _writable_raw(self) -> RawSeries:
        return self._raw[-1] if self._raw else self.new_raw()

    def _readable_raw(self) -> RawSeries:
        if not self._raw:
            _logger.debug("Building a tier from a stream with no raw data")
            return RawSeries()
        return self._raw[-1]


@dataclass
class Metric:
    """A stream with the name and tags that identify it."""

    name: str
    """The name of the metric."""

    tags: list[tuple[str, TagValue]] = field(default_factory=list)
    """Identification tags, in order."""

    stream: Stream = field(default_factory=Stream)
    """The samples of the metric."""

    def tag(self, name: str) -> TagValue | None:
        """Return the value of the first tag with the given name, if any."""
        return next((value for tag, value in self.tags if tag == name), None)
