# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Apply a tier configuration to a stream."""

import logging
import math

from ._aligned_series import AlignedSeries
from ._base_types import Interval, TimeStamp, format_interval, to_timestamp
from ._config import RAW_SOURCE, DownsamplingConfig, TierConfig
from ._stream import Stream

_logger = logging.getLogger(__name__)


class Downsampler:
    """Build the tiers described by a configuration on a stream.

    Tiers taking their data from `raw` are aggregated from the latest raw
    buffer of the stream, the others are derived from the tier they name as
    their source. All the tiers of a chain share the same start, which is
    the last bucket boundary of every interval in the chain at or before the
    first raw sample. Since every interval in a chain is a multiple of its
    source, all buckets of all tiers fall on boundaries of their own interval.

    Tiers are stored in the stream by interval and start, so two tiers with
    the same interval in the same chain replace each other.
    """

    def __init__(self, config: DownsamplingConfig) -> None:
        """Create an instance.

        Args:
            config: The tiers to build.
        """
        self._config = config
        self._align_to: TimeStamp = to_timestamp(config.align_to)

    @property
    def config(self) -> DownsamplingConfig:
        """Return the configuration of this downsampler."""
        return self._config

    def align(self, timestamp: TimeStamp, interval: Interval) -> TimeStamp:
        """Return the last bucket boundary at or before `timestamp`.

        Args:
            timestamp: The timestamp to align.
            interval: The bucket width.

        Returns:
            The aligned timestamp.
        """
        return timestamp - (timestamp - self._align_to) % interval

    def apply(
        self, stream: Stream, end_ts: TimeStamp | None = None
    ) -> dict[str, AlignedSeries]:
        """Build all configured tiers on the stream.

        Every tier is built before any of them is stored, so the stream is
        left untouched if building fails.

        Args:
            stream: The stream to downsample.
            end_ts: If given, no bucket starting after this timestamp is
                produced for tiers built from raw data. A chain that starts
                after `end_ts` gets empty tiers.

        Returns:
            The built tiers, by name, in configuration order. Empty if the
                stream has no raw samples.
        """
        raw = stream.latest_raw
        if raw is None or raw.first_timestamp is None:
            _logger.debug("No raw samples to downsample")
            return {}

        first_ts = raw.first_timestamp
        built: dict[str, AlignedSeries] = {}
        for tier in self._config.tiers:
            if tier.source == RAW_SOURCE:
                start_ts = self.align(first_ts, self._chain_interval(tier))
                if end_ts is not None and end_ts < start_ts:
                    series = AlignedSeries(tier.interval, start_ts)
                else:
                    series = AlignedSeries.from_raw_series(
                        raw, tier.interval, start_ts, end_ts, op=tier.op
                    )
            else:
                # Not looked up by key, another tier may share the source's key.
                series = built[tier.source].downsample(
                    tier.interval, tier.op.on_samples
                )
            _logger.debug(
                "Built tier %r (%s, %s) from %r: %s buckets starting at %s",
                tier.name,
                format_interval(tier.interval),
                tier.op,
                tier.source,
                len(series),
                series.start_ts,
            )
            built[tier.name] = series

        for series in built.values():
            stream.insert(series)
        return built

    def _chain_interval(self, root: TierConfig) -> Interval:
        """Return the smallest interval every tier derived from `root` divides."""
        members = {root.name}
        interval = root.interval
        for tier in self._config.tiers:
            if tier.source in members:
                members.add(tier.name)
                interval = math.lcm(interval, tier.interval)
        return interval
