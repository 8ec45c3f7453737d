# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Frequenz downsampling example.

Feeds a stream with readings from a fake counter every 10ms, then builds a
rate tier and a small chain of gauge tiers from it and prints them.
"""

import asyncio
import logging
import random

from frequenz.channels import Broadcast, Sender

from frequenz.downsampling import (
    AlignedSeries,
    Clock,
    Downsampler,
    DownsamplingConfig,
    Metric,
    Reading,
    TierConfig,
    WallClock,
    ingest,
    to_datetime,
)
from frequenz.downsampling.ops import Aggregation

SAMPLING_PERIOD_S = 0.01
NUM_READINGS = 100


async def _produce(sender: Sender[Reading], clock: Clock) -> None:
    """Send the readings of a counter that resets once."""
    counter = 0.0
    for i in range(NUM_READINGS):
        counter = 0.0 if i == NUM_READINGS // 2 else counter + random.uniform(0, 5)
        # Every 20th reading is missing
        value = None if i % 20 == 19 else counter
        await sender.send(Reading(to_datetime(clock.now()), value))
        await asyncio.sleep(SAMPLING_PERIOD_S)


def _print_tier(name: str, series: AlignedSeries) -> None:
    print(f"\n{name}:")
    for timestamp, rendered in series.render():
        print(f"  {to_datetime(timestamp).time().isoformat()} {rendered}")


async def run() -> None:
    """Ingest the readings and downsample them."""
    metric = Metric("requests_total", [("host", "localhost")])
    channel = Broadcast[Reading](name="requests")
    receiver = channel.new_receiver()

    ingestion = asyncio.create_task(ingest(receiver, metric.stream))
    clock = WallClock()
    await _produce(channel.new_sender(), clock)
    await channel.close()
    stats = await ingestion
    print(f"Ingested {metric.name} {metric.tags}: {stats}")

    raw = metric.stream.latest_raw
    assert raw is not None and raw.first_timestamp is not None

    # Align the rate tier at a 100ms boundary
    start_ts = raw.first_timestamp - raw.first_timestamp % 100
    _print_tier("rate (50ms)", metric.stream.align(50, start_ts))

    downsampler = Downsampler(
        DownsamplingConfig(
            (
                TierConfig("100ms", 100, Aggregation.MAX),
                TierConfig("500ms", 500, Aggregation.MAX, source="100ms"),
                TierConfig("250ms", 250, Aggregation.MEAN),
            )
        )
    )
    for name, series in downsampler.apply(metric.stream).items():
        _print_tier(name, series)

    print(f"\nDone at {to_datetime(clock.now()).isoformat()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(run())
