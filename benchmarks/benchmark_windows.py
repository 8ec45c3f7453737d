# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Performance test for building tiers from raw series.

Partitioning a raw series is a single pass over its elements, so the time to
build a tier should grow with the number of raw samples and barely with the
number of buckets.
"""

import random
import timeit

from frequenz.downsampling import AlignedSeries, RawSeries, Stream
from frequenz.downsampling.ops import Aggregation, samples

SECONDS_IN_A_DAY = 24 * 60 * 60
MINUTE = 60_000


def fill_series(days: int) -> RawSeries:
    """Create a series with one sample per second, with jitter, for some days."""
    random.seed(0)
    series = RawSeries()
    for second in range(days * SECONDS_IN_A_DAY):
        series.push(second * 1000 + random.randint(0, 999), random.random())
    return series


def build_tier(series: RawSeries, interval: int) -> AlignedSeries:
    """Build one tier of maximums from the raw series."""
    return AlignedSeries.from_raw_series(series, interval, 0, op=Aggregation.MAX)


def build_chain(series: RawSeries) -> None:
    """Build a 1m, 5m, 1h, 24h chain, deriving each tier from the previous one."""
    stream = Stream()
    stream.raw.append(series)
    stream.downsample(MINUTE, 0, Aggregation.MAX)
    stream.derive(MINUTE, 0, 5 * MINUTE, Aggregation.MAX)
    stream.derive(5 * MINUTE, 0, 60 * MINUTE, Aggregation.MAX)
    stream.derive(60 * MINUTE, 0, 24 * 60 * MINUTE, Aggregation.MAX)


def main() -> None:
    """Run benchmark."""
    num_runs = 5
    days = 2

    print("..filling", end="", flush=True)
    fill_time = timeit.Timer(lambda: fill_series(days)).timeit(number=1)
    series = fill_series(days)
    print(f"\nTime to fill {days} days with data: {fill_time} seconds")

    for interval in [100, 1000, MINUTE, 60 * MINUTE]:
        tier_time = timeit.Timer(lambda: build_tier(series, interval)).timeit(
            number=num_runs
        )
        print(
            f"Tier of {interval}ms ({len(build_tier(series, interval))} buckets):\n\t"
            + f"{tier_time / num_runs} seconds"
        )

    chain_time = timeit.Timer(lambda: build_chain(series)).timeit(number=num_runs)
    print(f"Chain 1m -> 5m -> 1h -> 24h:\n\t{chain_time / num_runs} seconds")

    minutes = build_tier(series, MINUTE)
    rate_time = timeit.Timer(
        lambda: minutes.sliding_aggregate(2, samples.delta)
    ).timeit(number=num_runs)
    print(f"Sliding delta over 1m tier:\n\t{rate_time / num_runs} seconds")


if __name__ == "__main__":
    main()
