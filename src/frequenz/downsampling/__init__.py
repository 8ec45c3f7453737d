# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""
Storage and downsampling of metric time series.

Raw samples of a metric are appended, in time order, to a
[`RawSeries`][frequenz.downsampling.RawSeries]. From it, any number of tiers
can be built: [`AlignedSeries`][frequenz.downsampling.AlignedSeries] with one
[`Sample`][frequenz.downsampling.Sample] per fixed-width bucket, each bucket
reduced by an [aggregation][frequenz.downsampling.ops.Aggregation]. Coarser
tiers can then be derived from finer ones without touching the raw data.

# Timestamps and buckets

All timestamps are integer milliseconds since the UNIX epoch, and intervals are
integer milliseconds too. A bucket `i` of a tier with interval `I` starting at
`S` covers `[S + i * I, S + (i + 1) * I)`.

Example:
    With a 10 second interval starting at `0`, a raw sample at 32 seconds
    falls in the bucket starting at 30 seconds:

    ```
    start_ts = 0                          bucket of the sample
    |                                     |
    |---------|---------|---------|-|-------|---------|---------|
    0        10        20        30 |      40        50        60
                                  sample = 32s
    ```

# Samples

For most aggregations, a bucket that got no data holds an
[`Err`][frequenz.downsampling.Err] marker, while `sum` gives `Point(0.0)`.
Values that were synthesized instead of measured are tagged as
[`Fake`][frequenz.downsampling.Fake]. Aggregations skip or propagate these
markers so that an aggregate never silently looks like a real measurement.
"""

from ._aligned_series import AlignedSeries
from ._base_types import (
    UNIX_EPOCH,
    Interval,
    Reading,
    TimeStamp,
    format_interval,
    parse_interval,
    to_datetime,
    to_interval,
    to_timestamp,
)
from ._clock import Clock, WallClock
from ._config import RAW_SOURCE, DownsamplingConfig, TierConfig, load_config
from ._downsampler import Downsampler
from ._exceptions import ConfigurationError, OutOfOrderSampleError, StaleWindowError
from ._ingest import IngestStats, ingest
from ._raw_series import RawSeries
from ._sample import Element, Err, Fake, Point, Sample, Zero
from ._stream import Metric, Stream, TagValue
from ._window import EmptyWindow, RangeWindow, Window, WindowIterator

__all__ = [
    "AlignedSeries",
    "Clock",
    "ConfigurationError",
    "Downsampler",
    "DownsamplingConfig",
    "Element",
    "EmptyWindow",
    "Err",
    "Fake",
    "IngestStats",
    "Interval",
    "Metric",
    "OutOfOrderSampleError",
    "Point",
    "RAW_SOURCE",
    "RangeWindow",
    "RawSeries",
    "Reading",
    "Sample",
    "StaleWindowError",
    "Stream",
    "TagValue",
    "TierConfig",
    "TimeStamp",
    "UNIX_EPOCH",
    "WallClock",
    "Window",
    "WindowIterator",
    "Zero",
    "format_interval",
    "ingest",
    "load_config",
    "parse_interval",
    "to_datetime",
    "to_interval",
    "to_timestamp",
]
