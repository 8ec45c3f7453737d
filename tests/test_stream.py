# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Tests for the `Stream` and `Metric` classes."""

import pytest

from frequenz.downsampling import (
    AlignedSeries,
    ConfigurationError,
    Err,
    Metric,
    Point,
    Stream,
)
from frequenz.downsampling.ops import Aggregation

from .utils import make_aligned, points


@pytest.fixture
def counter() -> Stream:
    """Create a stream with a growing counter, reset once."""
    stream = Stream()
    for ts, value in [(0, 10), (4, 12), (9, 13), (15, 20), (27, 26), (32, 3), (38, 5)]:
        stream.push_raw(ts, value)
    return stream


def test_push_raw_creates_buffer() -> None:
    """Test the first raw push creates a buffer."""
    stream = Stream()
    assert stream.latest_raw is None
    assert not stream.raw

    stream.push_raw(0, 1.0)
    stream.push_raw_sample(5, Err())

    assert len(stream.raw) == 1
    raw = stream.latest_raw
    assert raw is not None
    assert [e.sample for e in raw] == [Point(1.0), Err()]


def test_new_raw() -> None:
    """Test pushes go to the newest raw buffer."""
    stream = Stream()
    stream.push_raw(0, 1.0)
    second = stream.new_raw()
    stream.push_raw(0, 2.0)

    assert len(stream.raw) == 2
    assert stream.latest_raw is second
    assert len(stream.raw[0]) == 1
    assert len(second) == 1


def test_new_interval() -> None:
    """Test registering an empty tier."""
    stream = Stream()
    tier = stream.new_interval(60_000, 0)

    assert not tier
    assert stream.get(60_000, 0) is tier
    assert stream.get(60_000, 1) is None
    assert stream.intervals() == [60_000]


def test_align(counter: Stream) -> None:
    """Test building a rate tier from a counter."""
    rate = counter.align(10, 0)

    # youngest per bucket: 13, 20, 26, 5
    assert rate == make_aligned(10, 0, 0, 7, 6, 5)
    assert counter.get(10, 0) is rate
    # Raw data is untouched
    assert counter.latest_raw is not None
    assert len(counter.latest_raw) == 7


def test_align_with_gaps() -> None:
    """Test empty buckets make errors in the rate."""
    stream = Stream()
    stream.push_raw(0, 1)
    stream.push_raw(25, 4)

    assert list(stream.align(10, 0)) == [Point(0), Err(), Err()]


def test_align_end_ts(counter: Stream) -> None:
    """Test building a rate tier up to an end timestamp."""
    assert counter.align(10, 0, 15) == make_aligned(10, 0, 0, 7)
    with pytest.raises(ConfigurationError):
        counter.align(10, 20, 15)


def test_align_replaces(counter: Stream) -> None:
    """Test aligning again for the same key replaces the tier."""
    first = counter.align(10, 0)
    counter.push_raw(45, 9)
    second = counter.align(10, 0)

    assert first is not second
    assert counter.get(10, 0) is second
    assert len(second) == len(first) + 1
    assert len(list(counter.tiers())) == 1


def test_align_without_raw() -> None:
    """Test aligning a stream without raw data."""
    stream = Stream()
    tier = stream.align(10, 0)
    assert not tier
    assert stream.get(10, 0) is tier


def test_downsample_and_derive(counter: Stream) -> None:
    """Test building gauge-like tiers."""
    fine = counter.downsample(10, 0, "max")
    assert fine == make_aligned(10, 0, 13, 20, 26, 5)

    coarse = counter.derive(10, 0, 20, Aggregation.MIN)
    assert coarse == make_aligned(20, 0, 13, 5)

    assert counter.intervals() == [10, 20]
    assert list(counter.tiers()) == [fine, coarse]
    assert counter.aligned == {10: {0: fine}, 20: {0: coarse}}


def test_downsample_unknown_op(counter: Stream) -> None:
    """Test downsampling with an unknown aggregation."""
    with pytest.raises(ConfigurationError):
        counter.downsample(10, 0, "median")
    assert not counter.aligned


def test_derive_missing_source(counter: Stream) -> None:
    """Test deriving from a tier that doesn't exist."""
    counter.downsample(10, 0, "max")
    with pytest.raises(KeyError):
        counter.derive(10, 5, 20, "max")


def test_tiers_order() -> None:
    """Test tiers are ordered by interval, then start."""
    stream = Stream()
    b = stream.new_interval(20, 5)
    a = stream.new_interval(20, 0)
    c = stream.new_interval(10, 100)
    assert list(stream.tiers()) == [c, a, b]
    assert all(isinstance(tier, AlignedSeries) for tier in stream.tiers())


def test_metric() -> None:
    """Test identifying streams."""
    metric = Metric("cpu_usage", [("host", "node-1"), ("core", 3)])
    assert metric.tag("host") == "node-1"
    assert metric.tag("core") == 3
    assert metric.tag("rack") is None

    metric.stream.push_raw(0, 0.5)
    assert Metric("cpu_usage").stream.latest_raw is None
    assert not Metric("cpu_usage").tags
    assert list(metric.stream.downsample(10, 0, "mean")) == points(0.5)


def test_insert() -> None:
    """Test storing tiers built elsewhere."""
    stream = Stream()
    first = stream.insert(make_aligned(10, 0, 1, 2))
    assert stream.get(10, 0) is first

    second = stream.insert(make_aligned(10, 0, 3))
    assert stream.get(10, 0) is second
    assert list(stream.tiers()) == [second]
