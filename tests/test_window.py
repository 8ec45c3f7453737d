# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Tests for the partitioning of raw series in windows."""

import random

import pytest

from frequenz.downsampling import (
    ConfigurationError,
    EmptyWindow,
    Err,
    Point,
    RangeWindow,
    RawSeries,
    StaleWindowError,
)
from frequenz.downsampling.ops import Aggregation

from .utils import make_series

TEN_SECONDS = 10_000
TEN_MINUTES = 600_000


@pytest.fixture
def ten_minutes() -> RawSeries:
    """Create ten minutes of samples, one every 10 seconds, with values `0..59`."""
    return make_series(
        (ts, float(i)) for i, ts in enumerate(range(0, TEN_MINUTES, TEN_SECONDS))
    )


@pytest.mark.parametrize(
    "interval, num_windows, per_window",
    [(60_000, 10, 6), (120_000, 5, 12), (30_000, 20, 3)],
)
def test_even_buckets(
    ten_minutes: RawSeries, interval: int, num_windows: int, per_window: int
) -> None:
    """Test buckets that are a multiple of the sampling period."""
    windows = ten_minutes.windows(interval, 0)
    assert windows.num_windows == num_windows

    produced = list(windows)
    assert len(produced) == num_windows
    for i, window in enumerate(produced):
        assert window == RangeWindow(i * per_window, (i + 1) * per_window - 1)


def test_sparse_buckets(ten_minutes: RawSeries) -> None:
    """Test buckets shorter than the sampling period."""
    windows = list(ten_minutes.windows(2_000, 0))

    assert len(windows) == 590_000 // 2_000 + 1
    for i, window in enumerate(windows):
        if i % 5 == 0:
            assert window == RangeWindow(i // 5, i // 5)
        else:
            assert window == EmptyWindow()


def test_irregular_series() -> None:
    """Test partitioning a series with gaps and repeated timestamps."""
    series = make_series(
        [(0, 0), (2, 1), (3, 2), (4, 3), (6, 4), (7, 5), (9, 6), (9, 7), (15, 8)]
    )
    assert list(series.windows(5, 0)) == [
        RangeWindow(0, 3),
        RangeWindow(4, 7),
        EmptyWindow(),
        RangeWindow(8, 8),
    ]


def test_elements_before_start_are_skipped() -> None:
    """Test elements older than the start are not in any window."""
    series = make_series([(0, 0), (5, 1), (10, 2), (12, 3), (25, 4)])
    assert list(series.windows(10, 10)) == [
        RangeWindow(2, 3),
        RangeWindow(4, 4),
    ]


def test_no_windows() -> None:
    """Test partitions without any bucket."""
    assert not list(RawSeries().windows(10, 0))
    series = make_series([(0, 1), (5, 2)])
    windows = series.windows(10, 6)
    assert windows.num_windows == 0
    assert not list(windows)


def test_invalid_interval() -> None:
    """Test partitioning with a non-positive interval."""
    series = make_series([(0, 1)])
    with pytest.raises(ConfigurationError):
        series.windows(0, 0)
    with pytest.raises(ConfigurationError):
        series.windows(-10, 0)


def test_coverage() -> None:
    """Test windows are contiguous and cover every element exactly once."""
    random.seed(42)
    for _ in range(50):
        timestamps = sorted(random.choices(range(10_000), k=random.randint(1, 300)))
        series = make_series((ts, 1.0) for ts in timestamps)
        interval = random.randint(1, 2_000)
        start_ts = random.randint(0, timestamps[0])

        windows = list(series.windows(interval, start_ts))
        assert len(windows) == (timestamps[-1] - start_ts) // interval + 1

        covered: list[int] = []
        for i, window in enumerate(windows):
            elements = series.elements_in(window)
            bucket_start = start_ts + i * interval
            assert all(
                bucket_start <= e.timestamp < bucket_start + interval for e in elements
            )
            if isinstance(window, RangeWindow):
                covered.extend(range(window.start, window.end + 1))
        assert covered == list(range(len(series)))


def test_set_end_ts(ten_minutes: RawSeries) -> None:
    """Test cutting the partition short."""
    windows = ten_minutes.windows(60_000, 0)
    windows.set_end_ts(120_000)
    assert windows.num_windows == 3
    assert list(windows.timestamps()) == [0, 60_000, 120_000]
    assert len(list(windows)) == 3

    windows = ten_minutes.windows(60_000, 0)
    windows.set_end_ts(1_000_000)
    assert windows.num_windows == 10

    windows = ten_minutes.windows(60_000, 60_000)
    with pytest.raises(ConfigurationError):
        windows.set_end_ts(59_999)


def test_stale_iterator() -> None:
    """Test iterating after the series was appended to."""
    series = make_series([(0, 1), (10, 2), (20, 3)])
    windows = series.windows(10, 0)
    next(windows)
    series.push(30, 4)
    with pytest.raises(StaleWindowError):
        next(windows)


def test_samples_and_aggregate() -> None:
    """Test the derived iterators over the windows."""
    series = make_series([(0, 1), (2, 3), (11, 5), (30, 7)])

    assert [
        [e.timestamp for e in elements] for elements in series.windows(10, 0).samples()
    ] == [[0, 2], [11], [], [30]]

    assert list(series.windows(10, 0).aggregate(Aggregation.SUM)) == [
        Point(4),
        Point(5),
        Point(0),
        Point(7),
    ]
    assert list(series.windows(10, 0).aggregate(Aggregation.MAX)) == [
        Point(3),
        Point(5),
        Err(),
        Point(7),
    ]


def test_length_hint(ten_minutes: RawSeries) -> None:
    """Test the iterator reports the number of buckets left."""
    windows = ten_minutes.windows(60_000, 0)
    assert windows.__length_hint__() == 10
    next(windows)
    next(windows)
    assert windows.__length_hint__() == 8
