# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Aggregation operators over plain samples.

These are used to re-aggregate series that are already aligned, where the
timestamps are implied by the position of each sample.

All operators are total: they never raise and always produce a sample. An
input they can't reduce produces an `Err`. Except for `oldest` and
`youngest`, which pick a sample verbatim, any `Fake` input makes the result
`Fake`.
"""

from collections.abc import Callable, Sequence
from typing import assert_never

from .._sample import Err, Fake, Point, Sample, Zero


def _unpack(sample: Sample) -> tuple[float | None, bool]:
    """Get the arithmetic value of a sample and whether it is tainted.

    Args:
        sample: The sample to unpack.

    Returns:
        The value, or `None` for errors, and whether the sample is `Fake`.
    """
    match sample:
        case Point(value=value):
            return value, False
        case Fake(value=value):
            return value, True
        case Zero():
            return 0.0, False
        case Err():
            return None, False
        case unexpected:
            assert_never(unexpected)


def _make(value: float, tainted: bool) -> Sample:
    return Fake(value) if tainted else Point(value)


def _extremum(
    samples: Sequence[Sample], better: Callable[[float, float], bool]
) -> Sample:
    best: float | None = None
    tainted = False
    for sample in samples:
        value, fake = _unpack(sample)
        tainted = tainted or fake
        if value is None:
            continue
        if best is None or better(value, best):
            best = value
    if best is None:
        return Err()
    return _make(best, tainted)


def maximum(samples: Sequence[Sample]) -> Sample:
    """Return the largest value, skipping errors.

    Args:
        samples: The samples to reduce.

    Returns:
        The largest value, or `Err` if there are no valid samples.
    """
    return _extremum(samples, lambda value, best: value > best)


def minimum(samples: Sequence[Sample]) -> Sample:
    """Return the smallest value, skipping errors.

    Args:
        samples: The samples to reduce.

    Returns:
        The smallest value, or `Err` if there are no valid samples.
    """
    return _extremum(samples, lambda value, best: value < best)


def _accumulate(samples: Sequence[Sample]) -> tuple[float, bool]:
    result = 0.0
    tainted = False
    for sample in samples:
        value, fake = _unpack(sample)
        tainted = tainted or fake
        if value is not None:
            result += value
    return result, tainted


def total(samples: Sequence[Sample]) -> Sample:
    """Return the sum of all values, errors and resets counting as zero.

    Args:
        samples: The samples to reduce.

    Returns:
        The sum, `Point(0.0)` for no samples.
    """
    return _make(*_accumulate(samples))


def mean(samples: Sequence[Sample]) -> Sample:
    """Return the sum of all values divided by the number of samples.

    Errors and resets count as zero, but are part of the sample count.

    Args:
        samples: The samples to reduce.

    Returns:
        The arithmetic mean, or `Err` if there are no samples.
    """
    if not samples:
        return Err()
    result, tainted = _accumulate(samples)
    return _make(result / len(samples), tainted)


def oldest(samples: Sequence[Sample]) -> Sample:
    """Return the first sample verbatim, or `Err` if there are none."""
    return samples[0] if samples else Err()


def youngest(samples: Sequence[Sample]) -> Sample:
    """Return the last sample verbatim, or `Err` if there are none."""
    return samples[-1] if samples else Err()


def delta(samples: Sequence[Sample]) -> Sample:
    """Return the increase between a `(previous, last)` pair of counter samples.

    When the counter decreased it is assumed to have been reset, and the
    increase since the reset is approximated by `last`. This doesn't look
    for `Zero` markers between both samples.

    Args:
        samples: Exactly two samples, the previous and the last one.

    Returns:
        The increase, or `Err` if the input isn't a pair or either sample is
            an error.
    """
    if len(samples) != 2:
        return Err()

    prev, prev_fake = _unpack(samples[0])
    last, last_fake = _unpack(samples[1])
    if prev is None or last is None:
        return Err()

    return _make(last - prev if last > prev else last, prev_fake or last_fake)
