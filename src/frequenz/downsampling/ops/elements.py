# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Aggregation operators over timestamped samples.

These reduce the elements of one bucket of a raw series. They have the same
semantics as their counterparts in
[`samples`][frequenz.downsampling.ops.samples]; the timestamps only define
which bucket an element belongs to.
"""

import functools
from collections.abc import Sequence

from .._sample import Element, Sample
from . import samples
from ._types import ElementOp, SampleOp


def _lift(op: SampleOp) -> ElementOp:
    """Turn a sample operator into an element operator."""

    @functools.wraps(op)
    def lifted(elements: Sequence[Element]) -> Sample:
        return op([element.sample for element in elements])

    lifted.__module__ = __name__
    return lifted


maximum = _lift(samples.maximum)
minimum = _lift(samples.minimum)
total = _lift(samples.total)
mean = _lift(samples.mean)
oldest = _lift(samples.oldest)
youngest = _lift(samples.youngest)
delta = _lift(samples.delta)
