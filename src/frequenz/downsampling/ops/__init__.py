# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Aggregation operators.

An aggregation operator reduces the contents of one bucket to a single
[`Sample`][frequenz.downsampling.Sample]. There are two families with the same
semantics:

* [`elements`][frequenz.downsampling.ops.elements] operators reduce the
  timestamped elements of a raw series bucket.
* [`samples`][frequenz.downsampling.ops.samples] operators reduce plain
  samples, for re-aggregating series that are already aligned.

Operators are selected by name through
[`Aggregation`][frequenz.downsampling.ops.Aggregation].
"""

from . import elements, samples
from ._registry import Aggregation
from ._types import ElementOp, SampleOp

__all__ = [
    "Aggregation",
    "ElementOp",
    "SampleOp",
    "elements",
    "samples",
]
