# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Signatures of the aggregation operators."""

from collections.abc import Callable, Sequence
from typing import TypeAlias

from .._sample import Element, Sample

SampleOp: TypeAlias = Callable[[Sequence[Sample]], Sample]
"""Reduce a sequence of samples to a single sample."""

ElementOp: TypeAlias = Callable[[Sequence[Element]], Sample]
"""Reduce a sequence of timestamped samples to a single sample."""
