# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Registry of the aggregation operators, selectable by name."""

from __future__ import annotations

import enum
from collections.abc import Sequence

from .._exceptions import ConfigurationError
from .._sample import Element, Sample
from . import elements, samples
from ._types import ElementOp, SampleOp


class Aggregation(enum.StrEnum):
    """The closed set of aggregation operators.

    Members can be called directly on the elements of a bucket:

    ```python
    Aggregation.from_name("max")(elements)
    ```
    """

    MAX = "max"
    """The largest value."""

    MIN = "min"
    """The smallest value."""

    SUM = "sum"
    """The sum of all values."""

    MEAN = "mean"
    """The arithmetic mean of all values."""

    OLDEST = "oldest"
    """The first sample in the bucket."""

    YOUNGEST = "youngest"
    """The last sample in the bucket."""

    DELTA = "delta"
    """The counter increase between a pair of samples."""

    @classmethod
    def from_name(cls, name: str) -> Aggregation:
        """Look up an aggregation by name.

        Args:
            name: The name of the aggregation, case insensitive.

        Returns:
            The aggregation with the given name.

        Raises:
            ConfigurationError: If there is no aggregation with that name.
        """
        try:
            return cls(name.strip().lower())
        except ValueError as err:
            raise ConfigurationError(
                f"Unknown aggregation {name!r}, expected one of: "
                f"{', '.join(member.value for member in cls)}"
            ) from err

    @property
    def on_samples(self) -> SampleOp:
        """Return the operator reducing plain samples."""
        return _SAMPLE_OPS[self]

    @property
    def on_elements(self) -> ElementOp:
        """Return the operator reducing timestamped samples."""
        return _ELEMENT_OPS[self]

    def __call__(self, values: Sequence[Element]) -> Sample:
        """Reduce the elements of a bucket.

        Args:
            values: The elements to reduce.

        Returns:
            The aggregated sample.
        """
        return self.on_elements(values)


_SAMPLE_OPS: dict[Aggregation, SampleOp] = {
    Aggregation.MAX: samples.maximum,
    Aggregation.MIN: samples.minimum,
    Aggregation.SUM: samples.total,
    Aggregation.MEAN: samples.mean,
    Aggregation.OLDEST: samples.oldest,
    Aggregation.YOUNGEST: samples.youngest,
    Aggregation.DELTA: samples.delta,
}

_ELEMENT_OPS: dict[Aggregation, ElementOp] = {
    Aggregation.MAX: elements.maximum,
    Aggregation.MIN: elements.minimum,
    Aggregation.SUM: elements.total,
    Aggregation.MEAN: elements.mean,
    Aggregation.OLDEST: elements.oldest,
    Aggregation.YOUNGEST: elements.youngest,
    Aggregation.DELTA: elements.delta,
}
