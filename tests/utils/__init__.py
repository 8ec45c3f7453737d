# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Utilities for testing purposes."""

from ._series import make_aligned, make_series, points

__all__ = [
    "make_aligned",
    "make_series",
    "points",
]
