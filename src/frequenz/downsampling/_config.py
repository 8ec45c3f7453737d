# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Configuration of downsampling tiers."""

from __future__ import annotations

import logging
import pathlib
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator, TypeAdapter

from ._base_types import (
    UNIX_EPOCH,
    Interval,
    check_interval,
    format_interval,
    parse_interval,
    to_interval,
)
from ._exceptions import ConfigurationError
from .ops import Aggregation

_logger = logging.getLogger(__name__)

RAW_SOURCE = "raw"
"""The name of the raw data, usable as the source of a tier."""


def _coerce_interval(value: Any) -> Any:
    """Convert durations given as strings or timedeltas to milliseconds."""
    if isinstance(value, timedelta):
        return to_interval(value)
    if isinstance(value, str):
        return parse_interval(value)
    return value


def _coerce_aggregation(value: Any) -> Any:
    """Look up aggregations given by name."""
    if isinstance(value, str):
        return Aggregation.from_name(value)
    return value


@dataclass(frozen=True)
class TierConfig:
    """Configuration of one downsampling tier."""

    name: str
    """The name of the tier, for example `1m`."""

    interval: Annotated[Interval, BeforeValidator(_coerce_interval)]
    """The width of each bucket of the tier, in milliseconds.

    When validating, durations such as `"5m"` and timedeltas are accepted too.
    """

    op: Annotated[Aggregation, BeforeValidator(_coerce_aggregation)] = (
        Aggregation.MEAN
    )
    """The aggregation used to reduce each bucket."""

    source: str = RAW_SOURCE
    """Where the tier takes its data from.

    Either `raw`, to aggregate the raw samples, or the name of a tier defined
    before this one, to re-aggregate that tier.
    """

    def __post_init__(self) -> None:
        """Check that config values are valid.

        Raises:
            ConfigurationError: If any value is out of range.
        """
        if not self.name or self.name == RAW_SOURCE:
            raise ConfigurationError(f"Invalid tier name: {self.name!r}")
        object.__setattr__(self, "interval", _coerce_interval(self.interval))
        object.__setattr__(self, "op", _coerce_aggregation(self.op))
        check_interval(self.interval)


@dataclass(frozen=True)
class DownsamplingConfig:
    """Configuration of all the tiers maintained for a stream."""

    tiers: tuple[TierConfig, ...] = ()
    """The tiers, each one only using `raw` or tiers defined before it."""

    align_to: datetime = UNIX_EPOCH
    """The point in time bucket boundaries are aligned to.

    Naive datetimes are taken as UTC.
    """

    def __post_init__(self) -> None:
        """Check that the tiers form a valid chain.

        Raises:
            ConfigurationError: If a tier name is repeated, a tier uses an
                unknown source, or its interval isn't a multiple of the
                interval of its source.
        """
        object.__setattr__(self, "tiers", tuple(self.tiers))
        if self.align_to.tzinfo is None:
            object.__setattr__(
                self, "align_to", self.align_to.replace(tzinfo=timezone.utc)
            )

        known: dict[str, TierConfig] = {}
        for tier in self.tiers:
            if tier.name in known:
                raise ConfigurationError(f"Duplicated tier name: {tier.name!r}")
            if tier.source != RAW_SOURCE:
                source = known.get(tier.source)
                if source is None:
                    raise ConfigurationError(
                        f"Tier {tier.name!r} uses unknown source {tier.source!r}"
                    )
                if tier.interval % source.interval != 0:
                    raise ConfigurationError(
                        f"Tier {tier.name!r} interval ({format_interval(tier.interval)}) "
                        f"is not a multiple of the interval of {source.name!r} "
                        f"({format_interval(source.interval)})"
                    )
            known[tier.name] = tier

    def tier(self, name: str) -> TierConfig:
        """Get a tier by name.

        Args:
            name: The name of the tier.

        Returns:
            The tier configuration.

        Raises:
            KeyError: If there is no tier with that name.
        """
        for tier in self.tiers:
            if tier.name == name:
                return tier
        raise KeyError(name)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DownsamplingConfig:
        """Validate a configuration given as plain data.

        Example:
            ```python
            DownsamplingConfig.from_mapping(
                {
                    "tiers": [
                        {"name": "1m", "interval": "1m", "op": "max"},
                        {"name": "5m", "interval": "5m", "op": "max", "source": "1m"},
                    ]
                }
            )
            ```

        Args:
            data: The configuration, as read from a TOML table for example.

        Returns:
            The validated configuration.

        Raises:
            ConfigurationError: If the data is not a valid configuration.
        """
        try:
            return _CONFIG_ADAPTER.validate_python(dict(data))
        except ValueError as err:
            raise ConfigurationError(
                f"Invalid downsampling configuration: {err}"
            ) from err


_CONFIG_ADAPTER = TypeAdapter(DownsamplingConfig)


def load_config(
    *paths: pathlib.Path | str, section: str = "downsampling"
) -> DownsamplingConfig:
    """Read the downsampling configuration from TOML files.

    The files are read in order, so the last path overrides the configuration
    set by the previous paths. Tables are merged recursively, but other values
    (like the list of tiers) are replaced by the value in the last path.

    Example:
        ```toml
        [downsampling]
        align_to = 2024-01-01T00:00:00Z

        [[downsampling.tiers]]
        name = "1m"
        interval = "1m"
        op = "max"

        [[downsampling.tiers]]
        name = "1h"
        interval = "1h"
        op = "max"
        source = "1m"
        ```

    Args:
        *paths: The TOML files to read.
        section: The table holding the downsampling configuration.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If none of the files can be read or the
            configuration is invalid.
    """
    error_count = 0
    config: dict[str, Any] = {}

    for path in paths:
        config_path = pathlib.Path(path)
        try:
            with config_path.open("rb") as toml_file:
                config = _recursive_update(config, tomllib.load(toml_file))
        except (OSError, ValueError) as err:
            _logger.error("%s: Can't read config file, err: %s", config_path, err)
            error_count += 1

    if error_count == len(paths):
        raise ConfigurationError("Can't read any of the config files")

    return DownsamplingConfig.from_mapping(config.get(section, {}))


def _recursive_update(
    target: dict[str, Any], overrides: Mapping[str, Any]
) -> dict[str, Any]:
    """Recursively update a dictionary with the values of another one.

    Args:
        target: The original dictionary to be updated.
        overrides: The dictionary with updates.

    Returns:
        The updated dictionary.
    """
    for key, value in overrides.items():
        if (
            key in target
            and isinstance(target[key], MutableMapping)
            and isinstance(value, Mapping)
        ):
            _recursive_update(target[key], value)
        else:
            target[key] = value
    return target
