# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Tests for the downsampling configuration."""

import pathlib
from datetime import datetime, timedelta, timezone

import pytest

from frequenz.downsampling import (
    UNIX_EPOCH,
    ConfigurationError,
    DownsamplingConfig,
    TierConfig,
    load_config,
)
from frequenz.downsampling.ops import Aggregation

BASE_CONFIG = """
[downsampling]
align_to = 2024-01-01T00:00:00Z

[[downsampling.tiers]]
name = "1m"
interval = "1m"
op = "max"

[[downsampling.tiers]]
name = "5m"
interval = "5m"
op = "max"
source = "1m"
"""

OVERRIDE_CONFIG = """
[downsampling]
align_to = 2024-06-01T00:00:00Z

[other]
ignored = true
"""


@pytest.fixture
def config_file(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a test config file."""
    file_path = tmp_path / "downsampling.toml"
    file_path.write_text(BASE_CONFIG)
    return file_path


def test_tier_defaults() -> None:
    """Test the default values of a tier."""
    tier = TierConfig("1m", 60_000)
    assert tier.op is Aggregation.MEAN
    assert tier.source == "raw"


def test_tier_coercion() -> None:
    """Test tiers accept durations and aggregation names."""
    tier = TierConfig("5m", "5m", "SUM")  # type: ignore[arg-type]
    assert tier.interval == 300_000
    assert tier.op is Aggregation.SUM

    tier = TierConfig("1h", timedelta(hours=1))  # type: ignore[arg-type]
    assert tier.interval == 3_600_000


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "", "interval": 1000},
        {"name": "raw", "interval": 1000},
        {"name": "x", "interval": 0},
        {"name": "x", "interval": -5},
        {"name": "x", "interval": 1000, "op": "median"},
    ],
)
def test_tier_invalid(kwargs: dict[str, object]) -> None:
    """Test invalid tiers."""
    with pytest.raises(ConfigurationError):
        TierConfig(**kwargs)  # type: ignore[arg-type]


def test_config_chain() -> None:
    """Test a valid chain of tiers."""
    config = DownsamplingConfig(
        [  # type: ignore[arg-type]
            TierConfig("1m", 60_000),
            TierConfig("5m", 300_000, source="1m"),
            TierConfig("1h", 3_600_000, source="5m"),
        ]
    )
    assert isinstance(config.tiers, tuple)
    assert config.tier("5m").source == "1m"
    assert config.align_to == UNIX_EPOCH
    with pytest.raises(KeyError):
        config.tier("1d")


def test_config_naive_align_to() -> None:
    """Test naive alignment datetimes are taken as UTC."""
    config = DownsamplingConfig(align_to=datetime(2024, 1, 1))
    assert config.align_to == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "tiers, match",
    [
        ([TierConfig("1m", 60_000), TierConfig("1m", 120_000)], "Duplicated"),
        ([TierConfig("5m", 300_000, source="1m")], "unknown source"),
        (
            [TierConfig("5m", 300_000, source="1m"), TierConfig("1m", 60_000)],
            "unknown source",
        ),
        (
            [TierConfig("1m", 60_000), TierConfig("90s", 90_000, source="1m")],
            "not a multiple",
        ),
    ],
)
def test_config_invalid_chain(tiers: list[TierConfig], match: str) -> None:
    """Test invalid chains of tiers."""
    with pytest.raises(ConfigurationError, match=match):
        DownsamplingConfig(tuple(tiers))


def test_from_mapping() -> None:
    """Test validating plain data."""
    config = DownsamplingConfig.from_mapping(
        {
            "tiers": [
                {"name": "1m", "interval": "1m", "op": "max"},
                {"name": "5m", "interval": 300_000, "op": "min", "source": "1m"},
            ],
            "align_to": "2024-01-01T00:00:00Z",
        }
    )
    assert config.tiers == (
        TierConfig("1m", 60_000, Aggregation.MAX),
        TierConfig("5m", 300_000, Aggregation.MIN, "1m"),
    )
    assert config.align_to == datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "data",
    [
        {"tiers": [{"name": "1m"}]},
        {"tiers": [{"name": "1m", "interval": "1 minute"}]},
        {"tiers": [{"name": "1m", "interval": "1m", "op": "median"}]},
        {"tiers": [{"name": "5m", "interval": "5m", "source": "1m"}]},
        {"align_to": "yesterday"},
    ],
)
def test_from_mapping_invalid(data: dict[str, object]) -> None:
    """Test validating invalid plain data."""
    with pytest.raises(ConfigurationError):
        DownsamplingConfig.from_mapping(data)


def test_load_config(config_file: pathlib.Path) -> None:
    """Test reading the configuration from a file."""
    config = load_config(config_file)

    assert [tier.name for tier in config.tiers] == ["1m", "5m"]
    assert config.tier("5m").interval == 300_000
    assert config.tier("5m").op is Aggregation.MAX
    assert config.align_to == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_load_config_override(
    config_file: pathlib.Path, tmp_path: pathlib.Path
) -> None:
    """Test later files override earlier ones, merging tables."""
    override = tmp_path / "override.toml"
    override.write_text(OVERRIDE_CONFIG)

    config = load_config(config_file, override)

    assert config.align_to == datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert len(config.tiers) == 2


def test_load_config_missing_files(
    config_file: pathlib.Path,
    tmp_path: pathlib.Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Test unreadable files are logged and skipped."""
    missing = tmp_path / "missing.toml"

    config = load_config(missing, config_file)
    assert len(config.tiers) == 2
    assert "Can't read config file" in caplog.text

    with pytest.raises(ConfigurationError, match="Can't read any"):
        load_config(missing)
    with pytest.raises(ConfigurationError):
        load_config()


def test_load_config_invalid_toml(tmp_path: pathlib.Path) -> None:
    """Test files with invalid TOML are skipped."""
    broken = tmp_path / "broken.toml"
    broken.write_text("[downsampling\n")
    with pytest.raises(ConfigurationError):
        load_config(broken)


def test_load_config_without_section(tmp_path: pathlib.Path) -> None:
    """Test files without the downsampling section give an empty configuration."""
    other = tmp_path / "other.toml"
    other.write_text(OVERRIDE_CONFIG)
    assert load_config(other, section="nothing") == DownsamplingConfig()
