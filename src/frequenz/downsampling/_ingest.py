# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Feed a stream from a channel of readings."""

import logging
from dataclasses import dataclass

from frequenz.channels import Receiver

from ._base_types import Reading, to_timestamp
from ._exceptions import OutOfOrderSampleError
from ._sample import Err, Point
from ._stream import Stream

_logger = logging.getLogger(__name__)


@dataclass
class IngestStats:
    """Counters of what happened to the readings received by `ingest()`."""

    accepted: int = 0
    """Readings stored in the stream, including the invalid ones."""

    invalid: int = 0
    """Readings without a value (or a NaN value), stored as `Err`."""

    dropped: int = 0
    """Readings discarded because they were older than the newest stored one."""


async def ingest(receiver: Receiver[Reading], stream: Stream) -> IngestStats:
    """Push every reading received into the latest raw buffer of a stream.

    Runs until the receiver is closed. Readings older than the newest sample
    in the buffer are logged and dropped, so a misbehaving source can't stop
    the ingestion.

    Args:
        receiver: The readings to store.
        stream: The stream to store them in.

    Returns:
        The counters for all received readings.
    """
    stats = IngestStats()
    async for reading in receiver:
        value = reading.base_value()
        sample = Err() if value is None else Point(value)
        try:
            stream.push_raw_sample(to_timestamp(reading.timestamp), sample)
        except OutOfOrderSampleError as err:
            _logger.warning("Dropping out of order reading %s: %s", reading, err)
            stats.dropped += 1
            continue
        stats.accepted += 1
        if value is None:
            stats.invalid += 1
    _logger.debug("Receiver closed, ingestion finished: %s", stats)
    return stats
