# License: MIT
# Copyright © 2024 Frequenz Energy-as-a-Service GmbH

"""Setup for all the tests."""
from collections.abc import Iterator

import pytest
import time_machine


@pytest.fixture
def fake_time() -> Iterator[time_machine.Coordinates]:
    """Replace real time with a time machine that doesn't automatically tick."""
    with time_machine.travel(0, tick=False) as traveller:
        yield traveller
