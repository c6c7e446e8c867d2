import pytest

from helpers import FakeClock, make_monitor


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def monitor_out(clock):
    return make_monitor(clock)
