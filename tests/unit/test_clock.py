"""Test the block clock."""

import pytest

from endorsement_ledger.service.clock import BlockClock, ClockRegressionError


def test_clock():
    clock = BlockClock()
    assert clock.height == 0
    assert clock.advance() == 1
    assert clock.advance(143) == 144
    assert clock.set(144) == 144
    assert clock.set(200) == 200


def test_clock_is_monotonic():
    clock = BlockClock(10)
    with pytest.raises(ClockRegressionError):
        clock.set(9)
    with pytest.raises(ClockRegressionError):
        clock.advance(-1)
    with pytest.raises(ClockRegressionError):
        BlockClock(-1)
    assert clock.height == 10
