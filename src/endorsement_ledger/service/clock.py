"""Logical block clock."""

import logging
import threading


LOGGER = logging.getLogger(__name__)


class ClockRegressionError(Exception):
    """Raised when the clock is asked to move backwards."""


class BlockClock:
    """Monotonic block height supplied to ledger operations."""

    def __init__(self, height: int = 0):
        """Initialize the clock."""
        if height < 0:
            raise ClockRegressionError("Block height cannot be negative")
        self._height = height
        self._lock = threading.Lock()

    @property
    def height(self) -> int:
        """Current block height."""
        with self._lock:
            return self._height

    def advance(self, blocks: int = 1) -> int:
        """Move the clock forward and return the new height."""
        if blocks < 0:
            raise ClockRegressionError(f"Cannot advance by {blocks} blocks")
        with self._lock:
            self._height += blocks
            LOGGER.debug("Block height now %d", self._height)
            return self._height

    def set(self, height: int) -> int:
        """Jump to a height at or above the current one."""
        with self._lock:
            if height < self._height:
                raise ClockRegressionError(
                    f"Block height {height} is behind current height {self._height}"
                )
            self._height = height
            LOGGER.debug("Block height now %d", self._height)
            return self._height
