"""Time sources for expiry checks, in whole unix seconds."""

import time


class SystemClock:
    """Wall clock."""

    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """A clock that only moves when told to. Used for boundary tests."""

    def __init__(self, timestamp: int):
        self._timestamp = int(timestamp)

    def now(self) -> int:
        return self._timestamp

    def advance(self, seconds: int) -> None:
        self._timestamp += int(seconds)
