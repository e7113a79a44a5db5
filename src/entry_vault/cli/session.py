import time
from typing import Callable, Optional


class Session:
    """Tracks activity and hides secrets once the store's idle timeout passes."""

    def __init__(self, timeout_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self.last_activity: Optional[float] = None
        self.is_unlocked = False

    def unlock(self):
        self.last_activity = self._clock()
        self.is_unlocked = True

    def lock(self):
        self.last_activity = None
        self.is_unlocked = False

    def is_valid(self) -> bool:
        if not self.is_unlocked or self.last_activity is None:
            return False
        return (self._clock() - self.last_activity) < self.timeout_seconds

    def refresh(self):
        if self.is_valid():
            self.last_activity = self._clock()
        else:
            self.lock()
