# entry_vault/core/history.py
import time
import logging
from typing import Callable, Iterator, List, Optional, Tuple
from entry_vault.core.errors import EmptyHistoryError, HistoryIndexError

Version = Tuple[int, str]


def timestamp_now(clock: Callable[[], float] = time.time) -> int:
    """Whole seconds since the epoch, or 0 when the clock can't tell."""
    try:
        seconds = int(clock())
    except (OSError, OverflowError, ValueError) as e:
        logging.warning(f"Clock failure, using epoch 0: {e}")
        return 0
    return seconds if seconds > 0 else 0


class VersionedValue:
    """Append-only list of (timestamp, value) pairs, oldest first."""

    def __init__(self, versions: Optional[List[Version]] = None):
        self._versions: List[Version] = [(int(ts), value) for ts, value in (versions or [])]

    @classmethod
    def seeded(cls, timestamp: int, value: str = "") -> 'VersionedValue':
        return cls([(timestamp, value)])

    def append(self, timestamp: int, value: str) -> None:
        self._versions.append((timestamp, value))

    def current(self) -> str:
        if not self._versions:
            raise EmptyHistoryError("Versioned field has no current value.")
        return self._versions[-1][1]

    def newest_first(self) -> List[Version]:
        return list(reversed(self._versions))

    def version(self, n: int) -> str:
        """Value n steps back from the newest one (n=0 is the current value)."""
        if n < 0 or n >= len(self._versions):
            raise HistoryIndexError(n, len(self._versions))
        return self._versions[-1 - n][1]

    def dates(self) -> List[Tuple[int, int]]:
        """(position, timestamp) for every version, oldest first."""
        return [(idx, ts) for idx, (ts, _) in enumerate(self._versions)]

    def __len__(self) -> int:
        return len(self._versions)

    def __iter__(self) -> Iterator[Version]:
        return iter(list(self._versions))

    def __eq__(self, other) -> bool:
        if not isinstance(other, VersionedValue):
            return NotImplemented
        return self._versions == other._versions

    def __repr__(self) -> str:
        return f"VersionedValue({len(self._versions)} versions)"
