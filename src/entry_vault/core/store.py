# entry_vault/core/store.py
import copy
import time
import logging
import threading
from typing import Callable, List, Optional, Tuple
from entry_vault.config import DEFAULT_IDLE_TIMEOUT, MAX_IDLE_TIMEOUT
from entry_vault.core.entry import DynamicField, Entry, EntryView, ListItem
from entry_vault.core.errors import ImmutableFieldError
from entry_vault.core.history import Version, VersionedValue, timestamp_now
from entry_vault.core.selector import FieldKind, FieldSelector

# Timestamp of the sample entry shipped with a fresh store
SAMPLE_TIMESTAMP = 1702851212


class EntryStore:
    """In-memory store of entries whose credential fields keep their full history.

    One instance lives for the whole application and is handed to every
    collaborator. Each public method runs under the store lock, so a call is
    a single indivisible step over the whole store.
    Reads take the same exclusive lock as writes rather than a shared one,
    so concurrent readers wait for each other too.
    """

    def __init__(self, idle_timeout: int = DEFAULT_IDLE_TIMEOUT, clock: Callable[[], float] = time.time):
        self._entries: List[Entry] = []
        self._idle_timeout = self._check_timeout(idle_timeout)
        self._clock = clock
        self._lock = threading.RLock()

    @classmethod
    def with_defaults(cls, idle_timeout: int = DEFAULT_IDLE_TIMEOUT, clock: Callable[[], float] = time.time) -> 'EntryStore':
        """Create a store holding the sample "Bank" entry."""
        store = cls(idle_timeout=idle_timeout, clock=clock)
        store._entries.append(Entry(
            id=1,
            title="Bank",
            url="https://bankofaustralia.com.au",
            username=VersionedValue.seeded(SAMPLE_TIMESTAMP, "Dom"),
            password=VersionedValue.seeded(SAMPLE_TIMESTAMP, "totally_secure_password!1"),
            fields=[DynamicField(0, "Notes", VersionedValue.seeded(SAMPLE_TIMESTAMP, "These are my bank deets"))],
        ))
        return store

    # Settings

    @staticmethod
    def _check_timeout(seconds: int) -> int:
        if not isinstance(seconds, int) or isinstance(seconds, bool):
            raise ValueError(f"Idle timeout must be an integer, got {seconds!r}.")
        if not 1 <= seconds <= MAX_IDLE_TIMEOUT:
            raise ValueError(f"Idle timeout must be between 1 and {MAX_IDLE_TIMEOUT} seconds.")
        return seconds

    @property
    def idle_timeout(self) -> int:
        with self._lock:
            return self._idle_timeout

    def set_idle_timeout(self, seconds: int) -> None:
        checked = self._check_timeout(seconds)
        with self._lock:
            self._idle_timeout = checked
        logging.info(f"Idle timeout set to {checked} seconds")

    # Internal lookups, callers hold the lock

    def _find(self, entry_id: int) -> Optional[Entry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def _entry_or_placeholder(self, entry_id: int) -> Entry:
        entry = self._find(entry_id)
        return entry if entry is not None else Entry.not_found(entry_id)

    @staticmethod
    def _history_of(entry: Entry, selector: FieldSelector) -> Optional[VersionedValue]:
        """The versioned value behind a selector, or None for unversioned fields."""
        if selector.kind is FieldKind.USERNAME:
            return entry.username
        if selector.kind is FieldKind.PASSWORD:
            return entry.password
        if selector.kind is FieldKind.DYNAMIC:
            dyn_field = entry.find_field(selector.field_id)
            if dyn_field is None:
                dyn_field = DynamicField.placeholder(selector.field_id)
            return dyn_field.history
        return None

    @staticmethod
    def _scalar_of(entry: Entry, selector: FieldSelector) -> str:
        if selector.kind is FieldKind.ID:
            return str(entry.id)
        if selector.kind is FieldKind.TITLE:
            return entry.title
        return entry.url

    # Read operations

    def list_entries(self) -> List[ListItem]:
        """Sidebar rows, newest entry first."""
        with self._lock:
            rows = [ListItem(entry.id, entry.title, idx) for idx, entry in enumerate(self._entries)]
        rows.reverse()
        return rows

    def lookup(self, entry_id: int) -> Entry:
        """A copy of the entry, or a placeholder titled "Not found" for unknown ids."""
        with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                logging.debug(f"Entry {entry_id} not found, returning placeholder")
                return Entry.not_found(entry_id)
            return copy.deepcopy(entry)

    def get_by_id(self, entry_id: int) -> EntryView:
        with self._lock:
            entry = self._entry_or_placeholder(entry_id)
            return EntryView(id=entry_id, title=entry.title, url=entry.url)

    def field_name(self, entry_id: int, selector: FieldSelector) -> str:
        if not selector.is_dynamic:
            return selector.display_name
        with self._lock:
            dyn_field = self._entry_or_placeholder(entry_id).find_field(selector.field_id)
            return dyn_field.name if dyn_field is not None else ""

    def dynamic_fields(self, entry_id: int) -> List[FieldSelector]:
        with self._lock:
            entry = self._entry_or_placeholder(entry_id)
            return [FieldSelector.dynamic(f.field_id) for f in entry.fields]

    def current(self, entry_id: int, selector: FieldSelector) -> str:
        """Latest value of a field. Raises EmptyHistoryError on an empty history."""
        with self._lock:
            entry = self._entry_or_placeholder(entry_id)
            history = self._history_of(entry, selector)
            if history is None:
                return self._scalar_of(entry, selector)
            return history.current()

    def version(self, entry_id: int, selector: FieldSelector, n: int) -> str:
        """Value n versions back (n=0 is current). Raises HistoryIndexError past the end.

        Unversioned fields ignore n and return their only value.
        """
        with self._lock:
            entry = self._entry_or_placeholder(entry_id)
            history = self._history_of(entry, selector)
            if history is None:
                return self._scalar_of(entry, selector)
            return history.version(n)

    def history(self, entry_id: int, selector: FieldSelector) -> Optional[List[Version]]:
        """Every (timestamp, value) pair newest first, or None for unversioned fields."""
        with self._lock:
            history = self._history_of(self._entry_or_placeholder(entry_id), selector)
            return history.newest_first() if history is not None else None

    def history_dates(self, entry_id: int, selector: FieldSelector) -> List[Tuple[int, int]]:
        """(position, timestamp) pairs oldest first; [(0, 0)] for unversioned fields."""
        with self._lock:
            history = self._history_of(self._entry_or_placeholder(entry_id), selector)
            return history.dates() if history is not None else [(0, 0)]

    # Write operations

    def add(self, title: str) -> int:
        """Create a new entry and return its id."""
        with self._lock:
            new_id = max((entry.id for entry in self._entries), default=0) + 1
            self._entries.append(Entry.create(new_id, title, timestamp_now(self._clock)))
        logging.info(f"Added entry {new_id}")
        return new_id

    def edit_field(self, entry_id: int, selector: FieldSelector, new_value: str) -> bool:
        """Apply one edit to one field.

        Title and Url are overwritten, versioned fields gain a new version.
        Returns False, leaving the store untouched, when the entry or the
        dynamic field does not exist. Editing the id raises ImmutableFieldError.
        """
        if selector.kind is FieldKind.ID:
            raise ImmutableFieldError("Can't change the ID of an entry")
        if not isinstance(new_value, str):
            raise TypeError(f"Field values must be strings, got {type(new_value).__name__}.")
        with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                logging.warning(f"Ignoring edit of {selector} on missing entry {entry_id}")
                return False
            if selector.kind is FieldKind.TITLE:
                entry.title = new_value
            elif selector.kind is FieldKind.URL:
                entry.url = new_value
            else:
                if selector.is_dynamic and entry.find_field(selector.field_id) is None:
                    logging.warning(f"Ignoring edit of missing field {selector} on entry {entry_id}")
                    return False
                self._history_of(entry, selector).append(timestamp_now(self._clock), new_value)
        logging.debug(f"Edited {selector} of entry {entry_id} ({len(new_value)} chars)")
        return True

    def add_field(self, entry_id: int, name: str) -> Optional[FieldSelector]:
        """Add an empty dynamic field; None when the entry doesn't exist."""
        with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                logging.warning(f"Ignoring new field {name!r} on missing entry {entry_id}")
                return None
            field_id = entry.next_field_id()
            entry.fields.append(DynamicField(field_id, name, VersionedValue.seeded(timestamp_now(self._clock))))
        logging.info(f"Added field {field_id} to entry {entry_id}")
        return FieldSelector.dynamic(field_id)

    def rename_field(self, entry_id: int, selector: FieldSelector, name: str) -> bool:
        if not selector.is_dynamic:
            raise ImmutableFieldError(f"{selector} is a fixed field and can't be renamed")
        with self._lock:
            entry = self._find(entry_id)
            dyn_field = entry.find_field(selector.field_id) if entry is not None else None
            if dyn_field is None:
                logging.warning(f"Ignoring rename of missing field {selector} on entry {entry_id}")
                return False
            dyn_field.name = name
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
