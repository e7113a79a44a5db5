# entry_vault/core/entry.py
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional
from entry_vault.config import DEFAULT_FIELD_NAME, NOT_FOUND_TITLE
from entry_vault.core.history import VersionedValue


@dataclass
class DynamicField:
    """A user-named versioned field. field_id never changes once assigned."""
    field_id: int
    name: str
    history: VersionedValue

    @classmethod
    def placeholder(cls, field_id: int) -> 'DynamicField':
        return cls(field_id=field_id, name="", history=VersionedValue.seeded(0))


@dataclass
class Entry:
    """One credential record."""
    id: int
    title: str
    url: str
    username: VersionedValue
    password: VersionedValue
    fields: List[DynamicField] = field(default_factory=list)

    @classmethod
    def create(cls, entry_id: int, title: str, timestamp: int) -> 'Entry':
        """Create a new entry with empty credentials and an empty note."""
        return cls(
            id=entry_id,
            title=title,
            url="",
            username=VersionedValue.seeded(timestamp),
            password=VersionedValue.seeded(timestamp),
            fields=[DynamicField(0, DEFAULT_FIELD_NAME, VersionedValue.seeded(0))],
        )

    @classmethod
    def not_found(cls, entry_id: int) -> 'Entry':
        return cls(
            id=entry_id,
            title=NOT_FOUND_TITLE,
            url="",
            username=VersionedValue.seeded(0),
            password=VersionedValue.seeded(0),
            fields=[DynamicField.placeholder(0)],
        )

    def find_field(self, field_id: int) -> Optional[DynamicField]:
        for dyn_field in self.fields:
            if dyn_field.field_id == field_id:
                return dyn_field
        return None

    def next_field_id(self) -> int:
        return max((f.field_id for f in self.fields), default=-1) + 1


@dataclass(frozen=True)
class EntryView:
    """The non-secret part of an entry."""
    id: int
    title: str
    url: str


class ListItem(NamedTuple):
    """One sidebar row; display_index is the entry's position in creation order."""
    id: int
    title: str
    display_index: int
