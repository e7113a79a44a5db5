# entry_vault/core/selector.py
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional


class FieldKind(Enum):
    ID = "Id"
    TITLE = "Title"
    URL = "Url"
    USERNAME = "Username"
    PASSWORD = "Password"
    DYNAMIC = "Fields"


@dataclass(frozen=True)
class FieldSelector:
    """Addresses one field of an entry: a fixed field, or a dynamic field by id."""
    kind: FieldKind
    field_id: Optional[int] = None

    ID: ClassVar['FieldSelector']
    TITLE: ClassVar['FieldSelector']
    URL: ClassVar['FieldSelector']
    USERNAME: ClassVar['FieldSelector']
    PASSWORD: ClassVar['FieldSelector']

    def __post_init__(self):
        if self.kind is FieldKind.DYNAMIC:
            if not isinstance(self.field_id, int) or isinstance(self.field_id, bool):
                raise TypeError("Dynamic field selectors need an integer field id.")
        elif self.field_id is not None:
            raise TypeError(f"{self.kind.value} selector does not take a field id.")

    @classmethod
    def dynamic(cls, field_id: int) -> 'FieldSelector':
        return cls(FieldKind.DYNAMIC, field_id)

    @property
    def is_dynamic(self) -> bool:
        return self.kind is FieldKind.DYNAMIC

    @property
    def is_versioned(self) -> bool:
        return self.kind in (FieldKind.USERNAME, FieldKind.PASSWORD, FieldKind.DYNAMIC)

    @property
    def display_name(self) -> str:
        if self.is_dynamic:
            return f"{self.kind.value}-{self.field_id}"
        return self.kind.value

    def __str__(self) -> str:
        return self.display_name


FieldSelector.ID = FieldSelector(FieldKind.ID)
FieldSelector.TITLE = FieldSelector(FieldKind.TITLE)
FieldSelector.URL = FieldSelector(FieldKind.URL)
FieldSelector.USERNAME = FieldSelector(FieldKind.USERNAME)
FieldSelector.PASSWORD = FieldSelector(FieldKind.PASSWORD)
