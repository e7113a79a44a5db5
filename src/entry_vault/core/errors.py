# entry_vault/core/errors.py


class VaultError(Exception):
    """Base class for entry store errors."""


class ImmutableFieldError(VaultError, ValueError):
    """Raised when an edit targets a field that can never change (the entry id)."""


class EmptyHistoryError(VaultError, RuntimeError):
    """Raised when a versioned field has no versions at all.

    Every entry is created with at least one version per versioned field, so
    this always points at a programming error rather than bad input.
    """


class HistoryIndexError(VaultError, IndexError):
    """Raised when a requested version lies beyond the field's history."""

    def __init__(self, n: int, length: int):
        super().__init__(f"Version {n} requested but the field only has {length} version(s).")
        self.n = n
        self.length = length
