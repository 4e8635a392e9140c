"""
Error types raised by the MindReel core.

Every failure that changes a data outcome is raised as one of these so the
presentation layer can react to it. Hotkey registration failures are the
exception: they are reported through the scheduler's error channel and never
abort the caller.
"""


class MindReelError(Exception):
    """Base class for all core errors."""


class ValidationError(MindReelError, ValueError):
    """Bad input (empty content, negative interval). Nothing was persisted."""


class NotFoundError(MindReelError, LookupError):
    """An operation referenced a record that does not exist."""

    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class StorageError(MindReelError):
    """The embedded store is unavailable or an I/O operation failed."""


class MigrationError(StorageError):
    """Schema migration failed; the store must not be opened for use."""


class RegistrationError(MindReelError):
    """A global hotkey could not be bound. Non-fatal."""

    def __init__(self, accelerator: str, reason: str):
        self.accelerator = accelerator
        self.reason = reason
        super().__init__(f"Could not register shortcut '{accelerator}': {reason}")
