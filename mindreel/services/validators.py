"""
Input Validators

Centralized validation for entries, settings and summaries.
Validation functions return a ValidationResult; stores call
raise_if_invalid() before touching the database so rejected input is never
persisted.
"""

from typing import Any, List

from mindreel.errors import ValidationError

MAX_SHORTCUT_LENGTH = 100


class ValidationResult:
    """Container for validation errors."""
    def __init__(self):
        self.errors: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self):
        """Raise ValidationError if there are blocking errors."""
        if self.errors:
            raise ValidationError("; ".join(self.errors))


def _is_empty(value: Any) -> bool:
    """Check if value is None or empty string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def validate_entry_content(content: Any) -> ValidationResult:
    result = ValidationResult()
    if content is not None and not isinstance(content, str):
        result.add_error("Entry content must be text")
    elif _is_empty(content):
        result.add_error("Entry content cannot be empty")
    return result


def validate_popup_interval(minutes: Any) -> ValidationResult:
    result = ValidationResult()
    # bool is an int subclass; True is not a valid interval
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        result.add_error("Popup interval must be a whole number of minutes")
    elif minutes < 0:
        result.add_error("Popup interval cannot be negative")
    return result


def validate_global_shortcut(shortcut: Any) -> ValidationResult:
    """None disables the shortcut; otherwise it must be a non-empty accelerator."""
    result = ValidationResult()
    if shortcut is None:
        return result
    if not isinstance(shortcut, str) or _is_empty(shortcut):
        result.add_error("Global shortcut must be a key combination or null")
    elif len(shortcut) > MAX_SHORTCUT_LENGTH:
        result.add_error(f"Global shortcut cannot exceed {MAX_SHORTCUT_LENGTH} characters")
    return result


def validate_summary_content(content: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(content, str) or _is_empty(content):
        result.add_error("Summary content cannot be empty")
    return result
