"""
Field-level validation for scraped records.
"""

import re
from typing import Any, Dict, Iterable, Optional

PHONE_PATTERN = re.compile(r'^\d{2,3}-\d{3,4}-\d{4}$')

# Listings print "-" (or nothing) when a store has no phone on record
UNKNOWN_PHONE_VALUES = ('', '-')


def is_valid_phone(value: Optional[str]) -> bool:
    """
    Check a phone number against the DD(D)-DDD(D)-DDDD pattern.

    Args:
        value: Phone string as scraped

    Returns:
        True for a well-formed number or for the "unknown" placeholders
    """
    if value is None:
        return True
    value = str(value).strip()
    if value in UNKNOWN_PHONE_VALUES:
        return True
    return bool(PHONE_PATTERN.match(value))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class RecordValidator:
    """Rejects records with blank required fields or malformed phones."""

    def __init__(self, required: Iterable[str] = (), phones: Iterable[str] = ()):
        self.required = tuple(required)
        self.phones = tuple(phones)

    def validate(self, record: Dict[str, Any]) -> Optional[str]:
        """
        Validate a single record.

        Returns:
            Rejection reason, or None if the record is valid
        """
        for name in self.required:
            if is_blank(record.get(name)):
                return f"missing required field '{name}'"

        for name in self.phones:
            value = record.get(name)
            if not is_valid_phone(value):
                return f"invalid phone number in '{name}': {value!r}"

        return None

    def __call__(self, record: Dict[str, Any]) -> bool:
        return self.validate(record) is None
