"""
Identifier parsing - rejects malformed ids before any storage round-trip
"""
import uuid
from typing import Any, Iterable, List

from quizhub.exceptions import InvalidIdFormatError


def parse_id(value: Any, label: str = "id") -> uuid.UUID:
    """
    Parse an opaque entity id into a UUID

    Accepts UUID instances and canonical / hex UUID strings.

    Raises:
        InvalidIdFormatError: value is not a well formed id
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        raise InvalidIdFormatError(f"Invalid {label} format.")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise InvalidIdFormatError(f"Invalid {label} format.") from None


def parse_ids(values: Iterable[Any], label: str = "id") -> List[uuid.UUID]:
    return [parse_id(value, label) for value in values]
