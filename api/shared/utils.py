"""Common utility functions."""
from typing import Optional
from uuid import UUID


def normalize_uuid(uuid_string: str) -> Optional[str]:
    """Canonical lower-case hyphenated form, or ``None`` if not a UUID."""
    try:
        return str(UUID(uuid_string))
    except (TypeError, ValueError, AttributeError):
        return None
