"""Identifier generation for menu entities."""

import re
import uuid

_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


def new_id() -> str:
    """Generate a fresh version-4 identifier for a category or item.

    Returns:
        str: Identifier in canonical xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx layout
    """
    return str(uuid.uuid4())


def is_valid_id(value: object) -> bool:
    """Check that a value has the canonical version-4 identifier layout."""
    return isinstance(value, str) and _ID_PATTERN.match(value) is not None
