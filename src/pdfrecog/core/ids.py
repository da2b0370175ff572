from __future__ import annotations

import secrets
import uuid

# No 0, 1 or O.
_KEY_ALPHABET = "23456789ABCDEFGHIJKLMNPQRSTUVWXYZ"
ITEM_KEY_LENGTH = 8


def new_uuid() -> str:
    """Generate a new UUID4 as a string."""
    return str(uuid.uuid4())


def new_item_key() -> str:
    """Generate a short, human-friendly key for items and collections."""
    return "".join(secrets.choice(_KEY_ALPHABET) for _ in range(ITEM_KEY_LENGTH))
