"""To-do identifier validation."""

from __future__ import annotations

import re

from thaings.errors import InvalidKeyError

KEY_PATTERN = re.compile(r"\A[A-Za-z0-9_-]+\Z")


def validate_key(key: object) -> str:
    """Return ``key`` if it is safe to use as a single path segment.

    Every filesystem path built from a Things ID goes through here first.
    """

    if isinstance(key, str) and KEY_PATTERN.match(key):
        return key
    raise InvalidKeyError(f"Invalid to-do ID: {key!r}")
