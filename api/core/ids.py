"""
Identifier parsing.

Every entity id is a UUID rendered as a string. A value that does not parse
is a malformed identifier (400), which is reported separately from a
well-formed id that matches nothing (404).
"""

from __future__ import annotations

from uuid import UUID

from .errors import MalformedIdentifier


def is_valid_id(raw: object) -> bool:
    if not isinstance(raw, str) or not raw.strip():
        return False
    try:
        UUID(raw.strip())
    except ValueError:
        return False
    return True


def parse_id(raw: object, *, label: str = "ID") -> str:
    """
    Return the canonical (lower-case, hyphenated) form of `raw`.
    """
    if not is_valid_id(raw):
        raise MalformedIdentifier(f"Invalid {label} format.")
    return str(UUID(str(raw).strip()))
