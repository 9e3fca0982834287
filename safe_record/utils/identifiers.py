"""
Identifier helpers.

Two identifier formats are supported, one per store implementation:
- sys ids: 32 lowercase hexadecimal characters (in-memory store)
- UUIDs in canonical hyphenated form (Supabase store, Postgres uuid columns)
"""

import re
import uuid

SYS_ID_PATTERN = re.compile(r'^[0-9a-f]{32}$')
UUID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)


def is_eligible_sys_id(value: object) -> bool:
    """Check whether value has the surface syntax of a sys id."""
    return isinstance(value, str) and SYS_ID_PATTERN.match(value) is not None


def is_eligible_uuid(value: object) -> bool:
    """Check whether value is a canonical hyphenated UUID string."""
    return isinstance(value, str) and UUID_PATTERN.match(value) is not None


def new_sys_id() -> str:
    """Generate a fresh sys id."""
    return uuid.uuid4().hex
