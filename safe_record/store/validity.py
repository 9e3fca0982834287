"""Probe whether an arbitrary object is a usable record handle."""

from typing import Optional

from safe_record.store.base import RecordHandle


def is_valid_handle(handle: object, table_name: Optional[str] = None) -> bool:
    """
    Check whether handle is a record handle that represents a row.

    Args:
        handle: Object to test
        table_name: If given, the handle must also be bound to this table
                    (surrounding whitespace is ignored)

    Returns:
        True if handle satisfies the RecordHandle contract and is either a
        stored row or a new row, and matches table_name when given.
    """
    if not isinstance(handle, RecordHandle):
        return False

    is_valid = handle.is_valid_record() or handle.is_new_record()

    if is_valid and isinstance(table_name, str):
        is_valid = handle.table_name == table_name.strip()

    return is_valid
