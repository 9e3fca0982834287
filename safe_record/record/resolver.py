"""
Construction resolver.

One function per way of obtaining a record handle. Each either returns a
fully populated ResolvedHandle or raises ConstructionError; nothing is
bound before every check has passed.

    resolve_from_handle(handle, table_name=None)
        wrap a handle the caller already holds
    resolve_new(store, table_name, secure=False)
        allocate an uncommitted row
    resolve_fetch(store, table_name, identifier, secure=False)
        fetch a stored row; the identifier syntax is checked before the
        store is asked for anything
"""

import logging
from dataclasses import dataclass
from typing import Optional

from safe_record.errors import ConstructionError
from safe_record.store.base import RecordHandle, RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedHandle:
    """
    Outcome of a successful resolution.

    Attributes:
        handle: The bound handle (never None)
        store: Store the handle belongs to, used to re-acquire handles
        was_constructed_as_new: True only for resolve_new()
        secure: Whether the row-level-secured variant was requested
    """
    handle: RecordHandle
    store: RecordStore
    was_constructed_as_new: bool = False
    secure: bool = False


def _test_store(prefix: str, store: object) -> RecordStore:
    if not isinstance(store, RecordStore):
        raise ConstructionError(prefix + "Passed object does not represent a record store!")
    return store


def _test_table_name(prefix: str, store: RecordStore, table_name: object) -> str:
    if not isinstance(table_name, str) or not store.table_exists(table_name):
        raise ConstructionError(
            prefix + f'"{table_name}" does not represent a valid table name for that store!'
        )
    return table_name


def _test_secure(prefix: str, secure: object) -> bool:
    if not isinstance(secure, bool):
        raise ConstructionError(prefix + 'Value in parameter "secure" is not of boolean type!')
    return secure


def resolve_from_handle(
    handle: object,
    table_name: Optional[str] = None
) -> ResolvedHandle:
    """
    Wrap an existing handle.

    Args:
        handle: A RecordHandle that is a new row or a stored row
        table_name: Optional; when given it must match the handle's table

    Raises:
        ConstructionError: If handle is missing, lacks the handle contract,
                           does not represent a row, or is bound to a
                           different table than table_name.
    """
    prefix = "[Record.from_handle] "

    if handle is None or not isinstance(handle, RecordHandle) or not handle.is_valid_record():
        raise ConstructionError(
            prefix + "Passed object does not represent a valid record handle!"
        )

    if table_name is not None and table_name != handle.table_name:
        raise ConstructionError(
            prefix + f'Passed handle is bound to table "{handle.table_name}", '
            f'not to "{table_name}"!'
        )

    return ResolvedHandle(
        handle=handle,
        store=handle.store,
        was_constructed_as_new=False,
        secure=bool(getattr(handle, "secure", False)),
    )


def resolve_new(
    store: RecordStore,
    table_name: str,
    secure: bool = False
) -> ResolvedHandle:
    """
    Allocate a new, uncommitted row for table_name.

    Raises:
        ConstructionError: If the store, table name or secure flag is invalid.
    """
    prefix = "[Record.new_for_table] "

    store = _test_store(prefix, store)
    table_name = _test_table_name(prefix, store, table_name)
    secure = _test_secure(prefix, secure)

    handle = store.create_new(table_name, secure=secure)
    logger.debug(f"Resolved new record for table '{table_name}' (secure={secure})")

    return ResolvedHandle(handle=handle, store=store, was_constructed_as_new=True, secure=secure)


def resolve_fetch(
    store: RecordStore,
    table_name: str,
    identifier: str,
    secure: bool = False
) -> ResolvedHandle:
    """
    Fetch a stored row by table name and identifier.

    A row that does not exist is not an error here; the resulting record
    reports is_valid_record() == False.

    Raises:
        ConstructionError: If the store, table name, identifier syntax or
                           secure flag is invalid. Checked before any fetch.
    """
    prefix = "[Record.fetch_for_table] "

    store = _test_store(prefix, store)
    table_name = _test_table_name(prefix, store, table_name)

    if not isinstance(identifier, str) or not store.is_eligible_identifier(identifier):
        raise ConstructionError(prefix + f'"{identifier}" does not represent a valid identifier!')

    secure = _test_secure(prefix, secure)

    handle = store.fetch_by_identifier(table_name, identifier, secure=secure)
    if not handle.is_valid_record():
        logger.info(f"No record {identifier} found in table '{table_name}'")

    return ResolvedHandle(handle=handle, store=store, was_constructed_as_new=False, secure=secure)
