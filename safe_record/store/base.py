"""
Record store contracts.

RecordStore and RecordHandle describe what the record facade consumes from
a store. BaseRecordStore implements the contract on top of four row
primitives (load, insert, update, delete) so concrete stores only deal with
their backend; handles are TableRecordHandle instances.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from safe_record.config import settings
from safe_record.errors import CatalogError
from safe_record.schemas import SchemaCatalog, TableDefinition
from safe_record.services.capability_service import (
    AllowAllCapabilities,
    CapabilityEvaluator,
    Operation,
)
from safe_record.store.codec import FieldCodec
from safe_record.store.handle import TableRecordHandle

logger = logging.getLogger(__name__)


@runtime_checkable
class RecordHandle(Protocol):
    """An in-memory reference to one row of a store."""

    @property
    def table_name(self) -> str: ...

    @property
    def store(self) -> "RecordStore": ...

    def is_valid_record(self) -> bool: ...

    def is_new_record(self) -> bool: ...

    def is_valid_field(self, name: str) -> bool: ...

    def get_field_type(self, name: str) -> str: ...

    def get_unique_value(self) -> str: ...

    def get_value(self, name: str) -> str: ...

    def is_nil(self, name: str) -> bool: ...

    def get_display_value(self, name: Optional[str] = None) -> str: ...

    def get_decrypted_value(self, name: str) -> str: ...

    def set_value(self, name: str, value: Any) -> None: ...

    def set_display_value(self, name: str, value: Any) -> None: ...

    def add_journal_entry(self, name: str, text: str) -> None: ...

    def get_rich_value(self, name: str) -> Any: ...

    def get_reference_record(self, name: str) -> "RecordHandle": ...

    def get_link(self, no_stack: bool = False) -> str: ...

    def get_table_label(self) -> str: ...

    def get_table_plural(self) -> str: ...

    def get_field_label(self, name: str) -> str: ...

    def can_read(self, field: Optional[str] = None) -> bool: ...

    def can_write(self, field: Optional[str] = None) -> bool: ...

    def can_create(self, field: Optional[str] = None) -> bool: ...

    def can_delete(self, field: Optional[str] = None) -> bool: ...

    def insert(self) -> Optional[str]: ...

    def update(self) -> Optional[str]: ...

    def delete_record(self) -> bool: ...


@runtime_checkable
class RecordStore(Protocol):
    """Creates and fetches handles and answers catalog questions."""

    @property
    def catalog(self) -> SchemaCatalog: ...

    def table_exists(self, name: str) -> bool: ...

    def create_new(self, table: str, secure: bool = False) -> RecordHandle: ...

    def fetch_by_identifier(
        self,
        table: str,
        identifier: str,
        secure: bool = False
    ) -> RecordHandle: ...

    def is_eligible_identifier(self, identifier: str) -> bool: ...


class BaseRecordStore(ABC):
    """
    Shared RecordStore implementation.

    Subclasses provide identifier syntax and the row primitives. Rows are
    plain dicts of column name -> stored value.
    """

    def __init__(
        self,
        catalog: SchemaCatalog,
        capabilities: Optional[CapabilityEvaluator] = None,
        codec: Optional[FieldCodec] = None,
        link_base: Optional[str] = None
    ):
        self._catalog = catalog
        self._capabilities = capabilities or AllowAllCapabilities()
        self._codec = codec or FieldCodec.from_settings()
        self._link_base = settings.LINK_BASE if link_base is None else link_base

    @property
    def catalog(self) -> SchemaCatalog:
        return self._catalog

    @property
    def capabilities(self) -> CapabilityEvaluator:
        return self._capabilities

    @property
    def codec(self) -> FieldCodec:
        return self._codec

    @property
    def link_base(self) -> str:
        return self._link_base

    def table_exists(self, name: str) -> bool:
        return self._catalog.table_exists(name)

    def _table(self, name: str) -> TableDefinition:
        if not self.table_exists(name):
            raise CatalogError(f"Table '{name}' is not defined in the catalog")
        return self._catalog.get_table(name)

    def create_new(self, table: str, secure: bool = False) -> TableRecordHandle:
        """Allocate an uncommitted handle for table."""
        handle = TableRecordHandle(self, self._table(table), secure=secure)
        handle.initialize_new()
        logger.debug(f"Allocated new {'secure ' if secure else ''}handle for table '{table}'")
        return handle

    def empty_handle(self, table: str, secure: bool = False) -> TableRecordHandle:
        """A handle bound to table that represents no row."""
        return TableRecordHandle(self, self._table(table), secure=secure)

    def fetch_by_identifier(
        self,
        table: str,
        identifier: str,
        secure: bool = False
    ) -> TableRecordHandle:
        """
        Fetch a row into a handle.

        A missing row, or a row a secure handle is not permitted to read,
        yields a handle whose is_valid_record() is False.
        """
        handle = self.empty_handle(table, secure=secure)

        if secure and not self._capabilities.is_permitted(Operation.READ, table):
            logger.warning(f"Read access to table '{table}' denied for secure handle")
            return handle

        row = self.load_row(table, identifier, secure)
        if row is None:
            logger.debug(f"No row '{identifier}' in table '{table}'")
        else:
            handle.load(row)

        return handle

    @abstractmethod
    def is_eligible_identifier(self, identifier: str) -> bool:
        """Check the surface syntax of a row identifier."""

    @abstractmethod
    def new_identifier(self) -> str:
        """Generate an identifier for a row about to be inserted."""

    @abstractmethod
    def load_row(
        self,
        table: str,
        identifier: str,
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        """Return the stored row, or None if there is none."""

    @abstractmethod
    def insert_row(
        self,
        table: str,
        values: Dict[str, Any],
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        """Persist a new row; return the stored row or None on failure."""

    @abstractmethod
    def update_row(
        self,
        table: str,
        identifier: str,
        changes: Dict[str, Any],
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        """Apply changes to a row; return the stored row or None on failure."""

    @abstractmethod
    def delete_row(self, table: str, identifier: str, secure: bool) -> bool:
        """Delete a row; return True if a row was deleted."""
