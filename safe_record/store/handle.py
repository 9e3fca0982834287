"""
Row handle shared by the record stores.

A TableRecordHandle holds the working copy of one row plus the lifecycle
flags the store cares about (new, exists). Persistence goes through the
owning store's row primitives. Secure handles check the store's capability
evaluator before every persistence call.
"""

import copy
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Set

from safe_record.errors import SchemaError, ValidationError
from safe_record.schemas import FieldDefinition, TableDefinition
from safe_record.services.capability_service import Operation
from safe_record.utils import constants

if TYPE_CHECKING:
    from safe_record.store.base import BaseRecordStore

logger = logging.getLogger(__name__)


class TableRecordHandle:
    """Working copy of one row of a table."""

    def __init__(
        self,
        store: "BaseRecordStore",
        table: TableDefinition,
        secure: bool = False
    ):
        self._store = store
        self._table = table
        self._secure = secure
        self._values: Dict[str, Any] = {}
        self._changed: Set[str] = set()
        self._is_new = False
        self._exists = False

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} table={self._table.name!r} "
            f"id={self.get_unique_value()!r} new={self._is_new} exists={self._exists}>"
        )

    # --- lifecycle used by the store ---

    def initialize_new(self) -> None:
        self._values = {column.name: None for column in self._table.columns}
        self._changed.clear()
        self._is_new = True
        self._exists = True

    def load(self, row: Dict[str, Any]) -> None:
        self._values = {
            column.name: copy.deepcopy(row.get(column.name))
            for column in self._table.columns
        }
        self._changed.clear()
        self._is_new = False
        self._exists = True

    # --- metadata ---

    @property
    def table_name(self) -> str:
        return self._table.name

    @property
    def table_definition(self) -> TableDefinition:
        return self._table

    @property
    def store(self) -> "BaseRecordStore":
        return self._store

    @property
    def secure(self) -> bool:
        return self._secure

    def is_valid_record(self) -> bool:
        return self._exists

    def is_new_record(self) -> bool:
        return self._is_new

    def is_valid_field(self, name: str) -> bool:
        return isinstance(name, str) and self._table.has_column(name)

    def _column(self, name: str) -> FieldDefinition:
        column = self._table.get_column(name) if isinstance(name, str) else None
        if column is None:
            raise SchemaError(
                f'"{name}" is not a valid field name for table "{self._table.name}"!',
                field_name=str(name),
                table_name=self._table.name,
            )
        return column

    def get_field_type(self, name: str) -> str:
        return self._column(name).type

    def get_field_label(self, name: str) -> str:
        return self._column(name).label or name

    def get_table_label(self) -> str:
        return self._table.label or self._table.name

    def get_table_plural(self) -> str:
        return self._table.plural or self.get_table_label()

    def get_unique_value(self) -> str:
        value = self._values.get(self._table.primary_key)
        return "" if value is None else str(value)

    def get_link(self, no_stack: bool = False) -> str:
        link = f"{self._store.link_base}/{self._table.name}/{self.get_unique_value()}"
        if not no_stack:
            link = f"{link}?stack={self._table.name}_list"
        return link

    # --- values ---

    def get_value(self, name: str) -> str:
        """Plain string representation of the stored value ('' when empty)."""
        column = self._column(name)
        return self._store.codec.to_text(column.type, self._values.get(column.name))

    def get_stored_value(self, name: str) -> Any:
        column = self._column(name)
        return copy.deepcopy(self._values.get(column.name))

    def is_nil(self, name: str) -> bool:
        return self._store.codec.is_empty(self._values.get(self._column(name).name))

    def get_display_value(self, name: Optional[str] = None) -> str:
        if name is None:
            display_field = self._table.display_field
            if display_field and not self.is_nil(display_field):
                return self.get_display_value(display_field)
            return self.get_unique_value()

        column = self._column(name)
        raw = self._values.get(column.name)

        if column.type == constants.REFERENCE and not self._store.codec.is_empty(raw):
            referenced = self.get_reference_record(name)
            if referenced.is_valid_record():
                return referenced._own_display_value()

        return self._store.codec.to_display(column.type, raw)

    def _own_display_value(self) -> str:
        # References of the referenced row are not followed; they may cycle
        display_field = self._table.display_field
        if display_field and not self.is_nil(display_field):
            column = self._column(display_field)
            return self._store.codec.to_display(column.type, self._values.get(column.name))
        return self.get_unique_value()

    def get_decrypted_value(self, name: str) -> str:
        column = self._column(name)
        if column.type != constants.PASSWORD2:
            raise SchemaError(
                f'"{name}" does not represent a password2 field!',
                field_name=name,
                table_name=self._table.name,
            )
        raw = self._values.get(column.name)
        return "" if self._store.codec.is_empty(raw) else self._store.codec.decrypt(raw)

    def get_rich_value(self, name: str) -> Any:
        column = self._column(name)
        return self._store.codec.to_rich(column.type, self._values.get(column.name))

    def set_value(self, name: str, value: Any) -> None:
        column = self._column(name)
        if column.name == self._table.primary_key and not self._is_new:
            raise SchemaError(
                f'"{name}" is the primary key of a stored record and cannot be changed!',
                field_name=name,
                table_name=self._table.name,
            )
        if column.name == self._table.primary_key and (
            not isinstance(value, str) or not self._store.is_eligible_identifier(value)
        ):
            raise ValidationError(
                f'"{value}" is not a valid identifier for primary key "{name}" of table "{self._table.name}"!'
            )
        self._values[column.name] = self._store.codec.to_storage(column.type, value)
        self._changed.add(column.name)

    def set_display_value(self, name: str, value: Any) -> None:
        column = self._column(name)
        if column.type == constants.PASSWORD2:
            self._values[column.name] = self._store.codec.encrypt(str(value))
            self._changed.add(column.name)
        else:
            self.set_value(name, value)

    def add_journal_entry(self, name: str, text: str) -> None:
        column = self._column(name)
        if not str(text).strip():
            logger.debug(f"Ignoring blank journal entry for '{self._table.name}.{column.name}'")
            return
        entries = list(self._values.get(column.name) or [])
        entries.append(self._store.codec.new_journal_entry(str(text)))
        self._values[column.name] = entries
        self._changed.add(column.name)

    def get_reference_record(self, name: str) -> "TableRecordHandle":
        column = self._column(name)
        if column.type != constants.REFERENCE or not column.reference_table:
            raise SchemaError(
                f'"{name}" does not represent a reference field!',
                field_name=name,
                table_name=self._table.name,
            )

        identifier = self._values.get(column.name)
        if self._store.codec.is_empty(identifier) or not self._store.is_eligible_identifier(
            str(identifier)
        ):
            return self._store.empty_handle(column.reference_table, secure=self._secure)

        return self._store.fetch_by_identifier(
            column.reference_table, str(identifier), secure=self._secure
        )

    # --- capabilities ---

    def _is_permitted(self, operation: Operation, field: Optional[str]) -> bool:
        return self._store.capabilities.is_permitted(operation, self._table.name, field)

    def can_read(self, field: Optional[str] = None) -> bool:
        return self._is_permitted(Operation.READ, field)

    def can_write(self, field: Optional[str] = None) -> bool:
        return self._is_permitted(Operation.WRITE, field)

    def can_create(self, field: Optional[str] = None) -> bool:
        return self._is_permitted(Operation.CREATE, field)

    def can_delete(self, field: Optional[str] = None) -> bool:
        return self._is_permitted(Operation.DELETE, field)

    # --- persistence ---

    def insert(self) -> Optional[str]:
        if not self._exists or not self._is_new:
            logger.warning(f"Refusing to insert a handle that is not a new row of '{self._table.name}'")
            return None

        if self._secure and not self.can_create():
            logger.warning(f"Create access to table '{self._table.name}' denied for secure handle")
            return None

        primary_key = self._table.primary_key
        if self._store.codec.is_empty(self._values.get(primary_key)):
            self._values[primary_key] = self._store.new_identifier()

        row = self._store.insert_row(self._table.name, copy.deepcopy(self._values), self._secure)
        if row is None:
            return None

        self.load(row)
        return self.get_unique_value()

    def update(self) -> Optional[str]:
        if not self._exists or self._is_new:
            logger.warning(f"Refusing to update a handle that is not a stored row of '{self._table.name}'")
            return None

        if self._secure and not self.can_write():
            logger.warning(f"Write access to table '{self._table.name}' denied for secure handle")
            return None

        changes = {name: copy.deepcopy(self._values[name]) for name in sorted(self._changed)}
        changes.pop(self._table.primary_key, None)

        identifier = self.get_unique_value()
        if not changes:
            return identifier

        row = self._store.update_row(self._table.name, identifier, changes, self._secure)
        if row is None:
            return None

        self.load(row)
        return self.get_unique_value()

    def delete_record(self) -> bool:
        if not self._exists or self._is_new:
            return False

        if self._secure and not self.can_delete():
            logger.warning(f"Delete access to table '{self._table.name}' denied for secure handle")
            return False

        deleted = self._store.delete_row(self._table.name, self.get_unique_value(), self._secure)
        if deleted:
            self._exists = False
        return deleted
