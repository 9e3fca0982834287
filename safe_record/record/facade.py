"""
Record facade.

Record wraps exactly one record handle and makes single-record access safe
and uniform: every accessor validates the field against the table schema,
every operation refuses to run on a deleted record, and the lifecycle
operations (insert, update, delete_record) are only legal in the right
state.

Records are obtained in one of three ways:

    >>> # (1) wrap a handle you already hold
    >>> record = Record.from_handle(handle)
    >>>
    >>> # (2) create a new row (optionally row-level secured)
    >>> record = Record.new_for_table(store, "incident")
    >>> record = Record.new_for_table(store, "incident", secure=True)
    >>>
    >>> # (3) fetch a stored row
    >>> record = Record.fetch_for_table(store, "incident", "b3af7471c31a6a90108c78edd40131aa")

Only single-record access is wrapped. Bulk and list operations belong in a
different abstraction (e.g. a repository).

Record can be subclassed to build data access or business objects; error
messages carry the concrete class name.
"""

import logging
from typing import Any, Optional, Union

from safe_record.errors import (
    ConsistencyError,
    ConstructionError,
    SchemaError,
    StateError,
    ValidationError,
)
from safe_record.record.resolver import (
    ResolvedHandle,
    resolve_fetch,
    resolve_from_handle,
    resolve_new,
)
from safe_record.record.state import RecordState, target_state
from safe_record.schemas import FieldKind
from safe_record.store.base import RecordHandle, RecordStore
from safe_record.utils import constants

logger = logging.getLogger(__name__)


class Record:
    """Safe facade around one record handle."""

    def __init__(self, resolved: ResolvedHandle):
        """
        Bind a resolved handle.

        Use from_handle(), new_for_table() or fetch_for_table() instead of
        calling this directly.

        Raises:
            ConstructionError: If resolved is not a ResolvedHandle.
        """
        if not isinstance(resolved, ResolvedHandle):
            raise ConstructionError(
                f"[{type(self).__name__}.constructor] Records are constructed with "
                "from_handle(), new_for_table() or fetch_for_table()!"
            )

        self._handle: RecordHandle = resolved.handle
        self._store: RecordStore = resolved.store
        self._was_constructed_as_new = resolved.was_constructed_as_new
        self._secure = resolved.secure
        self._deleted = False

    # -----------------------------------------------------------------------
    # construction
    # -----------------------------------------------------------------------

    @classmethod
    def from_handle(cls, handle: RecordHandle, table_name: Optional[str] = None) -> "Record":
        """
        Wrap an existing handle (e.g. one passed into a hook).

        Args:
            handle: Handle representing a new or a stored row
            table_name: Optional; must match the handle's table if given

        Raises:
            ConstructionError: If the handle is invalid or bound to another table.
        """
        return cls(resolve_from_handle(handle, table_name))

    @classmethod
    def new_for_table(cls, store: RecordStore, table_name: str, secure: bool = False) -> "Record":
        """
        Create a new record that can be inserted.

        Args:
            store: Record store
            table_name: A table defined in the store's catalog
            secure: If True a row-level-secured handle is used

        Raises:
            ConstructionError: If the table name is invalid.
        """
        return cls(resolve_new(store, table_name, secure))

    @classmethod
    def fetch_for_table(
        cls,
        store: RecordStore,
        table_name: str,
        identifier: str,
        secure: bool = False
    ) -> "Record":
        """
        Retrieve a stored record.

        If no row exists for the identifier the record is returned anyway and
        reports is_valid_record() == False.

        Args:
            store: Record store
            table_name: A table defined in the store's catalog
            identifier: Unique identifier in the store's key format
            secure: If True a row-level-secured handle is used

        Raises:
            ConstructionError: If the table name or identifier syntax is invalid.
        """
        return cls(resolve_fetch(store, table_name, identifier, secure))

    # -----------------------------------------------------------------------
    # representation
    # -----------------------------------------------------------------------

    def __str__(self) -> str:
        handle = self._handle
        return (
            "Facade for a record handle:\n"
            f'Instantiated class: "{type(self).__name__}"\n'
            f'Handle class: "{type(handle).__name__}"\n'
            f"Record table: {handle.table_name} ({handle.get_table_label()})\n"
            f"Record identifier: {handle.get_unique_value()}\n"
            f"Record is new: {handle.is_new_record()}\n"
            f"Record is deleted: {self._deleted}\n"
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} table={self._handle.table_name!r} "
            f"id={self._handle.get_unique_value()!r} state={self.state.value}>"
        )

    # -----------------------------------------------------------------------
    # metadata
    # -----------------------------------------------------------------------

    def get_handle(self) -> RecordHandle:
        """The wrapped handle."""
        return self._handle

    @property
    def state(self) -> RecordState:
        if self._deleted:
            return RecordState.DELETED
        if self._handle.is_new_record():
            return RecordState.UNCOMMITTED
        return RecordState.COMMITTED

    @property
    def was_constructed_as_new(self) -> bool:
        return self._was_constructed_as_new

    @property
    def secure(self) -> bool:
        return self._secure

    def is_valid_record(self) -> bool:
        """True if the record is not deleted and the handle represents a row."""
        return not self._deleted and self._handle.is_valid_record()

    def is_valid_field(self, field_name: Any) -> bool:
        """
        Determine whether field_name is a column of the bound table.

        Never raises; any validation failure yields False.
        """
        try:
            self._test_field_name(self._prefix("is_valid_field"), field_name)
        except (ValidationError, SchemaError):
            return False
        return True

    def is_new_record(self) -> bool:
        """True if the row was not inserted into the store yet."""
        return self._handle.is_new_record()

    def is_deleted_record(self) -> bool:
        return self._deleted

    # -----------------------------------------------------------------------
    # capabilities
    # -----------------------------------------------------------------------

    def can_read(self, field_name: Optional[str] = None) -> bool:
        """
        Determine if reading this table, or the given field, is permitted.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is given and invalid.
        """
        prefix = self._prefix("can_read")
        self._test_is_deleted(prefix)

        if field_name is None:
            return self._handle.can_read()

        return self._handle.can_read(self._test_field_name(prefix, field_name))

    def can_write(self, field_name: Optional[str] = None) -> bool:
        """
        Determine if updating this table, or the given field, is permitted.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is given and invalid.
        """
        prefix = self._prefix("can_write")
        self._test_is_deleted(prefix)

        if field_name is None:
            return self._handle.can_write()

        return self._handle.can_write(self._test_field_name(prefix, field_name))

    def can_create(self, field_name: Optional[str] = None) -> bool:
        """
        Determine if creating rows in this table, or values in the given
        field, is permitted.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is given and invalid.
        """
        prefix = self._prefix("can_create")
        self._test_is_deleted(prefix)

        if field_name is None:
            return self._handle.can_create()

        return self._handle.can_create(self._test_field_name(prefix, field_name))

    def can_delete(self, field_name: Optional[str] = None) -> bool:
        """
        Determine if deleting rows in this table, or values in the given
        field, is permitted.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is given and invalid.
        """
        prefix = self._prefix("can_delete")
        self._test_is_deleted(prefix)

        if field_name is None:
            return self._handle.can_delete()

        return self._handle.can_delete(self._test_field_name(prefix, field_name))

    # -----------------------------------------------------------------------
    # read-only projections
    # -----------------------------------------------------------------------

    def get_table_name(self) -> str:
        self._test_is_deleted(self._prefix("get_table_name"))
        return self._handle.table_name

    def get_unique_identifier(self) -> str:
        """The row's identifier; empty until the record is inserted."""
        self._test_is_deleted(self._prefix("get_unique_identifier"))
        return self._handle.get_unique_value()

    def get_link(self, no_stack: bool = False) -> str:
        """
        Link to the record.

        Args:
            no_stack: Suppress the return-to-list navigation parameter.

        Raises:
            StateError: If the record was deleted.
            ValidationError: If no_stack is not a bool.
        """
        prefix = self._prefix("get_link")
        self._test_is_deleted(prefix)

        if not isinstance(no_stack, bool):
            raise ValidationError(prefix + 'Value in parameter "no_stack" is not of boolean type!')

        return self._handle.get_link(no_stack)

    def get_display_value(self, field_name: Optional[str] = None) -> str:
        """
        Display value of the record, or of the given field.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is given and invalid.
        """
        prefix = self._prefix("get_display_value")
        self._test_is_deleted(prefix)

        if field_name is None:
            return str(self._handle.get_display_value())

        return str(self._handle.get_display_value(self._test_field_name(prefix, field_name)))

    def get_field_type(self, field_name: str) -> str:
        """
        Internal type tag of a field, like "integer" or "glide_date_time".

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is invalid.
        """
        prefix = self._prefix("get_field_type")
        self._test_is_deleted(prefix)
        return self._handle.get_field_type(self._test_field_name(prefix, field_name))

    def get_field_kind(self, field_name: str) -> FieldKind:
        """The FieldKind set_value() dispatches on for this field."""
        return FieldKind.for_type(self.get_field_type(field_name))

    def get_label(self, label_param: Union[None, bool, str] = None) -> str:
        """
        Label of the table (optionally plural) or of a field.

        Args:
            label_param: None or False for the table label, True for the
                         plural table label, a field name for that field's
                         label.

        Raises:
            StateError: If the record was deleted.
            ValidationError: If label_param has any other type, or the
                             field name is empty.
            SchemaError: If the field name is not a column.
        """
        prefix = self._prefix("get_label")
        self._test_is_deleted(prefix)

        if label_param is None or isinstance(label_param, bool):
            if label_param is True:
                return str(self._handle.get_table_plural())
            return str(self._handle.get_table_label())

        if not isinstance(label_param, str):
            raise ValidationError(
                prefix + f"Expected a boolean or a field name, got {type(label_param).__name__}!"
            )

        return str(self._handle.get_field_label(self._test_field_name(prefix, label_param)))

    # -----------------------------------------------------------------------
    # values
    # -----------------------------------------------------------------------

    def has_value(self, field_name: str) -> bool:
        prefix = self._prefix("has_value")
        self._test_is_deleted(prefix)
        return not self._handle.is_nil(self._test_field_name(prefix, field_name))

    def get_value(self, field_name: str) -> str:
        """
        Value of a field as a trimmed string; "" if it has no value.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is invalid.
        """
        prefix = self._prefix("get_value")
        self._test_is_deleted(prefix)
        value = self._handle.get_value(self._test_field_name(prefix, field_name))
        return str(value or "").strip()

    def get_decrypted_value(self, field_name: str) -> str:
        """
        Plain text of a two-way encrypted (password2) field.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is invalid.
            SchemaError: If the field is not of type password2.
        """
        prefix = self._prefix("get_decrypted_value")
        self._test_is_deleted(prefix)
        name = self._test_field_name(prefix, field_name)

        if self._handle.get_field_type(name) != constants.PASSWORD2:
            raise SchemaError(
                prefix + f'"{name}" does not represent a password2 field!',
                field_name=name,
                table_name=self._handle.table_name,
            )

        return self._handle.get_decrypted_value(name)

    def get_reference_record(self, field_name: str) -> RecordHandle:
        """
        Handle of the row a reference field points to.

        Warning: if the field has no value an empty handle is returned, not
        None. Check is_valid_record() on the result.

        Raises:
            StateError: If the record was deleted.
            ValidationError/SchemaError: If field_name is invalid.
            SchemaError: If the field is not of type reference.
        """
        prefix = self._prefix("get_reference_record")
        self._test_is_deleted(prefix)
        name = self._test_field_name(prefix, field_name)

        if self._handle.get_field_type(name) != constants.REFERENCE:
            raise SchemaError(
                prefix + f'"{name}" does not represent a reference field!',
                field_name=name,
                table_name=self._handle.table_name,
            )

        return self._handle.get_reference_record(name)

    def get_rich_value(self, field_name: str) -> Any:
        """
        Typed object for the field's value, e.g. a datetime for date/time
        fields.

        Returns None if the field has no value or its type has no richer
        representation (such as string fields).
        """
        prefix = self._prefix("get_rich_value")
        self._test_is_deleted(prefix)
        name = self._test_field_name(prefix, field_name)

        if self._handle.is_nil(name):
            return None

        return self._handle.get_rich_value(name)

    def set_value(self, field_name: str, value: Any) -> None:
        """
        Set a field, honouring the field type.

        Encrypted fields are set through the plain text path (the store
        encrypts), journal fields get a new entry appended, every other
        type is assigned directly. Blank journal text adds no entry.

        Raises:
            StateError: If the record was deleted.
            ValidationError: If field_name is empty, value is None, or a
                             primary key value is not in the store's
                             identifier format.
            SchemaError: If field_name is not a column.
        """
        prefix = self._prefix("set_value")
        self._test_is_deleted(prefix)
        name = self._test_field_value(prefix, field_name, value)

        kind = FieldKind.for_type(self._handle.get_field_type(name))

        if kind is FieldKind.ENCRYPTED:
            self._handle.set_display_value(name, value)
        elif kind is FieldKind.JOURNAL:
            self._handle.add_journal_entry(name, str(value))
        elif kind in (FieldKind.PLAIN, FieldKind.REFERENCE, FieldKind.OTHER):
            self._handle.set_value(name, value)
        else:
            raise SchemaError(
                prefix + f'Unhandled field kind "{kind}" for field "{name}"!',
                field_name=name,
                table_name=self._handle.table_name,
            )

    # -----------------------------------------------------------------------
    # lifecycle
    # -----------------------------------------------------------------------

    def insert(self) -> Optional[str]:
        """
        Insert the new record into the store.

        Returns:
            The identifier of the inserted row, or None if the store could
            not insert it.

        Raises:
            StateError: If the record was already inserted or deleted.
        """
        self._require_transition(self._prefix("insert"), "insert")

        identifier = self._handle.insert()
        table = self._handle.table_name

        if identifier:
            logger.info(f"Inserted record {identifier} into table '{table}'")
            return identifier

        logger.warning(f"Store did not insert the new record into table '{table}'")
        return None

    def update(self) -> Optional[str]:
        """
        Persist changed field values.

        Returns:
            The identifier of the updated row, or None if the store could
            not update it.

        Raises:
            StateError: If the record was not inserted yet or was deleted.
        """
        self._require_transition(self._prefix("update"), "update")

        identifier = self._handle.update()
        table = self._handle.table_name

        if identifier:
            logger.info(f"Updated record {identifier} in table '{table}'")
            return identifier

        logger.warning(
            f"Store did not update record {self._handle.get_unique_value()} in table '{table}'"
        )
        return None

    def delete_record(self) -> bool:
        """
        Delete the row from the store.

        Records created with new_for_table() re-acquire a fresh handle from
        the store by table and identifier before deleting.

        Returns:
            True if the row was deleted, otherwise False.

        Raises:
            StateError: If the record was not inserted yet or already deleted.
            ConsistencyError: If the re-acquired row does not exist.
        """
        prefix = self._prefix("delete_record")
        self._require_transition(prefix, "delete_record")

        handle = self._handle
        table = handle.table_name
        identifier = handle.get_unique_value()

        if self._was_constructed_as_new:
            handle = self._store.fetch_by_identifier(table, identifier, secure=self._secure)

            if not handle.is_valid_record():
                raise ConsistencyError(
                    prefix + f'No record exists for identifier = "{identifier}" '
                    f'at table "{table}"!'
                )

        self._deleted = bool(handle.delete_record())

        if self._deleted:
            logger.info(f"Deleted record {identifier} from table '{table}'")
        else:
            logger.warning(f"Store did not delete record {identifier} from table '{table}'")

        return self._deleted

    # -----------------------------------------------------------------------
    # validation helpers
    # -----------------------------------------------------------------------

    def _prefix(self, method_name: str) -> str:
        return f"[{type(self).__name__}.{method_name}] "

    def _test_field_name(self, prefix: str, field_name: Any) -> str:
        """
        Validate a field name and return it trimmed.

        Raises:
            ValidationError: If the name is missing, not a string, or empty.
            SchemaError: If the name is not a column of the bound table.
        """
        if field_name is None or not isinstance(field_name, str):
            raise ValidationError(prefix + "No field name for validation passed!")

        name = field_name.strip()

        if name == "":
            raise ValidationError(prefix + "No field name for validation passed!")

        if not self._handle.is_valid_field(name):
            raise SchemaError(
                prefix + f'"{name}" is not a valid field name '
                f'for table "{self._handle.table_name}"!',
                field_name=name,
                table_name=self._handle.table_name,
            )

        return name

    def _test_field_value(self, prefix: str, field_name: Any, value: Any) -> str:
        name = self._test_field_name(prefix, field_name)

        if value is None:
            raise ValidationError(prefix + f"No value for the field {name} was passed!")

        return name

    def _test_is_inserted(self, prefix: str) -> None:
        if not self._handle.is_new_record():
            raise StateError(
                prefix + f'Record with identifier = "{self._handle.get_unique_value()}" '
                "already exists in the store!"
            )

    def _test_is_not_inserted(self, prefix: str) -> None:
        if self._handle.is_new_record():
            raise StateError(prefix + "The record was not inserted before yet!")

    def _test_is_deleted(self, prefix: str) -> None:
        if self._deleted:
            raise StateError(
                prefix + f'The record with identifier = "{self._handle.get_unique_value()}" '
                f'already was deleted from table "{self._handle.table_name}"!'
            )

    def _require_transition(self, prefix: str, operation: str) -> None:
        """Raise the matching StateError unless operation is legal now."""
        state = self.state

        if target_state(operation, state) is not None:
            return

        self._test_is_deleted(prefix)

        if state is RecordState.UNCOMMITTED:
            self._test_is_not_inserted(prefix)

        self._test_is_inserted(prefix)
