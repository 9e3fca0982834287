"""
Exception hierarchy for safe_record.

Every failure raised by the record facade derives from RecordFacadeError so
callers can catch the whole family at once. The concrete classes also derive
from the closest built-in exception, which keeps ``except TypeError`` style
handlers in calling code working.

Error kinds:
- ConstructionError: unsupported arguments, invalid table name, invalid
  identifier syntax, or a handle that is not a valid row
- ValidationError: missing/empty field name or missing field value
- SchemaError: field not defined on the table, or a field type mismatch
- StateError: operation attempted in an illegal lifecycle state
- ConsistencyError: a row the facade expects to exist is missing
"""


class RecordFacadeError(Exception):
    """Base class for all errors raised by safe_record."""


class ConstructionError(RecordFacadeError, TypeError):
    """A Record could not be constructed from the given arguments."""


class ValidationError(RecordFacadeError, TypeError):
    """A field name or field value passed by the caller is missing or malformed."""


class SchemaError(RecordFacadeError):
    """The field does not exist on the bound table or has the wrong type."""

    def __init__(self, message: str, field_name: str = "", table_name: str = ""):
        super().__init__(message)
        self.field_name = field_name
        self.table_name = table_name


class StateError(RecordFacadeError, RuntimeError):
    """The operation is not legal in the record's current lifecycle state."""


class ConsistencyError(RecordFacadeError, RuntimeError):
    """A row the facade believes to exist was not found in the store."""


class CatalogError(RecordFacadeError, ValueError):
    """The schema catalog definition is malformed."""


class ConfigurationError(RecordFacadeError, ValueError):
    """A setting required by a store or codec is missing or invalid."""


class AuthenticationError(RecordFacadeError):
    """An access token could not be verified."""

    def __init__(self, message: str, error_code: str = "unauthorized"):
        super().__init__(message)
        self.error_code = error_code
