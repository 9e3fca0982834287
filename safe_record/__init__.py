"""
safe_record: a safe facade for single-record access to schema-driven stores.

Typical use:

    >>> from safe_record import InMemoryRecordStore, Record, SchemaCatalog
    >>> store = InMemoryRecordStore(SchemaCatalog.from_json_file("catalog.json"))
    >>> record = Record.new_for_table(store, "incident")
    >>> record.set_value("short_description", "Printer on fire")
    >>> identifier = record.insert()
"""

from safe_record.errors import (
    AuthenticationError,
    CatalogError,
    ConfigurationError,
    ConsistencyError,
    ConstructionError,
    RecordFacadeError,
    SchemaError,
    StateError,
    ValidationError,
)
from safe_record.record import Record, RecordState
from safe_record.schemas import FieldDefinition, FieldKind, SchemaCatalog, TableDefinition
from safe_record.store import (
    FieldCodec,
    InMemoryRecordStore,
    RecordHandle,
    RecordStore,
    SupabaseRecordStore,
    is_valid_handle,
)
from safe_record.utils.logging import get_logger

# Package logger; module loggers propagate to it
logger = get_logger("safe_record")

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "CatalogError",
    "ConfigurationError",
    "ConsistencyError",
    "ConstructionError",
    "FieldCodec",
    "FieldDefinition",
    "FieldKind",
    "InMemoryRecordStore",
    "Record",
    "RecordFacadeError",
    "RecordHandle",
    "RecordState",
    "RecordStore",
    "SchemaCatalog",
    "SchemaError",
    "StateError",
    "SupabaseRecordStore",
    "TableDefinition",
    "ValidationError",
    "is_valid_handle",
]
