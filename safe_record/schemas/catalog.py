"""
Pydantic models for the schema catalog.

The catalog is the metadata side of the record store: which tables exist,
which columns each table defines, their internal type tags and labels.
Record facades never read rows without first checking the catalog.

Catalogs are usually loaded from JSON:

    {
        "tables": [
            {
                "name": "incident",
                "label": "Incident",
                "display_field": "number",
                "columns": [
                    {"name": "number", "type": "string"},
                    {"name": "caller", "type": "reference", "reference_table": "sys_user"},
                    {"name": "work_notes", "type": "journal_input"}
                ]
            }
        ]
    }
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from pydantic import field_validator, model_validator

from safe_record.errors import CatalogError
from safe_record.utils import constants

NAME_PATTERN = r'^[a-z_][a-z0-9_]*$'


def _default_label(name: str) -> str:
    """Derive a human readable label from a column or table name."""
    return name.replace('_', ' ').strip().title()


class FieldKind(str, Enum):
    """
    Closed set of field behaviours the facade dispatches on.

    Resolved once from the schema type tag; see FieldKind.for_type().
    """
    PLAIN = "plain"
    ENCRYPTED = "encrypted"
    JOURNAL = "journal"
    REFERENCE = "reference"
    OTHER = "other"

    @classmethod
    def for_type(cls, field_type: str) -> "FieldKind":
        if field_type == constants.PASSWORD2:
            return cls.ENCRYPTED
        if field_type == constants.JOURNAL_INPUT:
            return cls.JOURNAL
        if field_type == constants.REFERENCE:
            return cls.REFERENCE
        if field_type in constants.TEXT_TYPES:
            return cls.PLAIN
        return cls.OTHER


class FieldDefinition(BaseModel):
    """A single column of a table."""
    name: str = Field(..., description="Column name", pattern=NAME_PATTERN)
    label: Optional[str] = Field(None, description="Human readable column label")
    type: str = Field(constants.STRING, description="Internal type tag")
    reference_table: Optional[str] = Field(
        None,
        description="Target table for reference columns"
    )

    @field_validator("type")
    @classmethod
    def validate_type(cls, value: str) -> str:
        if value not in constants.FIELD_TYPES:
            raise ValueError(
                f"Unknown field type '{value}'. "
                f"Expected one of: {', '.join(sorted(constants.FIELD_TYPES))}"
            )
        return value

    @model_validator(mode="after")
    def validate_reference(self) -> "FieldDefinition":
        if self.type == constants.REFERENCE and not self.reference_table:
            raise ValueError(f"Reference column '{self.name}' requires reference_table")
        if self.type != constants.REFERENCE and self.reference_table:
            raise ValueError(
                f"Column '{self.name}' of type '{self.type}' cannot declare reference_table"
            )
        if not self.label:
            self.label = _default_label(self.name)
        return self

    @property
    def kind(self) -> FieldKind:
        return FieldKind.for_type(self.type)


class TableDefinition(BaseModel):
    """
    A table and its columns.

    The primary key column is added automatically (type 'guid') when the
    definition does not declare it.
    """
    name: str = Field(..., description="Table name", pattern=NAME_PATTERN)
    label: Optional[str] = Field(None, description="Singular table label")
    plural: Optional[str] = Field(None, description="Plural table label")
    primary_key: str = Field(constants.DEFAULT_PRIMARY_KEY, pattern=NAME_PATTERN)
    display_field: Optional[str] = Field(
        None,
        description="Column whose value is the record's display value"
    )
    columns: List[FieldDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def complete_definition(self) -> "TableDefinition":
        names = [column.name for column in self.columns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(
                f"Table '{self.name}' defines duplicate columns: {', '.join(duplicates)}"
            )

        if self.primary_key not in names:
            self.columns.insert(0, FieldDefinition(
                name=self.primary_key,
                label=_default_label(self.primary_key),
                type=constants.GUID,
            ))

        if self.display_field and self.display_field not in names + [self.primary_key]:
            raise ValueError(
                f"Display field '{self.display_field}' is not a column of table '{self.name}'"
            )

        if not self.label:
            self.label = _default_label(self.name)
        if not self.plural:
            self.plural = f"{self.label}s"
        return self

    def get_column(self, name: str) -> Optional[FieldDefinition]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None


class SchemaCatalog(BaseModel):
    """All tables known to a store, keyed by table name."""
    tables: Dict[str, TableDefinition] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def index_tables(cls, data: Any) -> Any:
        # Accept a list of tables and key it by name
        if isinstance(data, dict) and isinstance(data.get("tables"), list):
            indexed: Dict[str, Any] = {}
            for table in data["tables"]:
                name = table.name if isinstance(table, TableDefinition) else table.get("name")
                if name in indexed:
                    raise ValueError(f"Table '{name}' is defined more than once")
                indexed[name] = table
            return {**data, "tables": indexed}
        return data

    @model_validator(mode="after")
    def validate_references(self) -> "SchemaCatalog":
        for key, table in self.tables.items():
            if key != table.name:
                raise ValueError(f"Catalog key '{key}' does not match table name '{table.name}'")
            for column in table.columns:
                if column.reference_table and column.reference_table not in self.tables:
                    raise ValueError(
                        f"Column '{table.name}.{column.name}' references unknown "
                        f"table '{column.reference_table}'"
                    )
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaCatalog":
        """
        Build a catalog from a plain dict.

        Raises:
            CatalogError: If the definition does not validate.
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise CatalogError(f"Invalid schema catalog: {e}") from e

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "SchemaCatalog":
        """
        Load a catalog from a JSON file.

        Raises:
            CatalogError: If the file is not valid JSON or the definition
                          does not validate.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise CatalogError(f"Schema catalog {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def table_exists(self, name: object) -> bool:
        return isinstance(name, str) and name in self.tables

    def get_table(self, name: str) -> TableDefinition:
        try:
            return self.tables[name]
        except KeyError:
            raise CatalogError(f"Table '{name}' is not defined in the catalog") from None
