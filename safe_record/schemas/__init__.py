"""
Pydantic schemas for table metadata.

Stores validate every table and column name against these models before
touching row data.
"""

from .catalog import FieldDefinition, FieldKind, SchemaCatalog, TableDefinition

__all__ = ["FieldDefinition", "FieldKind", "SchemaCatalog", "TableDefinition"]
