"""
In-memory record store.

Rows live in a dict per table, keyed by 32-character hex sys ids. Stored
rows are deep-copied on every read and write so handles never share state
with the store.
"""

import copy
import logging
from typing import Any, Dict, Optional

from safe_record.schemas import SchemaCatalog
from safe_record.services.capability_service import CapabilityEvaluator
from safe_record.store.base import BaseRecordStore
from safe_record.store.codec import FieldCodec
from safe_record.utils.identifiers import is_eligible_sys_id, new_sys_id

logger = logging.getLogger(__name__)


class InMemoryRecordStore(BaseRecordStore):
    """Dict backed store, used standalone and in tests."""

    def __init__(
        self,
        catalog: SchemaCatalog,
        capabilities: Optional[CapabilityEvaluator] = None,
        codec: Optional[FieldCodec] = None,
        link_base: Optional[str] = None
    ):
        super().__init__(catalog, capabilities=capabilities, codec=codec, link_base=link_base)
        self._rows: Dict[str, Dict[str, Dict[str, Any]]] = {
            name: {} for name in catalog.tables
        }

    def row_count(self, table: str) -> int:
        return len(self._rows.get(table, {}))

    def is_eligible_identifier(self, identifier: str) -> bool:
        return is_eligible_sys_id(identifier)

    def new_identifier(self) -> str:
        return new_sys_id()

    def load_row(
        self,
        table: str,
        identifier: str,
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        row = self._rows[table].get(identifier)
        return copy.deepcopy(row) if row is not None else None

    def insert_row(
        self,
        table: str,
        values: Dict[str, Any],
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        primary_key = self.catalog.get_table(table).primary_key
        identifier = values.get(primary_key)

        if not identifier or identifier in self._rows[table]:
            logger.error(f"Cannot insert into '{table}': identifier missing or already taken")
            return None

        self._rows[table][identifier] = copy.deepcopy(values)
        logger.debug(f"Stored row {identifier} in table '{table}'")

        return copy.deepcopy(values)

    def update_row(
        self,
        table: str,
        identifier: str,
        changes: Dict[str, Any],
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        row = self._rows[table].get(identifier)
        if row is None:
            logger.warning(f"Cannot update row {identifier} in '{table}': not found")
            return None

        row.update(copy.deepcopy(changes))
        return copy.deepcopy(row)

    def delete_row(self, table: str, identifier: str, secure: bool) -> bool:
        return self._rows[table].pop(identifier, None) is not None
