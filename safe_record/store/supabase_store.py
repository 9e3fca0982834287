"""
Supabase record store.

Rows are read and written through PostgREST with the supabase client, one
row at a time, addressed by the table's primary key (a Postgres uuid).

Client selection:
- secure handles use the RLS client built from the user's access token,
  so row visibility is enforced by the database policies as well as by the
  capability evaluator
- other handles use the default client (normally the service role client)

Store-level failures (postgrest APIError) while persisting are logged and
reported as None/False; failures while loading propagate.

Journal columns are jsonb arrays; appending an entry rewrites the array.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, cast

from postgrest.exceptions import APIError
from supabase import Client

from safe_record.errors import ConfigurationError
from safe_record.schemas import SchemaCatalog
from safe_record.services.capability_service import CapabilityEvaluator
from safe_record.store.base import BaseRecordStore
from safe_record.store.codec import FieldCodec
from safe_record.utils.identifiers import is_eligible_uuid

logger = logging.getLogger(__name__)


class SupabaseRecordStore(BaseRecordStore):
    """PostgREST backed store."""

    def __init__(
        self,
        catalog: SchemaCatalog,
        client: Client,
        secure_client: Optional[Client] = None,
        capabilities: Optional[CapabilityEvaluator] = None,
        codec: Optional[FieldCodec] = None,
        link_base: Optional[str] = None
    ):
        """
        Args:
            catalog: Tables and columns exposed through this store
            client: Client for non-secure handles (service role)
            secure_client: RLS client for secure handles
                           (see safe_record.db.get_supabase_client)
            capabilities: Capability evaluator (defaults to allow all)
            codec: Field codec (defaults to one built from settings)
            link_base: Prefix for record links
        """
        super().__init__(catalog, capabilities=capabilities, codec=codec, link_base=link_base)
        self._client = client
        self._secure_client = secure_client

    def _client_for(self, secure: bool) -> Client:
        if not secure:
            return self._client
        if self._secure_client is None:
            raise ConfigurationError(
                "Secure handles require a secure_client created with the user's access token"
            )
        return self._secure_client

    def _primary_key(self, table: str) -> str:
        return self.catalog.get_table(table).primary_key

    def is_eligible_identifier(self, identifier: str) -> bool:
        return is_eligible_uuid(identifier)

    def new_identifier(self) -> str:
        return str(uuid.uuid4())

    def load_row(
        self,
        table: str,
        identifier: str,
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        logger.debug(f"Fetching row {identifier} from table '{table}'")

        result = (
            self._client_for(secure).table(table)
            .select("*")
            .eq(self._primary_key(table), identifier)
            .execute()
        )

        if not result.data or len(result.data) == 0:
            logger.warning(f"Row {identifier} not found in table '{table}'")
            return None

        return cast(Dict[str, Any], result.data[0])

    def insert_row(
        self,
        table: str,
        values: Dict[str, Any],
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        try:
            result = self._client_for(secure).table(table).insert(values).execute()
        except APIError as e:
            logger.error(f"Failed to insert into '{table}': {e.message}")
            return None

        rows = cast(List[Dict[str, Any]], result.data or [])
        if len(rows) == 0:
            logger.error(f"Failed to insert into '{table}': no data returned")
            return None

        return rows[0]

    def update_row(
        self,
        table: str,
        identifier: str,
        changes: Dict[str, Any],
        secure: bool
    ) -> Optional[Dict[str, Any]]:
        logger.debug(f"Updating row {identifier} in table '{table}': {sorted(changes.keys())}")

        try:
            result = (
                self._client_for(secure).table(table)
                .update(changes)
                .eq(self._primary_key(table), identifier)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to update row {identifier} in '{table}': {e.message}")
            return None

        rows = cast(List[Dict[str, Any]], result.data or [])
        if len(rows) == 0:
            logger.warning(f"Row {identifier} not found in table '{table}' for update")
            return None

        return rows[0]

    def delete_row(self, table: str, identifier: str, secure: bool) -> bool:
        try:
            result = (
                self._client_for(secure).table(table)
                .delete()
                .eq(self._primary_key(table), identifier)
                .execute()
            )
        except APIError as e:
            logger.error(f"Failed to delete row {identifier} from '{table}': {e.message}")
            return False

        return bool(result.data)
