"""
Tests for the Record lifecycle: insert, update and delete_record.

Tests cover:
- Create, insert and re-fetch round trip
- Update persisting only changed values
- Insert/update mutual exclusion
- Deletion is terminal: every accessor raises afterwards
- Re-fetch before deleting records that were created as new
- Store failures reported as None/False instead of raising
"""

import pytest
from unittest.mock import patch

from safe_record.errors import ConsistencyError, StateError
from safe_record.record import Record, RecordState
from safe_record.services import RoleBasedCapabilities
from safe_record.store import InMemoryRecordStore


class TestInsert:
    """Tests for Record.insert"""

    def test_new_record_becomes_committed(self, store: InMemoryRecordStore):
        record = Record.new_for_table(store, "company")
        assert record.is_new_record() is True

        record.set_value("name", "Acme")
        identifier = record.insert()

        assert identifier
        assert record.is_new_record() is False
        assert record.get_value("name") == "Acme"

    def test_insert_then_fetch(self, store: InMemoryRecordStore):
        record = Record.new_for_table(store, "incident")
        record.set_value("short_description", "Printer on fire")

        identifier = record.insert()

        assert identifier is not None
        assert record.state is RecordState.COMMITTED
        assert record.is_new_record() is False
        assert record.get_unique_identifier() == identifier
        assert store.row_count("incident") == 1

        fetched = Record.fetch_for_table(store, "incident", identifier)
        assert fetched.get_value("short_description") == "Printer on fire"

    def test_insert_twice_raises(self, new_incident: Record):
        new_incident.insert()

        with pytest.raises(StateError, match="already exists in the store"):
            new_incident.insert()

    def test_insert_on_fetched_record_raises(self, stored_incident: Record):
        with pytest.raises(StateError, match="already exists in the store"):
            stored_incident.insert()

    def test_insert_store_failure_returns_none(self, store: InMemoryRecordStore, new_incident: Record):
        with patch.object(store, "insert_row", return_value=None):
            assert new_incident.insert() is None

        assert new_incident.state is RecordState.UNCOMMITTED

    def test_secure_insert_denied(self, catalog, codec):
        store = InMemoryRecordStore(
            catalog,
            capabilities=RoleBasedCapabilities([], user_roles=["itil"]),
            codec=codec,
        )
        record = Record.new_for_table(store, "incident", secure=True)

        assert record.insert() is None
        assert store.row_count("incident") == 0


class TestUpdate:
    """Tests for Record.update"""

    def test_update_persists_changes(self, store: InMemoryRecordStore, stored_incident: Record):
        stored_incident.set_value("priority", 1)

        identifier = stored_incident.update()

        assert identifier == stored_incident.get_unique_identifier()
        fetched = Record.fetch_for_table(store, "incident", identifier)
        assert fetched.get_value("priority") == "1"
        assert fetched.get_value("number") == "INC0001"

    def test_update_without_changes(self, store: InMemoryRecordStore, stored_incident: Record):
        with patch.object(store, "update_row", wraps=store.update_row) as update_row:
            assert stored_incident.update() == stored_incident.get_unique_identifier()

        update_row.assert_not_called()

    def test_update_after_insert(self, new_incident: Record):
        identifier = new_incident.insert()
        new_incident.set_value("number", "INC0100")

        assert new_incident.update() == identifier
        assert new_incident.get_value("number") == "INC0100"

    def test_update_before_insert_raises(self, new_incident: Record):
        with pytest.raises(StateError, match="not inserted before yet"):
            new_incident.update()

    def test_update_store_failure_returns_none(self, store: InMemoryRecordStore, stored_incident: Record):
        stored_incident.set_value("priority", 3)

        with patch.object(store, "update_row", return_value=None):
            assert stored_incident.update() is None

        assert stored_incident.state is RecordState.COMMITTED


class TestDelete:
    """Tests for Record.delete_record"""

    def test_delete_fetched_record(self, store: InMemoryRecordStore, stored_incident: Record):
        assert stored_incident.delete_record() is True

        assert stored_incident.state is RecordState.DELETED
        assert stored_incident.is_deleted_record() is True
        assert stored_incident.is_valid_record() is False
        assert store.row_count("incident") == 0

    def test_delete_record_created_as_new(self, store: InMemoryRecordStore):
        """create, set, insert, delete: the row is gone and the record is DELETED."""
        record = Record.new_for_table(store, "incident")
        record.set_value("short_description", "Scratch")
        identifier = record.insert()

        with patch.object(store, "fetch_by_identifier", wraps=store.fetch_by_identifier) as fetch:
            assert record.delete_record() is True

        fetch.assert_called_once_with("incident", identifier, secure=False)
        assert record.state is RecordState.DELETED
        assert Record.fetch_for_table(store, "incident", identifier).is_valid_record() is False

    def test_delete_before_insert_raises(self, new_incident: Record):
        with pytest.raises(StateError, match="not inserted before yet"):
            new_incident.delete_record()

    def test_row_removed_behind_the_record(self, store: InMemoryRecordStore):
        record = Record.new_for_table(store, "incident")
        identifier = record.insert()
        store.delete_row("incident", identifier, secure=False)

        with pytest.raises(ConsistencyError, match=f'identifier = "{identifier}" at table "incident"'):
            record.delete_record()

        assert record.state is RecordState.COMMITTED

    def test_store_refuses_delete(self, store: InMemoryRecordStore, stored_incident: Record):
        with patch.object(store, "delete_row", return_value=False):
            assert stored_incident.delete_record() is False

        assert stored_incident.state is RecordState.COMMITTED
        assert stored_incident.get_value("number") == "INC0001"

    @pytest.mark.parametrize("call", [
        lambda r: r.get_value("number"),
        lambda r: r.set_value("number", "INC0002"),
        lambda r: r.has_value("number"),
        lambda r: r.get_display_value(),
        lambda r: r.get_label(),
        lambda r: r.get_link(),
        lambda r: r.get_table_name(),
        lambda r: r.get_unique_identifier(),
        lambda r: r.can_read(),
        lambda r: r.insert(),
        lambda r: r.update(),
        lambda r: r.delete_record(),
    ])
    def test_deleted_record_is_terminal(self, stored_incident: Record, call):
        """Every operation after deletion raises a StateError."""
        stored_incident.delete_record()

        with pytest.raises(StateError, match="already was deleted"):
            call(stored_incident)

    def test_state_queries_still_work_after_delete(self, stored_incident: Record):
        stored_incident.delete_record()

        assert stored_incident.is_valid_field("number") is True
        assert "Record is deleted: True" in str(stored_incident)
