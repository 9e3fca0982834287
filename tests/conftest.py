"""
Pytest configuration for safe_record tests.

Sets up test environment and global fixtures.
"""
import os

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from unittest.mock import MagicMock  # noqa: E402

from safe_record.record import Record  # noqa: E402
from safe_record.schemas import SchemaCatalog  # noqa: E402
from safe_record.store import FieldCodec, InMemoryRecordStore  # noqa: E402

TEST_ENCRYPTION_KEY = b"k" * 32

CATALOG_DEFINITION = {
    "tables": [
        {
            "name": "sys_user",
            "label": "User",
            "display_field": "user_name",
            "columns": [
                {"name": "user_name", "type": "string"},
                {"name": "email", "type": "string", "label": "Email address"},
            ],
        },
        {
            "name": "company",
            "label": "Company",
            "plural": "Companies",
            "columns": [
                {"name": "name", "type": "string"},
            ],
        },
        {
            "name": "incident",
            "label": "Incident",
            "display_field": "number",
            "columns": [
                {"name": "number", "type": "string"},
                {"name": "short_description", "type": "string"},
                {"name": "priority", "type": "integer"},
                {"name": "cost", "type": "decimal"},
                {"name": "opened_at", "type": "glide_date_time", "label": "Opened"},
                {"name": "due_date", "type": "glide_date"},
                {"name": "active", "type": "boolean"},
                {"name": "caller", "type": "reference", "reference_table": "sys_user"},
                {"name": "work_notes", "type": "journal_input"},
                {"name": "api_secret", "type": "password2"},
                {"name": "metadata", "type": "json"},
            ],
        },
    ]
}


@pytest.fixture
def catalog() -> SchemaCatalog:
    """Catalog with users, companies and incidents."""
    return SchemaCatalog.from_dict(CATALOG_DEFINITION)


@pytest.fixture
def codec() -> FieldCodec:
    """Codec with a fixed test encryption key."""
    return FieldCodec(TEST_ENCRYPTION_KEY)


@pytest.fixture
def store(catalog: SchemaCatalog, codec: FieldCodec) -> InMemoryRecordStore:
    """Empty in-memory store over the test catalog."""
    return InMemoryRecordStore(catalog, codec=codec, link_base="https://records.test")


@pytest.fixture
def new_incident(store: InMemoryRecordStore) -> Record:
    """An uncommitted incident."""
    return Record.new_for_table(store, "incident")


@pytest.fixture
def stored_incident(store: InMemoryRecordStore) -> Record:
    """A committed incident fetched from the store."""
    record = Record.new_for_table(store, "incident")
    record.set_value("number", "INC0001")
    record.set_value("short_description", "  Printer on fire  ")
    identifier = record.insert()
    assert identifier is not None
    return Record.fetch_for_table(store, "incident", identifier)


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    mock_client = MagicMock()
    return mock_client
