"""
Tests for the field value codec.

Tests cover:
- AES-GCM encryption of password2 values
- Key handling (size, base64 settings, missing key)
- Text, display and rich conversions per type tag
- Journal rendering
"""

import base64
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from unittest.mock import patch

from safe_record.errors import ConfigurationError
from safe_record.store import FieldCodec
from safe_record.utils import constants


class TestEncryption:
    """Tests for encrypt/decrypt and key handling"""

    def test_round_trip(self, codec: FieldCodec):
        token = codec.encrypt("hunter2")

        assert token != "hunter2"
        assert codec.decrypt(token) == "hunter2"

    def test_tokens_are_not_deterministic(self, codec: FieldCodec):
        assert codec.encrypt("same") != codec.encrypt("same")

    def test_wrong_key(self, codec: FieldCodec):
        token = codec.encrypt("hunter2")
        other = FieldCodec(b"x" * 32)

        with pytest.raises(ConfigurationError, match="wrong encryption key"):
            other.decrypt(token)

    def test_corrupted_token(self, codec: FieldCodec):
        with pytest.raises(ConfigurationError):
            codec.decrypt("not a token")

    def test_no_key_configured(self):
        codec = FieldCodec()

        assert codec.can_encrypt is False
        with pytest.raises(ConfigurationError, match="SAFE_RECORD_ENCRYPTION_KEY"):
            codec.encrypt("hunter2")

    @pytest.mark.parametrize("key", [b"", b"short", b"k" * 16, b"k" * 33])
    def test_key_must_be_32_bytes(self, key):
        with pytest.raises(ConfigurationError, match="32 bytes"):
            FieldCodec(key)

    def test_from_settings(self):
        key = FieldCodec.generate_key()

        with patch("safe_record.store.codec.settings") as mock_settings:
            mock_settings.ENCRYPTION_KEY = key
            codec = FieldCodec.from_settings()

        assert len(base64.b64decode(key)) == 32
        assert codec.can_encrypt is True

    def test_from_settings_without_key(self):
        with patch("safe_record.store.codec.settings") as mock_settings:
            mock_settings.ENCRYPTION_KEY = ""
            codec = FieldCodec.from_settings()

        assert codec.can_encrypt is False

    def test_from_settings_invalid_base64(self):
        with patch("safe_record.store.codec.settings") as mock_settings:
            mock_settings.ENCRYPTION_KEY = "not base64!"
            with pytest.raises(ConfigurationError, match="not valid base64"):
                FieldCodec.from_settings()


class TestConversions:
    """Tests for storage, text, display and rich conversions"""

    def test_to_storage(self, codec: FieldCodec):
        naive = datetime(2024, 5, 1, 9, 30)

        assert codec.to_storage(constants.DATE_TIME, naive) == "2024-05-01T09:30:00+00:00"
        assert codec.to_storage(constants.DATE, date(2024, 5, 1)) == "2024-05-01"
        assert codec.to_storage(constants.DECIMAL, Decimal("1.10")) == "1.10"
        assert codec.to_storage(constants.STRING, "x") == "x"

    @pytest.mark.parametrize("raw", [None, "", [], {}])
    def test_empty_values(self, codec: FieldCodec, raw):
        assert codec.is_empty(raw) is True
        assert codec.to_text(constants.STRING, raw) == ""
        assert codec.to_rich(constants.INTEGER, raw) is None

    def test_zero_and_false_are_values(self, codec: FieldCodec):
        assert codec.is_empty(0) is False
        assert codec.is_empty(False) is False

    def test_to_text(self, codec: FieldCodec):
        assert codec.to_text(constants.BOOLEAN, True) == "true"
        assert codec.to_text(constants.INTEGER, 7) == "7"
        assert codec.to_text(constants.JSON, {"b": 1, "a": 2}) == '{"a": 2, "b": 1}'

    def test_password_is_masked_for_display(self, codec: FieldCodec):
        assert codec.to_display(constants.PASSWORD2, codec.encrypt("x")) == "********"
        assert codec.to_display(constants.PASSWORD2, None) == ""

    def test_to_rich(self, codec: FieldCodec):
        assert codec.to_rich(constants.DATE_TIME, "2024-05-01T09:30:00Z") == datetime(
            2024, 5, 1, 9, 30, tzinfo=timezone.utc
        )
        assert codec.to_rich(constants.DATE, "2024-05-01") == date(2024, 5, 1)
        assert codec.to_rich(constants.BOOLEAN, "false") is False
        assert codec.to_rich(constants.JSON, '{"a": 1}') == {"a": 1}
        assert codec.to_rich(constants.STRING, "text") is None

    def test_unparseable_rich_value(self, codec: FieldCodec):
        assert codec.to_rich(constants.INTEGER, "seven") is None
        assert codec.to_rich(constants.DECIMAL, "1,5") is None


class TestJournal:
    """Tests for journal entries"""

    def test_new_entry(self):
        entry = FieldCodec.new_journal_entry("Called the user", author="beth.anglin")

        assert entry["value"] == "Called the user"
        assert entry["created_by"] == "beth.anglin"
        assert datetime.fromisoformat(entry["created_at"]).tzinfo is not None

    def test_render_newest_first(self):
        entries = [
            {"value": "first", "created_at": "2024-05-01T09:00:00+00:00", "created_by": "abel.tuter"},
            {"value": "second", "created_at": "2024-05-01T10:00:00+00:00", "created_by": None},
        ]

        assert FieldCodec.render_journal(entries) == (
            "2024-05-01T10:00:00+00:00\nsecond\n\n"
            "2024-05-01T09:00:00+00:00 - abel.tuter\nfirst"
        )
