"""
Field value codec shared by the record stores.

Converts between three representations of a column value:
- stored: JSON compatible values as a row holds them (str, int, float,
  bool, None, list/dict for journal and json columns)
- text: the plain string representation returned by get_value()
- rich: typed Python objects (datetime, date, Decimal, int, bool, dict)

Two-way encrypted (password2) columns are stored as base64 AES-GCM tokens
(12-byte nonce followed by ciphertext and tag).
"""

import base64
import binascii
import json
import logging
import os
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from safe_record.config import settings
from safe_record.errors import ConfigurationError
from safe_record.utils import constants

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
KEY_SIZE = 32
MASKED_VALUE = "********"


class FieldCodec:
    """Encrypts, renders and converts column values by type tag."""

    def __init__(self, encryption_key: Optional[bytes] = None):
        """
        Args:
            encryption_key: 32-byte AES key for password2 columns. Without a
                            key, reading or writing encrypted values raises
                            ConfigurationError.

        Raises:
            ConfigurationError: If the key is not exactly 32 bytes.
        """
        self._cipher: Optional[AESGCM] = None

        if encryption_key is not None:
            if len(encryption_key) != KEY_SIZE:
                raise ConfigurationError(
                    f"Encryption key must be exactly {KEY_SIZE} bytes, got {len(encryption_key)}"
                )
            self._cipher = AESGCM(encryption_key)

    @classmethod
    def from_settings(cls) -> "FieldCodec":
        """
        Build a codec from SAFE_RECORD_ENCRYPTION_KEY (base64).

        Raises:
            ConfigurationError: If the configured key is not valid base64.
        """
        if not settings.ENCRYPTION_KEY:
            return cls()

        try:
            key = base64.b64decode(settings.ENCRYPTION_KEY, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ConfigurationError("SAFE_RECORD_ENCRYPTION_KEY is not valid base64") from e

        return cls(key)

    @staticmethod
    def generate_key() -> str:
        """Generate a new base64 encoded key for SAFE_RECORD_ENCRYPTION_KEY."""
        return base64.b64encode(AESGCM.generate_key(bit_length=KEY_SIZE * 8)).decode("ascii")

    @property
    def can_encrypt(self) -> bool:
        return self._cipher is not None

    def _require_cipher(self) -> AESGCM:
        if self._cipher is None:
            raise ConfigurationError(
                "Encrypted fields require SAFE_RECORD_ENCRYPTION_KEY to be configured"
            )
        return self._cipher

    def encrypt(self, plaintext: str) -> str:
        cipher = self._require_cipher()
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.urlsafe_b64encode(nonce + ciphertext).decode("ascii")

    def decrypt(self, token: str) -> str:
        """
        Decrypt a stored token.

        Raises:
            ConfigurationError: If no key is configured, or the token was
                                encrypted with another key or is corrupted.
        """
        cipher = self._require_cipher()

        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii"))
            plaintext = cipher.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        except (InvalidTag, binascii.Error, ValueError) as e:
            raise ConfigurationError(
                "Unable to decrypt value: wrong encryption key or corrupted data"
            ) from e

        return plaintext.decode("utf-8")

    # --- stored representation ---

    def to_storage(self, field_type: str, value: Any) -> Any:
        """Normalize a caller supplied value for direct assignment."""
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, Decimal):
            return str(value)
        if field_type == constants.JSON and not isinstance(value, (dict, list, str)):
            return json.loads(json.dumps(value))
        return value

    @staticmethod
    def is_empty(raw: Any) -> bool:
        return raw is None or raw == "" or raw == [] or raw == {}

    # --- journal ---

    @staticmethod
    def new_journal_entry(text: str, author: Optional[str] = None) -> Dict[str, Any]:
        return {
            "value": text,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "created_by": author,
        }

    @staticmethod
    def render_journal(entries: List[Dict[str, Any]]) -> str:
        """Render journal entries newest first, separated by blank lines."""
        blocks = []
        for entry in reversed(entries or []):
            header = entry.get("created_at", "")
            if entry.get("created_by"):
                header = f"{header} - {entry['created_by']}"
            blocks.append(f"{header}\n{entry.get('value', '')}".strip())
        return "\n\n".join(blocks)

    # --- text and display ---

    def to_text(self, field_type: str, raw: Any) -> str:
        if self.is_empty(raw):
            return ""
        if field_type == constants.JOURNAL_INPUT:
            return self.render_journal(raw)
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, (dict, list)):
            return json.dumps(raw, sort_keys=True)
        return str(raw)

    def to_display(self, field_type: str, raw: Any) -> str:
        if field_type == constants.PASSWORD2:
            return "" if self.is_empty(raw) else MASKED_VALUE
        return self.to_text(field_type, raw)

    # --- rich values ---

    def to_rich(self, field_type: str, raw: Any) -> Any:
        """
        Convert a stored value into its typed representation.

        Returns None for empty values, for types without a richer form, and
        for stored values that do not parse.
        """
        if self.is_empty(raw):
            return None

        try:
            if field_type == constants.DATE_TIME:
                return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
            if field_type == constants.DATE:
                return date.fromisoformat(str(raw)[:10])
            if field_type == constants.DECIMAL:
                return Decimal(str(raw))
            if field_type == constants.INTEGER:
                return int(raw)
            if field_type == constants.BOOLEAN:
                if isinstance(raw, bool):
                    return raw
                return str(raw).strip().lower() in ("true", "1", "yes")
            if field_type == constants.JSON:
                return raw if isinstance(raw, (dict, list)) else json.loads(raw)
        except (ValueError, InvalidOperation, TypeError) as e:
            logger.warning(f"Stored value for a {field_type} field does not parse: {e}")
            return None

        return None
