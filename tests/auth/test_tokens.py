"""
Tests for access token verification.

PyJWT's JWKS lookup and decode are patched; tests verify claim extraction
and how verification failures map to AuthenticationError codes.
"""

import pytest
from unittest.mock import MagicMock, patch

from jwt.exceptions import ExpiredSignatureError, InvalidAudienceError, PyJWKClientError

from safe_record.auth import verify_access_token
from safe_record.auth.tokens import extract_roles
from safe_record.errors import AuthenticationError

USER_ID = "6f1c2a3e-1b7d-4c59-9e1a-2f8b0c4d5e6f"


@pytest.fixture
def jwks_client():
    client = MagicMock()
    client.get_signing_key_from_jwt.return_value.key = "public-key"
    with patch("safe_record.auth.tokens.get_jwks_client", return_value=client):
        yield client


class TestExtractRoles:
    def test_role_claim_and_app_metadata(self):
        payload = {"role": "authenticated", "app_metadata": {"roles": ["itil", "authenticated"]}}

        assert extract_roles(payload) == ["authenticated", "itil"]

    def test_single_role_string(self):
        assert extract_roles({"app_metadata": {"roles": "itil"}}) == ["itil"]

    def test_no_roles(self):
        assert extract_roles({}) == []


class TestVerifyAccessToken:
    """Tests for verify_access_token"""

    def test_valid_token(self, jwks_client):
        payload = {
            "sub": USER_ID,
            "role": "authenticated",
            "app_metadata": {"roles": ["itil"]},
        }

        with patch("safe_record.auth.tokens.decode", return_value=payload) as mock_decode:
            claims = verify_access_token("header.payload.signature")

        assert claims.user_id == USER_ID
        assert claims.access_token == "header.payload.signature"
        assert claims.roles == ["authenticated", "itil"]

        _, kwargs = mock_decode.call_args
        assert kwargs["algorithms"] == ["ES256"]
        assert kwargs["audience"] == "authenticated"
        assert kwargs["issuer"] == "http://localhost:54321/auth/v1"

    def test_missing_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token("")

        assert exc_info.value.error_code == "unauthorized"

    @pytest.mark.parametrize("error,code", [
        (ExpiredSignatureError("expired"), "token_expired"),
        (InvalidAudienceError("bad audience"), "invalid_token"),
    ])
    def test_decode_errors(self, jwks_client, error, code):
        with patch("safe_record.auth.tokens.decode", side_effect=error):
            with pytest.raises(AuthenticationError) as exc_info:
                verify_access_token("header.payload.signature")

        assert exc_info.value.error_code == code

    def test_jwks_error(self, jwks_client):
        jwks_client.get_signing_key_from_jwt.side_effect = PyJWKClientError("no keys")

        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token("header.payload.signature")

        assert exc_info.value.error_code == "jwks_error"

    def test_missing_sub_claim(self, jwks_client):
        with patch("safe_record.auth.tokens.decode", return_value={"role": "authenticated"}):
            with pytest.raises(AuthenticationError, match="missing user ID"):
                verify_access_token("header.payload.signature")
