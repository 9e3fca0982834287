"""
Access token verification.

Verifies Supabase Auth access tokens so a caller's identity and roles can
drive capability evaluation (see RoleBasedCapabilities.for_claims) and so
secure handles can be backed by an RLS-enforcing client.

Uses Supabase's JWT Signing Keys system with ECC (P-256) public key verification.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jwt import PyJWKClient, decode
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError, PyJWKClientError

from safe_record.config import settings
from safe_record.errors import AuthenticationError

logger = logging.getLogger(__name__)

# Client for fetching and caching Supabase's public keys
_jwks_client: Optional[PyJWKClient] = None


@dataclass
class TokenClaims:
    """
    Verified identity extracted from an access token.

    Attributes:
        user_id: The user's UUID from the 'sub' claim
        roles: Role names from app_metadata.roles (plus the token 'role' claim)
        access_token: The raw token (for creating RLS clients)
    """
    user_id: str
    access_token: str
    roles: List[str] = field(default_factory=list)


def get_jwks_client() -> PyJWKClient:
    """
    Get or create the JWKS client instance.

    Returns:
        PyJWKClient: Configured JWKS client for Supabase

    Raises:
        AuthenticationError: If SUPABASE_URL is not configured
    """
    global _jwks_client

    if _jwks_client is None:
        jwks_url = settings.SUPABASE_JWKS_URL
        if not jwks_url:
            raise AuthenticationError(
                "SUPABASE_URL is not configured. "
                "Cannot construct JWKS URL for token verification.",
                error_code="jwks_error"
            )

        logger.info(f"Initializing JWKS client with URL: {jwks_url}")
        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
        )

    return _jwks_client


def extract_roles(payload: Dict[str, Any]) -> List[str]:
    """
    Collect role names from a decoded token payload.

    Roles come from app_metadata.roles (a list set by the project's auth
    hooks). The Postgres role in the 'role' claim ('authenticated') is
    included as a baseline role.
    """
    roles: List[str] = []

    app_metadata = payload.get("app_metadata") or {}
    declared = app_metadata.get("roles") or []
    if isinstance(declared, str):
        declared = [declared]

    for role in [payload.get("role"), *declared]:
        if isinstance(role, str) and role and role not in roles:
            roles.append(role)

    return roles


def verify_access_token(access_token: str) -> TokenClaims:
    """
    Verify a Supabase access token and extract the caller's claims.

    Args:
        access_token: Raw JWT (without the "Bearer " prefix)

    Returns:
        TokenClaims for the verified user

    Raises:
        AuthenticationError: If the token is missing, expired, or invalid
    """
    if not access_token:
        logger.warning("Missing access token")
        raise AuthenticationError("Missing access token")

    try:
        jwks_client = get_jwks_client()
        signing_key = jwks_client.get_signing_key_from_jwt(access_token)

        # Supabase tokens use an issuer that includes the /auth/v1 path
        issuer = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1"

        payload = decode(
            access_token,
            signing_key.key,
            algorithms=["ES256"],
            audience="authenticated",
            issuer=issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_aud": True,
                "verify_iss": True,
            }
        )

    except ExpiredSignatureError:
        logger.warning("Access token has expired")
        raise AuthenticationError("Access token has expired", error_code="token_expired")

    except PyJWKClientError as e:
        logger.error(f"JWKS client error: {str(e)}")
        raise AuthenticationError("Unable to verify token signature", error_code="jwks_error")

    except InvalidTokenError as e:
        logger.warning(f"Invalid token: {str(e)}")
        raise AuthenticationError("Invalid access token", error_code="invalid_token")

    user_id = payload.get("sub")
    if not user_id:
        logger.error("Token payload missing 'sub' claim")
        raise AuthenticationError("Invalid token: missing user ID", error_code="invalid_token")

    claims = TokenClaims(
        user_id=str(user_id),
        access_token=access_token,
        roles=extract_roles(payload),
    )
    logger.info(f"Token verified successfully for user_id={claims.user_id}")

    return claims
