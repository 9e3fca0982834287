"""
Supabase client factory.

Two kinds of clients back the Supabase record store:
- secure handles use a client that enforces Row Level Security (RLS) with
  the user's access token
- regular handles use a service-role client that bypasses RLS

CRITICAL SECURITY RULES:
1. Secure handles MUST use the user's JWT token, never the service role key
2. The RLS client MUST be created per user with that user's token
3. The service role client is for trusted system code only
"""

import logging

from supabase import Client, create_client

from safe_record.config import settings
from safe_record.errors import ConfigurationError

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific user.

    This client respects Row Level Security (RLS) policies because it uses
    the user's JWT access token from Supabase Auth.

    Args:
        access_token: The user's JWT access token from Supabase Auth
                      (see safe_record.auth.verify_access_token).

    Returns:
        An authenticated Supabase client that enforces RLS.

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_PUBLISHABLE_KEY is missing.

    Example:
        >>> claims = verify_access_token(token)
        >>> client = get_supabase_client(claims.access_token)
        >>> store = SupabaseRecordStore(catalog, get_service_role_client(), secure_client=client)
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_PUBLISHABLE_KEY:
        raise ConfigurationError(
            "SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY are required for an RLS client"
        )

    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # The token's 'sub' claim is what auth.uid() resolves to in RLS policies
    client.auth.set_session(access_token, access_token)

    logger.debug("Created authenticated Supabase client with user token (RLS enforced)")

    return client


def get_service_role_client() -> Client:
    """
    Create a Supabase client with service_role privileges.

    WARNING: This bypasses RLS. Only non-secure handles use it.

    Returns:
        A Supabase client with service_role privileges.

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_SECRET_KEY is missing.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SECRET_KEY:
        raise ConfigurationError(
            "SUPABASE_URL and SUPABASE_SECRET_KEY are required for a service role client"
        )

    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_SECRET_KEY
    )

    logger.debug("Created service role Supabase client (RLS bypassed)")

    return client
