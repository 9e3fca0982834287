"""
Supabase client access for the Supabase record store.

Includes:
- RLS-enforcing client creation from a user's access token
- Service role client creation for trusted system code
"""

from .client import get_service_role_client, get_supabase_client

__all__ = ["get_service_role_client", "get_supabase_client"]
