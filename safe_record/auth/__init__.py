"""Access token verification for capability evaluation and RLS clients."""

from .tokens import TokenClaims, verify_access_token

__all__ = ["TokenClaims", "verify_access_token"]
