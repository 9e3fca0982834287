"""
Logging utilities for safe_record.

Provides standardized logger configuration following privacy rules.

CRITICAL PRIVACY RULES:
- NEVER log plaintext or ciphertext of two-way encrypted fields
- NEVER log journal entry text (free-form, may contain PII)
- NEVER log Supabase access tokens, API keys, or encryption keys

Acceptable logging:
- Lifecycle events (e.g., "Inserted record <id> into table 'incident'")
- Non-sensitive metadata (table names, field names, identifiers)
- Store misses and sanitized store error messages
"""

import logging
from typing import Optional

from safe_record.config import settings


def resolve_level(level: Optional[int] = None) -> int:
    """
    Resolve the effective logging level.

    Debug mode (SAFE_RECORD_DEBUG=true) always wins. Otherwise an explicit
    level is used, then LOG_LEVEL, then INFO.
    """
    if settings.DEBUG:
        return logging.DEBUG

    if level is not None:
        return level

    configured = logging.getLevelName(settings.LOG_LEVEL.upper())
    return configured if isinstance(configured, int) else logging.INFO


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to LOG_LEVEL, or DEBUG in
               debug mode)

    Returns:
        Configured logger instance

    Usage:
        >>> from safe_record.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Record inserted")
    """
    logger = logging.getLogger(name)

    logger.setLevel(resolve_level(level))

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
