"""Shared helpers: logging configuration, identifiers and type constants."""
