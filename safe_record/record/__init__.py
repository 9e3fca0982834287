"""
Record facade and construction resolver.

Record is the only object callers need for single-record access; the
resolver functions back its from_handle/new_for_table/fetch_for_table
constructors.
"""

from .facade import Record
from .resolver import ResolvedHandle, resolve_fetch, resolve_from_handle, resolve_new
from .state import RecordState

__all__ = [
    "Record",
    "RecordState",
    "ResolvedHandle",
    "resolve_fetch",
    "resolve_from_handle",
    "resolve_new",
]
