"""
Record stores.

The record facade consumes stores through the RecordStore / RecordHandle
contracts. Two implementations are provided:
- InMemoryRecordStore: dict backed, 32-char hex sys ids
- SupabaseRecordStore: PostgREST backed, uuid identifiers
"""

from .base import BaseRecordStore, RecordHandle, RecordStore
from .codec import FieldCodec
from .handle import TableRecordHandle
from .memory import InMemoryRecordStore
from .supabase_store import SupabaseRecordStore
from .validity import is_valid_handle

__all__ = [
    "BaseRecordStore",
    "FieldCodec",
    "InMemoryRecordStore",
    "RecordHandle",
    "RecordStore",
    "SupabaseRecordStore",
    "TableRecordHandle",
    "is_valid_handle",
]
