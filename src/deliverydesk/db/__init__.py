"""Database clients and utilities."""

from .store import ChangeFeed, DataStore, SupabaseChangeFeed, SupabaseStore
from .supabase import get_async_supabase_client, get_supabase_client

__all__ = [
    "ChangeFeed",
    "DataStore",
    "SupabaseChangeFeed",
    "SupabaseStore",
    "get_supabase_client",
    "get_async_supabase_client",
]
