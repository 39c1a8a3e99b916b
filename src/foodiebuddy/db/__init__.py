"""
FoodieBuddy - Database Client.

Provides Supabase access for the fridge and grocery list.
"""

from foodiebuddy.db.adapter import CollectionStore
from foodiebuddy.db.client import SupabaseCollectionStore, get_client

__all__ = [
    "CollectionStore",
    "SupabaseCollectionStore",
    "get_client",
]
