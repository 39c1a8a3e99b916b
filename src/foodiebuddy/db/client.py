"""
FoodieBuddy - Supabase Client.

Low-level database access. All owned-ingredient queries go through here.
"""

import logging

from supabase import Client, create_client

from foodiebuddy.config import settings
from foodiebuddy.errors import StoreOperationFailed
from foodiebuddy.models.ingredients import (
    Collection,
    CollectionKind,
    IngredientMatch,
    OwnedIngredient,
    group_by_category,
)

logger = logging.getLogger(__name__)

# Singleton client instance
_client: Client | None = None


def get_client() -> Client:
    """
    Get the Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
        )

    return _client


# =============================================================================
# Owned Ingredient Store
# =============================================================================


class SupabaseCollectionStore:
    """
    CollectionStore backed by one Supabase table.

    Every query is scoped by user_id and in_fridge, so a user can only
    ever touch their own rows of the collection being edited.
    """

    def __init__(self, client: Client | None = None, table: str | None = None):
        self._client = client
        self._table = table

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    @property
    def table(self) -> str:
        if self._table is None:
            self._table = settings.owned_ingredients_table
        return self._table

    def _scoped(self, query, user_id: str, kind: CollectionKind):
        return query.eq("user_id", user_id).eq("in_fridge", kind.in_fridge)

    async def create(
        self, user_id: str, kind: CollectionKind, category: str, item: OwnedIngredient
    ) -> str:
        row = item.model_copy(update={"category": category}).to_row(user_id, kind)
        try:
            response = self.client.table(self.table).insert(row).execute()
        except Exception as e:
            raise StoreOperationFailed("create", f"Could not create '{item.displayed_name}': {e}") from e
        if not response.data:
            raise StoreOperationFailed("create", f"Insert of '{item.displayed_name}' returned no row")
        return str(response.data[0]["id"])

    async def delete(self, user_id: str, kind: CollectionKind, ingredient_id: str) -> None:
        try:
            query = self.client.table(self.table).delete().eq("id", ingredient_id)
            self._scoped(query, user_id, kind).execute()
        except Exception as e:
            raise StoreOperationFailed("delete", f"Could not delete {ingredient_id}: {e}") from e

    async def update_category_field(
        self, user_id: str, kind: CollectionKind, from_category: str, to_category: str
    ) -> int:
        try:
            query = self.client.table(self.table).update({"category": to_category})
            response = self._scoped(query, user_id, kind).eq("category", from_category).execute()
        except Exception as e:
            raise StoreOperationFailed(
                "update_category_field",
                f"Could not rename '{from_category}' to '{to_category}': {e}",
            ) from e
        return len(response.data or [])

    async def delete_category(self, user_id: str, kind: CollectionKind, category: str) -> int:
        try:
            query = self.client.table(self.table).delete()
            response = self._scoped(query, user_id, kind).eq("category", category).execute()
        except Exception as e:
            raise StoreOperationFailed("delete_category", f"Could not delete '{category}': {e}") from e
        return len(response.data or [])

    async def update_checked(
        self, user_id: str, kind: CollectionKind, ingredient_id: str, checked: bool
    ) -> None:
        try:
            query = self.client.table(self.table).update({"is_checked": checked}).eq("id", ingredient_id)
            self._scoped(query, user_id, kind).execute()
        except Exception as e:
            raise StoreOperationFailed("update_checked", f"Could not update {ingredient_id}: {e}") from e

    async def fetch_all(self, user_id: str, kind: CollectionKind) -> Collection:
        try:
            query = self.client.table(self.table).select("*")
            response = self._scoped(query, user_id, kind).execute()
        except Exception as e:
            raise StoreOperationFailed("fetch_all", f"Could not fetch {kind.value}: {e}") from e
        ingredients = [OwnedIngredient.from_row(row) for row in response.data or []]
        logger.debug(f"Fetched {len(ingredients)} {kind.value} ingredients for {user_id}")
        return group_by_category(ingredients)

    async def query_by_standard_name(
        self, user_id: str, standard_name: str
    ) -> list[IngredientMatch]:
        if not standard_name:
            return []
        try:
            response = (
                self.client.table(self.table)
                .select("in_fridge, category, displayed_name")
                .eq("user_id", user_id)
                .eq("standard_name", standard_name)
                .execute()
            )
        except Exception as e:
            raise StoreOperationFailed(
                "query_by_standard_name", f"Could not look up '{standard_name}': {e}"
            ) from e
        return [
            IngredientMatch(
                in_fridge=bool(row["in_fridge"]),
                category=row["category"],
                displayed_name=row["displayed_name"],
            )
            for row in response.data or []
        ]
