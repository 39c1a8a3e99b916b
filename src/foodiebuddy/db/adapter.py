"""
Collection Store Protocol.

Defines the interface the ingredient engine needs from its backing
store. The production implementation is SupabaseCollectionStore
(db/client.py); tests use an in-memory fake.

The store is a flat set of ingredient rows, each keyed by id and tagged
with a user, a collection (fridge or groceries) and a category string.
There is no separate category entity: a category exists while at least
one row carries it. No operation is atomic across several rows.

Every method raises StoreOperationFailed on failure.
"""

from typing import Protocol, runtime_checkable

from foodiebuddy.models.ingredients import (
    Collection,
    CollectionKind,
    IngredientMatch,
    OwnedIngredient,
)


@runtime_checkable
class CollectionStore(Protocol):
    """Async CRUD over a user's owned ingredients."""

    async def create(
        self, user_id: str, kind: CollectionKind, category: str, item: OwnedIngredient
    ) -> str:
        """Insert `item` under `category`; return the new id."""
        ...

    async def delete(self, user_id: str, kind: CollectionKind, ingredient_id: str) -> None:
        """Delete one ingredient. Deleting a missing id is not an error."""
        ...

    async def update_category_field(
        self, user_id: str, kind: CollectionKind, from_category: str, to_category: str
    ) -> int:
        """Retag every row of `from_category` as `to_category`; return rows touched."""
        ...

    async def delete_category(self, user_id: str, kind: CollectionKind, category: str) -> int:
        """Delete every row of `category`; return rows deleted (0 is fine)."""
        ...

    async def update_checked(
        self, user_id: str, kind: CollectionKind, ingredient_id: str, checked: bool
    ) -> None:
        """Set the checked flag of one ingredient."""
        ...

    async def fetch_all(self, user_id: str, kind: CollectionKind) -> Collection:
        """Fetch the whole collection, grouped by category."""
        ...

    async def query_by_standard_name(
        self, user_id: str, standard_name: str
    ) -> list[IngredientMatch]:
        """Every ingredient in either collection with this standard name."""
        ...
