"""
FoodieBuddy - Cross-Collection Matcher.

Read-only ownership checks used before adding ingredients:
- find_existing: is this ingredient anywhere in the fridge or groceries?
- exists_in_category: is it already in one category of one collection?

Duplicate policy is the same for both collections: only a same-category
match in the same collection blocks an addition. Matches elsewhere are
informational ("you already have tomatoes in your fridge").
"""

import logging

from foodiebuddy.db.adapter import CollectionStore
from foodiebuddy.ingredients.normalize import names_match, standardize_name
from foodiebuddy.models.ingredients import Collection, CollectionKind, MatchResult

logger = logging.getLogger(__name__)


def category_contains(collection: Collection, category: str, displayed_name: str) -> bool:
    """Whether `category` of an already-fetched collection holds an equivalent ingredient."""
    key = standardize_name(displayed_name)
    if not key:
        return False
    return any(
        names_match(ingredient.standard_name, key)
        for ingredient in collection.get(category, [])
    )


class CrossCollectionMatcher:
    """Ownership lookups for one user."""

    def __init__(self, store: CollectionStore, user_id: str):
        self.store = store
        self.user_id = user_id

    async def find_existing(self, standard_name: str) -> MatchResult:
        """
        Find every ingredient in either collection with this standard name.

        An ingredient may legitimately be in both the fridge and the
        grocery list; every match is returned. An empty key matches nothing.
        """
        if not standard_name:
            return MatchResult()
        matches = await self.store.query_by_standard_name(self.user_id, standard_name)
        logger.debug(f"find_existing({standard_name!r}): {len(matches)} match(es)")
        return MatchResult(exists=bool(matches), matches=matches)

    async def find_existing_by_name(self, displayed_name: str) -> MatchResult:
        """Same as find_existing, from a display name."""
        return await self.find_existing(standardize_name(displayed_name))

    async def exists_in_category(self, category: str, displayed_name: str, in_fridge: bool) -> bool:
        """Whether one category of one collection already holds an equivalent ingredient."""
        kind = CollectionKind.from_in_fridge(in_fridge)
        collection = await self.store.fetch_all(self.user_id, kind)
        return category_contains(collection, category, displayed_name)
