"""
Pytest configuration and fixtures for FoodieBuddy tests.
"""

import os
from unittest.mock import MagicMock

import pytest

# Set test environment before importing foodiebuddy modules
os.environ["FOODIEBUDDY_ENV"] = "development"
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-key-not-real")

from foodiebuddy.errors import StoreOperationFailed
from foodiebuddy.ingredients.normalize import standardize_name
from foodiebuddy.models.ingredients import (
    Collection,
    CollectionKind,
    IngredientMatch,
    OwnedIngredient,
    group_by_category,
)

USER_ID = "user-1"


# ---------------------------------------------------------------------------
# InMemoryCollectionStore: CollectionStore without a database
# ---------------------------------------------------------------------------


class InMemoryCollectionStore:
    """
    CollectionStore kept in a list of row dicts.

    Records every call in `calls` as (operation, *args) so tests can check
    ordering. Operations named in `fail_on` raise StoreOperationFailed.
    """

    def __init__(self):
        self.rows: list[dict] = []
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self._next_id = 0

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if operation in self.fail_on:
            raise StoreOperationFailed(operation)

    def _rows(self, user_id: str, kind: CollectionKind) -> list[dict]:
        return [r for r in self.rows if r["user_id"] == user_id and r["in_fridge"] == kind.in_fridge]

    def seed(
        self,
        kind: CollectionKind,
        category: str,
        displayed_name: str,
        checked: bool = False,
        user_id: str = USER_ID,
    ) -> OwnedIngredient:
        """Insert a row directly (not recorded as a call)."""
        self._next_id += 1
        row = OwnedIngredient(
            id=f"id-{self._next_id}",
            displayed_name=displayed_name,
            standard_name=standardize_name(displayed_name),
            category=category,
            is_checked=checked,
        ).to_row(user_id, kind)
        row["id"] = f"id-{self._next_id}"
        self.rows.append(row)
        return OwnedIngredient.from_row(row)

    def ops(self, operation: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == operation]

    async def create(self, user_id, kind, category, item) -> str:
        self._record("create", category, item.displayed_name)
        self._next_id += 1
        row = item.model_copy(update={"category": category}).to_row(user_id, kind)
        row["id"] = f"id-{self._next_id}"
        self.rows.append(row)
        return row["id"]

    async def delete(self, user_id, kind, ingredient_id) -> None:
        self._record("delete", ingredient_id)
        owned = {id(r) for r in self._rows(user_id, kind)}
        self.rows = [r for r in self.rows if not (r["id"] == ingredient_id and id(r) in owned)]

    async def update_category_field(self, user_id, kind, from_category, to_category) -> int:
        self._record("update_category_field", from_category, to_category)
        touched = [r for r in self._rows(user_id, kind) if r["category"] == from_category]
        for row in touched:
            row["category"] = to_category
        return len(touched)

    async def delete_category(self, user_id, kind, category) -> int:
        self._record("delete_category", category)
        doomed = [r for r in self._rows(user_id, kind) if r["category"] == category]
        self.rows = [r for r in self.rows if r not in doomed]
        return len(doomed)

    async def update_checked(self, user_id, kind, ingredient_id, checked) -> None:
        self._record("update_checked", ingredient_id, checked)
        for row in self._rows(user_id, kind):
            if row["id"] == ingredient_id:
                row["is_checked"] = checked

    async def fetch_all(self, user_id, kind) -> Collection:
        self._record("fetch_all", kind.value)
        return group_by_category([OwnedIngredient.from_row(r) for r in self._rows(user_id, kind)])

    async def query_by_standard_name(self, user_id, standard_name) -> list[IngredientMatch]:
        self._record("query_by_standard_name", standard_name)
        return [
            IngredientMatch(in_fridge=r["in_fridge"], category=r["category"], displayed_name=r["displayed_name"])
            for r in self.rows
            if r["user_id"] == user_id and standard_name and r["standard_name"] == standard_name
        ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    """Empty in-memory collection store."""
    return InMemoryCollectionStore()


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client
