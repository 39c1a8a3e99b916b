"""
Tests for SupabaseCollectionStore against a mocked Supabase client.
"""

import asyncio
from unittest.mock import MagicMock, call

import pytest

from foodiebuddy.db.client import SupabaseCollectionStore
from foodiebuddy.errors import StoreOperationFailed
from foodiebuddy.models.ingredients import CollectionKind, OwnedIngredient

FRIDGE = CollectionKind.FRIDGE
GROCERIES = CollectionKind.GROCERIES


def _run(coro):
    return asyncio.run(coro)


@pytest.fixture
def supabase_store(mock_supabase):
    return SupabaseCollectionStore(client=mock_supabase, table="owned_ingredients")


@pytest.fixture
def mock_table(mock_supabase):
    return mock_supabase.table.return_value


class TestWrites:
    def test_create_inserts_row_and_returns_id(self, supabase_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"id": 42}])
        item = OwnedIngredient.from_display("Milk", "Dairy")

        new_id = _run(supabase_store.create("user-1", FRIDGE, "Dairy", item))

        assert new_id == "42"
        mock_table.insert.assert_called_once_with(
            {
                "user_id": "user-1",
                "in_fridge": True,
                "category": "Dairy",
                "displayed_name": "Milk",
                "standard_name": "milk",
                "is_checked": False,
            }
        )

    def test_create_uses_given_category(self, supabase_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"id": "a"}])
        item = OwnedIngredient.from_display("Milk", "Dairy")

        _run(supabase_store.create("user-1", GROCERIES, "Drinks", item))

        row = mock_table.insert.call_args.args[0]
        assert row["category"] == "Drinks"
        assert row["in_fridge"] is False

    def test_create_without_returned_row_fails(self, supabase_store, mock_table):
        item = OwnedIngredient.from_display("Milk", "Dairy")

        with pytest.raises(StoreOperationFailed) as exc_info:
            _run(supabase_store.create("user-1", FRIDGE, "Dairy", item))

        assert exc_info.value.operation == "create"

    def test_delete_is_scoped(self, supabase_store, mock_table):
        _run(supabase_store.delete("user-1", FRIDGE, "id-7"))

        mock_table.delete.assert_called_once_with()
        assert mock_table.eq.call_args_list == [
            call("id", "id-7"),
            call("user_id", "user-1"),
            call("in_fridge", True),
        ]

    def test_rename_updates_category_field(self, supabase_store, mock_table):
        mock_table.execute.return_value = MagicMock(data=[{"id": 1}, {"id": 2}])

        count = _run(supabase_store.update_category_field("user-1", GROCERIES, "Dairy", "Milk products"))

        assert count == 2
        mock_table.update.assert_called_once_with({"category": "Milk products"})
        assert call("category", "Dairy") in mock_table.eq.call_args_list
        assert call("in_fridge", False) in mock_table.eq.call_args_list

    def test_delete_category_on_empty_category(self, supabase_store, mock_table):
        assert _run(supabase_store.delete_category("user-1", FRIDGE, "Ghost")) == 0

    def test_update_checked(self, supabase_store, mock_table):
        _run(supabase_store.update_checked("user-1", GROCERIES, "id-3", True))

        mock_table.update.assert_called_once_with({"is_checked": True})
        assert call("id", "id-3") in mock_table.eq.call_args_list


class TestReads:
    def test_fetch_all_groups_by_category(self, supabase_store, mock_table):
        mock_table.execute.return_value = MagicMock(
            data=[
                {"id": 1, "displayed_name": "Milk", "standard_name": "milk", "category": "Dairy", "is_checked": False},
                {"id": 2, "displayed_name": "Tomates", "standard_name": "tomate", "category": "Produce", "is_checked": True},
                {"id": 3, "displayed_name": "Butter", "standard_name": "butter", "category": "Dairy", "is_checked": False},
            ]
        )

        collection = _run(supabase_store.fetch_all("user-1", GROCERIES))

        assert list(collection) == ["Dairy", "Produce"]
        assert [i.displayed_name for i in collection["Dairy"]] == ["Milk", "Butter"]
        assert collection["Produce"][0].id == "2"
        assert collection["Produce"][0].is_checked

    def test_query_by_standard_name_spans_both_collections(self, supabase_store, mock_table):
        mock_table.execute.return_value = MagicMock(
            data=[{"in_fridge": True, "category": "Produce", "displayed_name": "Tomates"}]
        )

        matches = _run(supabase_store.query_by_standard_name("user-1", "tomate"))

        assert matches[0].in_fridge
        assert matches[0].category == "Produce"
        assert mock_table.eq.call_args_list == [
            call("user_id", "user-1"),
            call("standard_name", "tomate"),
        ]

    def test_query_with_empty_key_skips_database(self, supabase_store, mock_supabase):
        assert _run(supabase_store.query_by_standard_name("user-1", "")) == []
        mock_supabase.table.assert_not_called()


class TestErrors:
    @pytest.mark.parametrize(
        "operation,args",
        [
            ("delete", ("user-1", FRIDGE, "id-1")),
            ("update_category_field", ("user-1", FRIDGE, "A", "B")),
            ("delete_category", ("user-1", FRIDGE, "A")),
            ("update_checked", ("user-1", GROCERIES, "id-1", True)),
            ("fetch_all", ("user-1", FRIDGE)),
            ("query_by_standard_name", ("user-1", "tomate")),
        ],
    )
    def test_client_errors_wrapped(self, supabase_store, mock_table, operation, args):
        mock_table.execute.side_effect = RuntimeError("connection reset")

        with pytest.raises(StoreOperationFailed) as exc_info:
            _run(getattr(supabase_store, operation)(*args))

        assert exc_info.value.operation == operation
        assert isinstance(exc_info.value.__cause__, RuntimeError)
