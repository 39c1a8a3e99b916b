"""
FoodieBuddy - Reconciliation Committer.

Turns an EditSession into ordered store calls:

1. delete_items       - removed ingredients
2. add_items          - new ingredients, including those of new categories
3. rename_categories  - retag (or merge) categories
4. delete_categories  - drop whatever is left in deleted categories
5. refresh            - refetch the collection as the new source of truth

Deleting before adding avoids transient duplicate names; renaming after
adding moves new items together with old ones; deleting categories last
means it usually only removes what is already empty.

Calls inside a stage run concurrently and all complete before the stage
is judged. A failed stage stops the pipeline. Nothing is rolled back:
the store has no cross-document transactions.
"""

import asyncio
import logging
from collections.abc import Awaitable
from enum import Enum
from itertools import chain

from foodiebuddy.db.adapter import CollectionStore
from foodiebuddy.errors import PartialCommitError
from foodiebuddy.ingredients.session import EditSession
from foodiebuddy.models.ingredients import Collection, CollectionKind

logger = logging.getLogger(__name__)


class CommitStage(str, Enum):
    DELETE_ITEMS = "delete_items"
    ADD_ITEMS = "add_items"
    RENAME_CATEGORIES = "rename_categories"
    DELETE_CATEGORIES = "delete_categories"
    REFRESH = "refresh"


class _StageFailed(Exception):
    def __init__(self, errors: list[BaseException]):
        self.errors = errors
        super().__init__(f"{len(errors)} store call(s) failed")


async def _run_batch(calls: list[Awaitable]) -> int:
    """Run calls concurrently, wait for all, raise _StageFailed if any failed."""
    if not calls:
        return 0
    results = await asyncio.gather(*calls, return_exceptions=True)
    errors = []
    for result in results:
        if isinstance(result, Exception):
            errors.append(result)
        elif isinstance(result, BaseException):
            # Cancellation is not a store failure
            raise result
    if errors:
        raise _StageFailed(errors)
    return len(results)


def _temporary_name(name: str, taken: set[str]) -> str:
    temp = f"__renaming__{name}"
    while temp in taken:
        temp += "_"
    return temp


def plan_renames(renames: dict[str, str]) -> list[list[tuple[str, str]]]:
    """
    Order renames into batches that can each run concurrently.

    A rename X -> Y waits until any pending rename Y -> Z has run, so
    chains keep their meaning (A -> B, B -> C moves A's items to B and
    B's items to C). Cycles (A <-> B) are broken through a temporary name.

    Examples:
        {"A": "B", "B": "C"} -> [[("B", "C")], [("A", "B")]]
        {"A": "B", "B": "A"} -> [[("A", "__renaming__A")], [("B", "A")],
                                 [("__renaming__A", "B")]]
    """
    remaining = {old: new for old, new in renames.items() if old != new}
    taken = set(renames) | set(renames.values())
    batches: list[list[tuple[str, str]]] = []

    while remaining:
        ready = sorted((old, new) for old, new in remaining.items() if new not in remaining)
        if ready:
            batches.append(ready)
            for old, _ in ready:
                del remaining[old]
            continue

        # Every pending target is itself pending: a cycle
        old = min(remaining)
        temp = _temporary_name(old, taken)
        taken.add(temp)
        batches.append([(old, temp)])
        remaining[temp] = remaining.pop(old)

    return batches


class ReconciliationCommitter:
    """
    Commits edit sessions for one user.

    Usage:
        committer = ReconciliationCommitter(store, user_id)
        fridge = await committer.commit(session)
    """

    def __init__(self, store: CollectionStore, user_id: str):
        self.store = store
        self.user_id = user_id

    async def commit(self, session: EditSession) -> Collection:
        """
        Make the session durable and return the refreshed collection.

        On success the session is discarded onto the refreshed collection.
        On failure raises PartialCommitError(stage) with a best-effort
        refresh attached; the session is left as it was.
        """
        kind = session.kind
        logger.info(f"Committing {kind.value} session for {self.user_id}: {session.summary()}")

        stages = [
            (CommitStage.DELETE_ITEMS, self._delete_items),
            (CommitStage.ADD_ITEMS, self._add_items),
            (CommitStage.RENAME_CATEGORIES, self._rename_categories),
            (CommitStage.DELETE_CATEGORIES, self._delete_categories),
        ]
        completed: list[CommitStage] = []

        for stage, run_stage in stages:
            try:
                count = await run_stage(session)
            except _StageFailed as e:
                logger.error(f"Commit stage {stage.value} failed: {e.errors}")
                refreshed = await self._best_effort_refresh(kind)
                raise PartialCommitError(stage, completed, e.errors, refreshed) from e.errors[0]
            if count:
                logger.info(f"Stage {stage.value}: {count} call(s)")
            completed.append(stage)

        try:
            refreshed = await self.store.fetch_all(self.user_id, kind)
        except Exception as e:
            logger.error(f"Commit refresh failed: {e}")
            raise PartialCommitError(CommitStage.REFRESH, completed, [e], None) from e

        session.discard(refreshed)
        return refreshed

    async def _delete_items(self, session: EditSession) -> int:
        calls = [
            self.store.delete(self.user_id, session.kind, ingredient_id)
            for ids in session.removed_item_ids_by_category.values()
            for ingredient_id in ids
        ]
        return await _run_batch(calls)

    async def _add_items(self, session: EditSession) -> int:
        staged = chain(session.new_items_by_category.items(), session.new_categories.items())
        calls = [
            self.store.create(self.user_id, session.kind, category, item)
            for category, items in staged
            for item in items
        ]
        return await _run_batch(calls)

    async def _rename_categories(self, session: EditSession) -> int:
        count = 0
        for batch in plan_renames(session.renamed_categories):
            calls = [
                self.store.update_category_field(self.user_id, session.kind, old, new)
                for old, new in batch
            ]
            count += await _run_batch(calls)
        return count

    async def _delete_categories(self, session: EditSession) -> int:
        calls = [
            self.store.delete_category(self.user_id, session.kind, name)
            for name in sorted(session.deleted_categories)
        ]
        return await _run_batch(calls)

    async def _best_effort_refresh(self, kind: CollectionKind) -> Collection | None:
        try:
            return await self.store.fetch_all(self.user_id, kind)
        except Exception as e:
            logger.warning(f"Refresh after failed commit also failed: {e}")
            return None
