"""
FoodieBuddy - Edit Session.

Staging area for one edit episode on one collection. Every mutator is
synchronous and in-memory; nothing reaches the store until the session
is handed to the committer.

LIFECYCLE:
- Created from a snapshot of the persisted collection when the user
  enters edit mode
- Filled by stage_* calls
- discard() on cancel, or after a successful commit (with the refreshed
  collection as the new snapshot)

Invariant: a category name is in at most one of
{live persisted, renamed source, deleted, new}.

Mutators never raise for user mistakes. They return a StageResult; a
result with a conflict means the call was a no-op.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from foodiebuddy.ingredients.normalize import names_match, standardize_name
from foodiebuddy.models.ingredients import (
    Collection,
    CollectionKind,
    OwnedIngredient,
    copy_collection,
)

logger = logging.getLogger(__name__)


class ConflictKind(str, Enum):
    """Why a staging call was refused."""

    DUPLICATE_CATEGORY_NAME = "duplicate_category_name"
    DUPLICATE_INGREDIENT = "duplicate_ingredient"
    UNKNOWN_CATEGORY = "unknown_category"
    UNKNOWN_INGREDIENT = "unknown_ingredient"
    BLANK_NAME = "blank_name"
    CATEGORY_PENDING_DELETE = "category_pending_delete"
    RENAME_TARGET_DELETE = "rename_target_delete"


_CONFLICT_MESSAGES = {
    ConflictKind.DUPLICATE_CATEGORY_NAME: "Category '{category}' already exists",
    ConflictKind.DUPLICATE_INGREDIENT: "'{name}' is already in '{category}'",
    ConflictKind.UNKNOWN_CATEGORY: "Category '{category}' does not exist",
    ConflictKind.UNKNOWN_INGREDIENT: "'{name}' is not in '{category}'",
    ConflictKind.BLANK_NAME: "Name cannot be blank",
    ConflictKind.CATEGORY_PENDING_DELETE: "Category '{category}' is being deleted",
    ConflictKind.RENAME_TARGET_DELETE: "Another category is being renamed to '{category}'",
}


@dataclass(frozen=True)
class Conflict:
    """A refused staging call, shown to the user as a warning."""

    kind: ConflictKind
    category: str = ""
    name: str = ""

    @property
    def message(self) -> str:
        return _CONFLICT_MESSAGES[self.kind].format(category=self.category, name=self.name)


@dataclass
class StageResult:
    """Outcome of a staging call."""

    ingredient: OwnedIngredient | None = None
    conflict: Conflict | None = None

    @property
    def ok(self) -> bool:
        return self.conflict is None


def _refuse(kind: ConflictKind, category: str = "", name: str = "") -> StageResult:
    conflict = Conflict(kind=kind, category=category, name=name)
    logger.debug(f"Staging refused: {conflict.message}")
    return StageResult(conflict=conflict)


@dataclass
class EditSession:
    """
    Pending edits against one collection.

    Staged additions under a persisted category are keyed by that
    category's persisted name, even if it is being renamed: the
    committer adds items before renaming, so they move with the rest.
    """

    kind: CollectionKind
    snapshot: Collection = field(default_factory=dict)

    # persisted category -> ingredients to add (id empty)
    new_items_by_category: dict[str, list[OwnedIngredient]] = field(default_factory=dict)

    # persisted category -> ids to delete
    removed_item_ids_by_category: dict[str, list[str]] = field(default_factory=dict)

    # old persisted name -> new name
    renamed_categories: dict[str, str] = field(default_factory=dict)

    # brand-new category -> ingredients to add under it
    new_categories: dict[str, list[OwnedIngredient]] = field(default_factory=dict)

    deleted_categories: set[str] = field(default_factory=set)

    # names in use once the session is applied
    reserved_category_names: set[str] = field(init=False, default_factory=set)

    def __post_init__(self):
        self.snapshot = copy_collection(self.snapshot)
        self._recompute_reserved()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def in_fridge(self) -> bool:
        return self.kind.in_fridge

    @property
    def is_empty(self) -> bool:
        return not (
            any(self.new_items_by_category.values())
            or any(self.removed_item_ids_by_category.values())
            or self.renamed_categories
            or self.new_categories
            or self.deleted_categories
        )

    def summary(self) -> dict[str, int]:
        """Counts of staged changes, for logging."""
        return {
            "removed_items": sum(len(ids) for ids in self.removed_item_ids_by_category.values()),
            "new_items": sum(len(items) for items in self.new_items_by_category.values())
            + sum(len(items) for items in self.new_categories.values()),
            "renamed_categories": len(self.renamed_categories),
            "new_categories": len(self.new_categories),
            "deleted_categories": len(self.deleted_categories),
        }

    def _is_live(self, category: str) -> bool:
        """Persisted and not staged for deletion."""
        return category in self.snapshot and category not in self.deleted_categories

    def _rename_sources(self, target: str) -> list[str]:
        return [old for old, new in self.renamed_categories.items() if new == target]

    def _resolve_category(self, category: str) -> str | None:
        """
        Map a category name as the user sees it to the key staging uses.

        Persisted categories are addressed by their persisted name; a
        pure rename target resolves back to its (last) source.
        """
        if category in self.new_categories or self._is_live(category):
            return category
        sources = self._rename_sources(category)
        if sources:
            return sources[-1]
        return None

    def _final_category(self, category: str) -> str:
        """The name `category` will carry once the session is applied."""
        resolved = self._resolve_category(category) or category
        if resolved in self.new_categories:
            return resolved
        return self.renamed_categories.get(resolved, resolved)

    def _staged_lists(self):
        yield from self.new_items_by_category.items()
        yield from self.new_categories.items()

    def contains_ingredient(self, category: str, displayed_name: str) -> bool:
        """
        Whether an ingredient with the same standard name will be in
        `category` once the session is applied: persisted items not staged
        for removal, staged additions, and everything merged in by renames.
        Call this before stage_addition to warn early.
        """
        key = standardize_name(displayed_name)
        if not key:
            return False
        merged = self.preview().get(self._final_category(category), [])
        return any(names_match(ingredient.standard_name, key) for ingredient in merged)

    # =========================================================================
    # Ingredient staging
    # =========================================================================

    def stage_addition(self, category: str, displayed_name: str) -> StageResult:
        """Stage a new ingredient under an existing or staged category."""
        displayed_name = displayed_name.strip()
        if not displayed_name:
            return _refuse(ConflictKind.BLANK_NAME, category)

        target = self._resolve_category(category)
        if target is None:
            if category in self.deleted_categories:
                return _refuse(ConflictKind.CATEGORY_PENDING_DELETE, category)
            return _refuse(ConflictKind.UNKNOWN_CATEGORY, category)

        if self.contains_ingredient(target, displayed_name):
            return _refuse(ConflictKind.DUPLICATE_INGREDIENT, category, displayed_name)

        ingredient = OwnedIngredient.from_display(displayed_name, target)
        if target in self.new_categories:
            self.new_categories[target].append(ingredient)
        else:
            self.new_items_by_category.setdefault(target, []).append(ingredient)
        return StageResult(ingredient=ingredient)

    def stage_removal(self, ingredient: OwnedIngredient) -> StageResult:
        """
        Stage an ingredient for removal.

        Persisted ingredients are found by id and queued for deletion under
        the category they are stored in, so an ingredient taken from
        preview() (tagged with its rename target) works too. Staged-only
        ones are dropped from their addition list and never reach the store.
        """
        category = ingredient.category

        if ingredient.is_persisted:
            owner = next(
                (c for c, items in self.snapshot.items() if any(i.id == ingredient.id for i in items)),
                None,
            )
            if owner is None:
                if self._resolve_category(category) is None:
                    return _refuse(ConflictKind.UNKNOWN_CATEGORY, category)
                return _refuse(ConflictKind.UNKNOWN_INGREDIENT, category, ingredient.displayed_name)
            if owner in self.deleted_categories:
                return _refuse(ConflictKind.UNKNOWN_CATEGORY, owner)
            removed = self.removed_item_ids_by_category.setdefault(owner, [])
            if ingredient.id not in removed:
                removed.append(ingredient.id)
            return StageResult(ingredient=ingredient)

        for key, staged in self._staged_lists():
            visible = (key, self._final_category(key))
            for index, candidate in enumerate(staged):
                if candidate is ingredient or (
                    candidate.displayed_name == ingredient.displayed_name and category in visible
                ):
                    return StageResult(ingredient=staged.pop(index))
        return _refuse(ConflictKind.UNKNOWN_INGREDIENT, category, ingredient.displayed_name)

    # =========================================================================
    # Category staging
    # =========================================================================

    def stage_category_create(self, name: str) -> StageResult:
        """Stage a brand-new, still empty category."""
        name = name.strip()
        if not name:
            return _refuse(ConflictKind.BLANK_NAME)
        if name in self.deleted_categories:
            return _refuse(ConflictKind.CATEGORY_PENDING_DELETE, name)
        # A renamed-away category keeps its name until the commit
        if name in self.reserved_category_names or name in self.snapshot:
            return _refuse(ConflictKind.DUPLICATE_CATEGORY_NAME, name)

        self.new_categories[name] = []
        self.reserved_category_names.add(name)
        return StageResult()

    def stage_category_delete(self, name: str) -> StageResult:
        """
        Stage a category for deletion, with all its ingredients.

        Staged additions under it and any pending rename of it are dropped.
        """
        sources = self._rename_sources(name)
        is_own_category = name in self.new_categories or self._is_live(name)

        if sources and is_own_category:
            # Deleting would also delete what is being merged into it
            return _refuse(ConflictKind.RENAME_TARGET_DELETE, name)

        if sources:
            # The user sees the new name of a renamed category
            for source in sources:
                self._delete_persisted(source)
        elif name in self.new_categories:
            del self.new_categories[name]
        elif self._is_live(name):
            self._delete_persisted(name)
        else:
            return _refuse(ConflictKind.UNKNOWN_CATEGORY, name)

        self._recompute_reserved()
        return StageResult()

    def _delete_persisted(self, name: str) -> None:
        self.deleted_categories.add(name)
        self.new_items_by_category.pop(name, None)
        self.renamed_categories.pop(name, None)

    def stage_category_rename(self, old_name: str, new_name: str) -> StageResult:
        """
        Stage a category rename.

        Renaming onto another live category merges the two; renaming the
        merged category later moves everything merged into it. Renaming
        twice keeps the last target; renaming back cancels the rename.
        """
        new_name = new_name.strip()
        if not new_name:
            return _refuse(ConflictKind.BLANK_NAME, old_name)
        if new_name in self.deleted_categories:
            return _refuse(ConflictKind.CATEGORY_PENDING_DELETE, new_name)
        if new_name == old_name:
            if self.renamed_categories.pop(old_name, None) is not None:
                self._recompute_reserved()
            return StageResult()

        sources = self._rename_sources(old_name)
        if old_name in self.new_categories:
            self._move_sources(sources, new_name)
            self._rekey_new_category(old_name, new_name)
        elif self._is_live(old_name):
            if old_name not in self.renamed_categories:
                self._move_sources(sources, new_name)
            self.renamed_categories[old_name] = new_name
        elif sources:
            self._move_sources(sources, new_name)
        else:
            return _refuse(ConflictKind.UNKNOWN_CATEGORY, old_name)

        self._recompute_reserved()
        return StageResult()

    def _move_sources(self, sources: list[str], new_name: str) -> None:
        for source in sources:
            if new_name == source:
                del self.renamed_categories[source]
            else:
                self.renamed_categories[source] = new_name

    def _rekey_new_category(self, old_name: str, new_name: str) -> None:
        """Rename a staged-only category: nothing persisted, just move its items."""
        # Retagged in place: handles returned by stage_addition stay valid
        items = self.new_categories.pop(old_name)
        for item in items:
            item.category = new_name
        if new_name in self.new_categories:
            self.new_categories[new_name].extend(items)
        elif self._is_live(new_name):
            self.new_items_by_category.setdefault(new_name, []).extend(items)
        else:
            self.new_categories[new_name] = items

    def _recompute_reserved(self) -> None:
        live = {c for c in self.snapshot if self._is_live(c) and c not in self.renamed_categories}
        self.reserved_category_names = live | set(self.renamed_categories.values()) | set(self.new_categories)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def discard(self, snapshot: Collection | None = None) -> None:
        """
        Drop every staged change.

        With a snapshot (e.g. the collection refetched after a commit), it
        becomes the new persisted state.
        """
        if snapshot is not None:
            self.snapshot = copy_collection(snapshot)
        self.new_items_by_category.clear()
        self.removed_item_ids_by_category.clear()
        self.renamed_categories.clear()
        self.new_categories.clear()
        self.deleted_categories.clear()
        self._recompute_reserved()

    def preview(self, include_empty: bool = True) -> Collection:
        """
        The collection as it will look once committed (pure, no I/O).

        Staged-only empty categories are kept when `include_empty` is set,
        so an edit screen can show them; the store drops them on commit.
        """
        result: Collection = {}

        for category, items in self.snapshot.items():
            if category in self.deleted_categories:
                continue
            removed = set(self.removed_item_ids_by_category.get(category, []))
            kept = [i.model_copy() for i in items if i.id not in removed]
            kept.extend(i.model_copy() for i in self.new_items_by_category.get(category, []))
            target = self.renamed_categories.get(category, category)
            for ingredient in kept:
                ingredient.category = target
            result.setdefault(target, []).extend(kept)

        for category, items in self.new_categories.items():
            result.setdefault(category, []).extend(i.model_copy() for i in items)

        if not include_empty:
            result = {c: items for c, items in result.items() if items}
        return result
