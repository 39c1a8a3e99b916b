"""
FoodieBuddy - Shopping Flows.

Flows built on top of the session, committer and matcher:
- ShoppingPlan: pick which ingredients of a recipe go on the grocery list
- send_to_groceries: copy fridge ingredients onto the grocery list
- set_checked: tick / untick a grocery list ingredient
"""

import asyncio
import logging
from dataclasses import dataclass, field

from foodiebuddy.db.adapter import CollectionStore
from foodiebuddy.errors import StoreOperationFailed
from foodiebuddy.ingredients.matcher import CrossCollectionMatcher, category_contains
from foodiebuddy.ingredients.session import Conflict, EditSession
from foodiebuddy.models.ingredients import (
    CollectionKind,
    IngredientMatch,
    OwnedIngredient,
    RecipeIngredient,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Shop a recipe
# =============================================================================


@dataclass
class ShoppingLine:
    """One recipe ingredient and what the user already owns of it."""

    ingredient: RecipeIngredient
    matches: list[IngredientMatch] = field(default_factory=list)
    selected: bool = True
    category: str | None = None

    @property
    def already_owned(self) -> bool:
        return bool(self.matches)

    def owned_message(self) -> str:
        """E.g. "You have: Tomatoes (Produce) in your fridge"."""
        if not self.matches:
            return ""
        parts = [
            f"{m.displayed_name} ({m.category}) in your {'fridge' if m.in_fridge else 'groceries'}"
            for m in self.matches
        ]
        return "You have: " + ", ".join(parts)


@dataclass
class ShoppingReport:
    """What stage_into did with each selected line."""

    staged: list[OwnedIngredient] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)
    uncategorized: list[str] = field(default_factory=list)


@dataclass
class ShoppingPlan:
    """
    Selection of recipe ingredients to put on the grocery list.

    Ingredients the user already owns start unselected. The user picks a
    grocery category for each selected line before staging.
    """

    lines: list[ShoppingLine] = field(default_factory=list)

    @classmethod
    async def build(
        cls, ingredients: list[RecipeIngredient], matcher: CrossCollectionMatcher
    ) -> "ShoppingPlan":
        results = await asyncio.gather(
            *(matcher.find_existing(i.standard_name) for i in ingredients)
        )
        lines = [
            ShoppingLine(ingredient=ingredient, matches=result.matches, selected=not result.exists)
            for ingredient, result in zip(ingredients, results)
        ]
        owned = sum(1 for line in lines if line.already_owned)
        logger.info(f"Shopping plan: {len(lines)} ingredient(s), {owned} already owned")
        return cls(lines=lines)

    def _line(self, displayed_name: str) -> ShoppingLine:
        for line in self.lines:
            if line.ingredient.displayed_name == displayed_name:
                return line
        raise KeyError(displayed_name)

    def select(self, displayed_name: str) -> None:
        self._line(displayed_name).selected = True

    def deselect(self, displayed_name: str) -> None:
        line = self._line(displayed_name)
        line.selected = False
        line.category = None

    def choose_category(self, displayed_name: str, category: str) -> None:
        """Choosing a category also selects the line."""
        line = self._line(displayed_name)
        line.category = category
        line.selected = True

    @property
    def selected_lines(self) -> list[ShoppingLine]:
        return [line for line in self.lines if line.selected]

    def stage_into(self, session: EditSession) -> ShoppingReport:
        """
        Stage every selected, categorized line into a grocery list session.

        Lines without a category are reported, not staged; refused
        additions (duplicates, unknown categories) are reported as conflicts.
        """
        if session.kind is not CollectionKind.GROCERIES:
            raise ValueError("Recipe ingredients can only be staged into the grocery list")

        report = ShoppingReport()
        for line in self.selected_lines:
            if not line.category:
                report.uncategorized.append(line.ingredient.displayed_name)
                continue
            result = session.stage_addition(line.category, line.ingredient.displayed_name)
            if result.ok:
                report.staged.append(result.ingredient)
            else:
                report.conflicts.append(result.conflict)
        return report


# =============================================================================
# Fridge -> groceries
# =============================================================================


@dataclass
class TransferResult:
    created: list[OwnedIngredient] = field(default_factory=list)
    skipped: list[OwnedIngredient] = field(default_factory=list)


async def send_to_groceries(
    store: CollectionStore, user_id: str, ingredients: list[OwnedIngredient]
) -> TransferResult:
    """
    Copy fridge ingredients onto the grocery list, same category.

    Ingredients already in that grocery category (or repeated in the
    request) are skipped. Raises StoreOperationFailed if any insert fails,
    after all inserts have completed.
    """
    groceries = await store.fetch_all(user_id, CollectionKind.GROCERIES)
    result = TransferResult()

    to_create: list[OwnedIngredient] = []
    for ingredient in ingredients:
        item = OwnedIngredient(
            displayed_name=ingredient.displayed_name,
            standard_name=ingredient.standard_name,
            category=ingredient.category,
        )
        if category_contains(groceries, item.category, item.displayed_name):
            result.skipped.append(ingredient)
            continue
        groceries.setdefault(item.category, []).append(item)
        to_create.append(item)

    outcomes = await asyncio.gather(
        *(store.create(user_id, CollectionKind.GROCERIES, item.category, item) for item in to_create),
        return_exceptions=True,
    )
    failures = []
    for item, outcome in zip(to_create, outcomes):
        if isinstance(outcome, Exception):
            failures.append(outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            item.id = outcome
            result.created.append(item)

    if failures:
        logger.error(f"send_to_groceries: {len(failures)} insert(s) failed")
        raise StoreOperationFailed("send_to_groceries", f"{len(failures)} ingredient(s) could not be added") from failures[0]

    logger.info(f"Sent {len(result.created)} ingredient(s) to groceries, skipped {len(result.skipped)}")
    return result


# =============================================================================
# Check toggling
# =============================================================================


async def set_checked(
    store: CollectionStore, user_id: str, ingredient: OwnedIngredient, checked: bool
) -> OwnedIngredient:
    """Tick or untick a persisted grocery list ingredient (not staged)."""
    if not ingredient.is_persisted:
        raise ValueError(f"'{ingredient.displayed_name}' is not saved yet")
    await store.update_checked(user_id, CollectionKind.GROCERIES, ingredient.id, checked)
    return ingredient.model_copy(update={"is_checked": checked})
