"""
FoodieBuddy - Ingredient Models.

These models map to the owned_ingredients table (see
migrations/001_owned_ingredients.sql). One table holds both collections;
`in_fridge` tells them apart.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from foodiebuddy.ingredients.normalize import standardize_name


class CollectionKind(str, Enum):
    """The two personal ingredient collections of a user."""

    FRIDGE = "fridge"
    GROCERIES = "groceries"

    @property
    def in_fridge(self) -> bool:
        return self is CollectionKind.FRIDGE

    @classmethod
    def from_in_fridge(cls, in_fridge: bool) -> "CollectionKind":
        return cls.FRIDGE if in_fridge else cls.GROCERIES


class OwnedIngredient(BaseModel):
    """
    Ingredient in a user's fridge or grocery list.

    `id` stays empty until the row is persisted. Before that, an
    ingredient is identified by (displayed_name, category).
    `is_checked` only matters for the grocery list.
    """

    id: str = ""
    displayed_name: str
    standard_name: str = ""
    category: str
    is_checked: bool = False

    @model_validator(mode="after")
    def derive_standard_name(self) -> "OwnedIngredient":
        if not self.standard_name:
            self.standard_name = standardize_name(self.displayed_name)
        return self

    @classmethod
    def from_display(cls, displayed_name: str, category: str) -> "OwnedIngredient":
        """Build an unpersisted ingredient, deriving its standard name."""
        displayed_name = displayed_name.rstrip()
        return cls(
            displayed_name=displayed_name,
            standard_name=standardize_name(displayed_name),
            category=category,
        )

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)

    def to_row(self, user_id: str, kind: CollectionKind) -> dict:
        """Row payload for an insert (no id, the store assigns it)."""
        return {
            "user_id": user_id,
            "in_fridge": kind.in_fridge,
            "category": self.category,
            "displayed_name": self.displayed_name,
            "standard_name": self.standard_name,
            "is_checked": self.is_checked,
        }

    @classmethod
    def from_row(cls, row: dict) -> "OwnedIngredient":
        return cls(
            id=str(row["id"]),
            displayed_name=row["displayed_name"],
            standard_name=row.get("standard_name") or "",
            category=row["category"],
            is_checked=bool(row.get("is_checked", False)),
        )


class RecipeIngredient(BaseModel):
    """Ingredient line of a recipe (quantity is free text)."""

    displayed_name: str
    standard_name: str = ""
    quantity: str = ""

    @model_validator(mode="after")
    def derive_standard_name(self) -> "RecipeIngredient":
        if not self.standard_name:
            self.standard_name = standardize_name(self.displayed_name)
        return self

    @classmethod
    def from_display(cls, displayed_name: str, quantity: str = "") -> "RecipeIngredient":
        displayed_name = displayed_name.rstrip()
        return cls(
            displayed_name=displayed_name,
            standard_name=standardize_name(displayed_name),
            quantity=quantity,
        )

    def to_owned(self, category: str) -> OwnedIngredient:
        return OwnedIngredient(
            displayed_name=self.displayed_name,
            standard_name=self.standard_name,
            category=category,
        )


class IngredientMatch(BaseModel):
    """Where an equivalent ingredient already lives."""

    in_fridge: bool
    category: str
    displayed_name: str


class MatchResult(BaseModel):
    """Result of a cross-collection lookup."""

    exists: bool = False
    matches: list[IngredientMatch] = Field(default_factory=list)


# =============================================================================
# Collection helpers
#
# A collection is a plain dict: category name -> list of OwnedIngredient.
# =============================================================================

Collection = dict[str, list[OwnedIngredient]]


def group_by_category(ingredients: list[OwnedIngredient]) -> Collection:
    """Group a flat list of ingredients into a collection, keeping order."""
    collection: Collection = {}
    for ingredient in ingredients:
        collection.setdefault(ingredient.category, []).append(ingredient)
    return collection


def sorted_collection(collection: Collection) -> Collection:
    """
    Presentation order: categories sorted, ingredients sorted by name.

    Empty categories are dropped (a category only exists through its items).
    """
    return {
        category: sorted(collection[category], key=lambda i: i.displayed_name)
        for category in sorted(collection)
        if collection[category]
    }


def copy_collection(collection: Collection) -> Collection:
    return {
        category: [ingredient.model_copy() for ingredient in items]
        for category, items in collection.items()
    }
