"""Domain models for recipes and recipe collections."""

from dataclasses import dataclass, field

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class Ingredient:
    """An ingredient of a stored recipe."""

    name: str
    quantity: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class IngredientInput:
    """An ingredient supplied when creating or updating a recipe."""

    name: str
    quantity: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class Recipe:
    """A recipe snapshot. Times are in minutes."""

    id: str
    name: str
    ingredients: tuple[Ingredient, ...] = field(default_factory=tuple)
    preparation_steps: tuple[str, ...] = field(default_factory=tuple)
    note: str | None = None
    source_name: str | None = None
    source_url: str | None = None
    servings: str | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    rating: int | None = None
    nutritional_info: str | None = None
    photo_id: str | None = None


@dataclass(frozen=True)
class CreateRecipeOptions:
    """All recipe fields accepted by create and update operations.

    Optional fields left as ``None`` are absent: on update they clear the
    stored value. ``photo_id`` must come from ``upload_photo``.
    """

    name: str
    ingredients: tuple[IngredientInput, ...] = field(default_factory=tuple)
    preparation_steps: tuple[str, ...] = field(default_factory=tuple)
    note: str | None = None
    source_name: str | None = None
    source_url: str | None = None
    servings: str | None = None
    prep_time: int | None = None
    cook_time: int | None = None
    rating: int | None = None
    nutritional_info: str | None = None
    photo_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        object.__setattr__(self, "preparation_steps", tuple(self.preparation_steps))
        if self.rating is not None and not MIN_RATING <= self.rating <= MAX_RATING:
            raise ValueError(
                f"rating must be between {MIN_RATING} and {MAX_RATING}, "
                f"got {self.rating}"
            )
        for label, minutes in (
            ("prep_time", self.prep_time),
            ("cook_time", self.cook_time),
        ):
            if minutes is not None and minutes < 0:
                raise ValueError(f"{label} must be non-negative minutes")


@dataclass(frozen=True)
class RecipeCollection:
    """A named set of recipes, referenced by id."""

    id: str
    name: str
    recipe_ids: tuple[str, ...] = field(default_factory=tuple)
