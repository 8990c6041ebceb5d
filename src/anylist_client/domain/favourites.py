"""Domain models for favourites (starter lists)."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FavouriteItem:
    """An entry on a favourites list. ``list_id`` is the favourites list id."""

    id: str
    list_id: str
    name: str
    quantity: str | None = None
    details: str | None = None
    category: str | None = None


@dataclass(frozen=True)
class FavouritesList:
    """A favourites list, optionally tied to a shopping list."""

    id: str
    name: str
    items: tuple[FavouriteItem, ...] = field(default_factory=tuple)
    shopping_list_id: str | None = None
