"""Domain models for shopping lists and their organization."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ListItem:
    """An item on a shopping list.

    ``details`` is the free-text note attached to the item. It is also
    available as ``note``.
    """

    id: str
    list_id: str
    name: str
    details: str = ""
    is_checked: bool = False
    quantity: str | None = None
    category: str | None = None
    user_id: str | None = None
    product_upc: str | None = None

    @property
    def note(self) -> str:
        return self.details


@dataclass(frozen=True)
class List:
    """A shopping list snapshot with its items."""

    id: str
    name: str
    items: tuple[ListItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Category:
    """A category for organizing list items."""

    id: str
    name: str
    sort_index: int = 0
    icon: str | None = None


@dataclass(frozen=True)
class CategoryGroup:
    """A group of categories defined on a list."""

    id: str
    name: str
    categories: tuple[Category, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Store:
    """A store where list items can be bought."""

    id: str
    name: str
    sort_index: int = 0


@dataclass(frozen=True)
class StoreFilter:
    """A named selection of stores on a list."""

    id: str
    name: str
    store_ids: tuple[str, ...] = field(default_factory=tuple)
