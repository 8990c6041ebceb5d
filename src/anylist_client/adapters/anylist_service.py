"""AnyList service interface consumed by the client facade."""

from typing import Protocol


class AnyListApiError(RuntimeError):
    """Raised by a Service when it rejects or cannot complete a call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AnyListService(Protocol):
    """Interface for AnyList service interactions.

    Entity-returning calls produce the Service's raw payload dicts. Session
    accessors are local and synchronous.
    """

    def export_tokens(self) -> dict[str, object]:
        """Return the current session tokens."""

    def user_id(self) -> str:
        """Return the authenticated user id."""

    def is_premium_user(self) -> bool:
        """Return whether the user has a premium subscription."""

    def client_identifier(self) -> str:
        """Return the per-session client identifier."""

    async def close(self) -> None:
        """Release the service's connections."""

    async def get_lists(self) -> list[dict[str, object]]:
        """Return every shopping list with its items."""

    async def get_list_by_id(self, list_id: str) -> dict[str, object]:
        """Return a shopping list by id."""

    async def get_list_by_name(self, name: str) -> dict[str, object]:
        """Return the first shopping list with the given name."""

    async def create_list(self, name: str) -> dict[str, object]:
        """Create an empty shopping list and return it."""

    async def rename_list(self, list_id: str, new_name: str) -> None:
        """Rename a shopping list."""

    async def delete_list(self, list_id: str) -> None:
        """Delete a shopping list."""

    async def add_item(self, list_id: str, name: str) -> dict[str, object]:
        """Add an item to a list and return it."""

    async def add_item_with_details(  # noqa: PLR0913
        self,
        list_id: str,
        name: str,
        quantity: str | None,
        details: str | None,
        category: str | None,
    ) -> dict[str, object]:
        """Add an item with quantity, details and category and return it."""

    async def update_item(  # noqa: PLR0913
        self,
        list_id: str,
        item_id: str,
        name: str,
        quantity: str | None,
        details: str | None,
        category: str | None,
    ) -> None:
        """Replace the mutable fields of an item."""

    async def delete_item(self, list_id: str, item_id: str) -> None:
        """Delete an item from a list."""

    async def bulk_delete_items(self, list_id: str, item_ids: list[str]) -> None:
        """Delete several items from a list."""

    async def cross_off_item(self, list_id: str, item_id: str) -> None:
        """Mark an item checked."""

    async def uncheck_item(self, list_id: str, item_id: str) -> None:
        """Mark an item unchecked."""

    async def delete_all_crossed_off_items(self, list_id: str) -> None:
        """Delete every checked item from a list."""

    async def get_recipes(self) -> list[dict[str, object]]:
        """Return every recipe."""

    async def get_recipe_by_id(self, recipe_id: str) -> dict[str, object]:
        """Return a recipe by id."""

    async def get_recipe_by_name(self, name: str) -> dict[str, object]:
        """Return the first recipe with the given name."""

    async def save_recipe(self, payload: dict[str, object]) -> dict[str, object]:
        """Create a recipe, or rewrite it when the payload carries an id."""

    async def delete_recipe(self, recipe_id: str) -> None:
        """Delete a recipe."""

    async def add_recipe_to_list(
        self, recipe_id: str, list_id: str, scale_factor: float | None
    ) -> None:
        """Append a recipe's ingredients to a list."""

    async def upload_photo(self, data: bytes, filename: str) -> str:
        """Upload a photo and return its id."""

    async def get_category_groups(self, list_id: str) -> list[dict[str, object]]:
        """Return the category groups defined on a list."""

    async def create_category(
        self, list_id: str, category_group_id: str, name: str
    ) -> dict[str, object]:
        """Create a category in a group and return it."""

    async def rename_category(
        self, list_id: str, category_group_id: str, category_id: str, new_name: str
    ) -> None:
        """Rename a category."""

    async def delete_category(self, list_id: str, category_id: str) -> None:
        """Delete a category."""

    async def get_stores_for_list(self, list_id: str) -> list[dict[str, object]]:
        """Return the stores defined on a list."""

    async def create_store(self, list_id: str, name: str) -> dict[str, object]:
        """Create a store on a list and return it."""

    async def update_store(self, list_id: str, store_id: str, new_name: str) -> None:
        """Rename a store."""

    async def delete_store(self, list_id: str, store_id: str) -> None:
        """Delete a store."""

    async def get_store_filters_for_list(
        self, list_id: str
    ) -> list[dict[str, object]]:
        """Return the store filters defined on a list."""

    async def get_favourites(self) -> list[dict[str, object]]:
        """Return every favourite item across every favourites list."""

    async def get_favourites_lists(self) -> list[dict[str, object]]:
        """Return every favourites list."""

    async def get_favourites_for_list(self, shopping_list_id: str) -> dict[str, object]:
        """Return the favourites list tied to a shopping list."""

    async def add_favourite(
        self, name: str, category: str | None
    ) -> dict[str, object]:
        """Add a favourite to the default favourites list and return it."""

    async def add_favourite_to_list(
        self, list_id: str, name: str, category: str | None
    ) -> dict[str, object]:
        """Add a favourite to a favourites list and return it."""

    async def remove_favourite(self, list_id: str, item_id: str) -> None:
        """Remove a favourite from a favourites list."""

    async def add_favourite_to_shopping_list(
        self, favourite: dict[str, object], shopping_list_id: str
    ) -> dict[str, object]:
        """Add a favourite to a shopping list and return the new list item."""

    async def get_meal_plan_events(
        self, start_date: str, end_date: str
    ) -> list[dict[str, object]]:
        """Return meal plan events in an inclusive date range."""

    async def create_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        date: str,
        recipe_id: str | None,
        title: str | None,
        label_id: str | None,
    ) -> dict[str, object]:
        """Create a meal plan event and return it."""

    async def update_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        event_id: str,
        date: str,
        recipe_id: str | None,
        title: str | None,
        label_id: str | None,
    ) -> None:
        """Update a meal plan event."""

    async def delete_meal_plan_event(self, calendar_id: str, event_id: str) -> None:
        """Delete a meal plan event."""

    async def add_meal_plan_ingredients_to_list(
        self, list_id: str, start_date: str, end_date: str
    ) -> None:
        """Append the ingredients of every planned recipe in range to a list."""

    async def enable_icalendar(self) -> dict[str, object]:
        """Enable iCalendar sync and return its state."""

    async def disable_icalendar(self) -> None:
        """Disable iCalendar sync."""

    async def get_icalendar_url(self) -> str | None:
        """Return the iCalendar URL, or None when disabled."""

    async def get_recipe_collections(self) -> list[dict[str, object]]:
        """Return every recipe collection."""

    async def create_recipe_collection(self, name: str) -> dict[str, object]:
        """Create a recipe collection and return it."""

    async def delete_recipe_collection(self, collection_id: str) -> None:
        """Delete a recipe collection."""

    async def add_recipe_to_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        """Add a recipe to a collection."""

    async def remove_recipe_from_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        """Remove a recipe from a collection."""
