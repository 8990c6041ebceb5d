"""AnyList client facade."""

import logging
import math
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any

import httpx

from anylist_client.adapters.anylist_service import AnyListApiError, AnyListService
from anylist_client.adapters.httpx_anylist_service import HttpxAnyListService
from anylist_client.config import Settings
from anylist_client.domain.favourites import FavouriteItem, FavouritesList
from anylist_client.domain.lists import (
    Category,
    CategoryGroup,
    List,
    ListItem,
    Store,
    StoreFilter,
)
from anylist_client.domain.meal_plans import ICalendarInfo, MealPlanEvent
from anylist_client.domain.recipes import CreateRecipeOptions, Recipe, RecipeCollection
from anylist_client.domain.tokens import SavedTokens
from anylist_client.errors import AuthError, NotFoundError, ServiceError
from anylist_client.services.payloads import (
    category_from_payload,
    category_group_from_payload,
    favourite_item_from_payload,
    favourites_list_from_payload,
    icalendar_info_from_payload,
    list_from_payload,
    list_item_from_payload,
    meal_plan_event_from_payload,
    recipe_collection_from_payload,
    recipe_from_payload,
    recipe_payload,
    store_filter_from_payload,
    store_from_payload,
    tokens_from_payload,
    tokens_payload,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

_SERVICE_ERRORS = (AnyListApiError, httpx.HTTPError)
_MALFORMED_ERRORS = (KeyError, TypeError, ValueError)

FAVOURITE_NOT_FOUND = "Favourite item not found"


@dataclass
class AnyListClient:
    """Authenticated handle over an AnyList service session.

    Every operation calls the service once (twice for ``update_recipe`` and
    ``add_favourite_to_shopping_list``), converts the payload to domain
    records and reports service failures as ``ServiceError``. Copies of the
    handle share the same session.
    """

    service: AnyListService

    @classmethod
    async def login(
        cls,
        email: str,
        password: str,
        *,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "AnyListClient":
        """Log in with email and password."""
        try:
            service = await HttpxAnyListService.login(
                email, password, settings=settings, http_client=http_client
            )
        except _SERVICE_ERRORS as exc:
            _logger.warning("AnyList login failed: %s", exc)
            raise _service_error("Login failed", exc, AuthError) from exc
        return cls(service)

    @classmethod
    def from_tokens(
        cls,
        tokens: SavedTokens,
        *,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "AnyListClient":
        """Resume a session from saved tokens without network I/O."""
        try:
            service = HttpxAnyListService.from_tokens(
                tokens_payload(tokens), settings=settings, http_client=http_client
            )
        except _SERVICE_ERRORS as exc:
            raise _service_error(
                "Failed to create client from tokens", exc, AuthError
            ) from exc
        return cls(service)

    async def close(self) -> None:
        """Release the service's connections."""
        await self.service.close()

    async def __aenter__(self) -> "AnyListClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close()

    # Session

    def get_tokens(self) -> SavedTokens:
        """Return the current session tokens, including any refresh."""
        try:
            return tokens_from_payload(self.service.export_tokens())
        except _SERVICE_ERRORS + _MALFORMED_ERRORS as exc:
            raise _service_error("Failed to export tokens", exc) from exc

    export_tokens = get_tokens

    def user_id(self) -> str:
        return self.service.user_id()

    def is_premium_user(self) -> bool:
        return self.service.is_premium_user()

    def client_identifier(self) -> str:
        return self.service.client_identifier()

    # Lists

    async def get_lists(self) -> list[List]:
        """Return every list visible to the user, items included."""
        return await self._call(
            "get lists", self.service.get_lists, _each(list_from_payload)
        )

    async def get_list_by_id(self, list_id: str) -> List:
        return await self._call(
            "get list",
            lambda: self.service.get_list_by_id(list_id),
            list_from_payload,
        )

    async def get_list_by_name(self, name: str) -> List:
        """Return the first list whose name matches exactly."""
        return await self._call(
            "get list",
            lambda: self.service.get_list_by_name(name),
            list_from_payload,
        )

    async def create_list(self, name: str) -> List:
        return await self._call(
            "create list", lambda: self.service.create_list(name), list_from_payload
        )

    async def rename_list(self, list_id: str, new_name: str) -> None:
        await self._call(
            "rename list", lambda: self.service.rename_list(list_id, new_name)
        )

    async def delete_list(self, list_id: str) -> None:
        await self._call("delete list", lambda: self.service.delete_list(list_id))

    # Items

    async def add_item(self, list_id: str, name: str) -> ListItem:
        return await self._call(
            "add item",
            lambda: self.service.add_item(list_id, name),
            _list_item(list_id),
        )

    async def add_item_with_details(  # noqa: PLR0913
        self,
        list_id: str,
        name: str,
        quantity: str | None = None,
        note: str | None = None,
        category: str | None = None,
    ) -> ListItem:
        """Add an item; ``note`` is stored as the item's details."""
        return await self._call(
            "add item",
            lambda: self.service.add_item_with_details(
                list_id, name, quantity, note, category
            ),
            _list_item(list_id),
        )

    async def update_item(  # noqa: PLR0913
        self,
        list_id: str,
        item_id: str,
        name: str,
        quantity: str | None = None,
        note: str | None = None,
        category: str | None = None,
    ) -> None:
        """Replace the name, quantity, note and category of an item.

        Passing ``None`` for an optional field clears it.
        """
        await self._call(
            "update item",
            lambda: self.service.update_item(
                list_id, item_id, name, quantity, note, category
            ),
        )

    async def delete_item(self, list_id: str, item_id: str) -> None:
        await self._call(
            "delete item", lambda: self.service.delete_item(list_id, item_id)
        )

    async def bulk_delete_items(self, list_id: str, item_ids: list[str]) -> None:
        """Delete several items in one service call."""
        await self._call(
            "delete items",
            lambda: self.service.bulk_delete_items(list_id, list(item_ids)),
        )

    async def cross_off_item(self, list_id: str, item_id: str) -> None:
        await self._call(
            "cross off item", lambda: self.service.cross_off_item(list_id, item_id)
        )

    async def uncheck_item(self, list_id: str, item_id: str) -> None:
        await self._call(
            "uncheck item", lambda: self.service.uncheck_item(list_id, item_id)
        )

    async def delete_all_crossed_off_items(self, list_id: str) -> None:
        await self._call(
            "delete crossed off items",
            lambda: self.service.delete_all_crossed_off_items(list_id),
        )

    # Recipes

    async def get_recipes(self) -> list[Recipe]:
        return await self._call(
            "get recipes", self.service.get_recipes, _each(recipe_from_payload)
        )

    async def get_recipe_by_id(self, recipe_id: str) -> Recipe:
        return await self._call(
            "get recipe",
            lambda: self.service.get_recipe_by_id(recipe_id),
            recipe_from_payload,
        )

    async def get_recipe_by_name(self, name: str) -> Recipe:
        return await self._call(
            "get recipe",
            lambda: self.service.get_recipe_by_name(name),
            recipe_from_payload,
        )

    async def create_recipe(self, options: CreateRecipeOptions) -> Recipe:
        """Create a recipe; the service assigns its id."""
        payload = recipe_payload(options)
        return await self._call(
            "create recipe",
            lambda: self.service.save_recipe(payload),
            recipe_from_payload,
        )

    async def update_recipe(
        self, recipe_id: str, options: CreateRecipeOptions
    ) -> Recipe:
        """Rewrite a recipe from ``options``.

        The stored name is always kept: recipes cannot be renamed, so a
        different ``options.name`` is ignored. Optional fields left as
        ``None`` are cleared.
        """
        existing = await self._call(
            "update recipe",
            lambda: self.service.get_recipe_by_id(recipe_id),
            recipe_from_payload,
        )
        if options.name != existing.name:
            _logger.warning(
                "Recipe %s cannot be renamed; keeping name %r", recipe_id, existing.name
            )
        payload = recipe_payload(options, recipe_id=existing.id, name=existing.name)
        return await self._call(
            "update recipe",
            lambda: self.service.save_recipe(payload),
            recipe_from_payload,
        )

    async def delete_recipe(self, recipe_id: str) -> None:
        await self._call(
            "delete recipe", lambda: self.service.delete_recipe(recipe_id)
        )

    async def add_recipe_to_list(
        self, recipe_id: str, list_id: str, scale_factor: float | None = None
    ) -> None:
        """Append a recipe's ingredients to a list, optionally scaled."""
        if scale_factor is not None and (
            not math.isfinite(scale_factor) or scale_factor < 0
        ):
            raise ValueError("scale_factor must be a finite non-negative number")
        await self._call(
            "add recipe to list",
            lambda: self.service.add_recipe_to_list(recipe_id, list_id, scale_factor),
        )

    async def upload_photo(self, data: bytes, filename: str) -> str:
        """Upload a photo and return an id usable as ``photo_id``."""
        return await self._call(
            "upload photo", lambda: self.service.upload_photo(bytes(data), filename)
        )

    # Categories

    async def get_category_groups(self, list_id: str) -> list[CategoryGroup]:
        return await self._call(
            "get category groups",
            lambda: self.service.get_category_groups(list_id),
            _each(category_group_from_payload),
        )

    async def create_category(
        self, list_id: str, category_group_id: str, name: str
    ) -> Category:
        return await self._call(
            "create category",
            lambda: self.service.create_category(list_id, category_group_id, name),
            category_from_payload,
        )

    async def rename_category(
        self, list_id: str, category_group_id: str, category_id: str, new_name: str
    ) -> None:
        await self._call(
            "rename category",
            lambda: self.service.rename_category(
                list_id, category_group_id, category_id, new_name
            ),
        )

    async def delete_category(self, list_id: str, category_id: str) -> None:
        await self._call(
            "delete category",
            lambda: self.service.delete_category(list_id, category_id),
        )

    # Stores

    async def get_stores_for_list(self, list_id: str) -> list[Store]:
        return await self._call(
            "get stores",
            lambda: self.service.get_stores_for_list(list_id),
            _each(store_from_payload),
        )

    async def create_store(self, list_id: str, name: str) -> Store:
        return await self._call(
            "create store",
            lambda: self.service.create_store(list_id, name),
            store_from_payload,
        )

    async def update_store(self, list_id: str, store_id: str, new_name: str) -> None:
        await self._call(
            "update store",
            lambda: self.service.update_store(list_id, store_id, new_name),
        )

    async def delete_store(self, list_id: str, store_id: str) -> None:
        await self._call(
            "delete store", lambda: self.service.delete_store(list_id, store_id)
        )

    async def get_store_filters_for_list(self, list_id: str) -> list[StoreFilter]:
        return await self._call(
            "get store filters",
            lambda: self.service.get_store_filters_for_list(list_id),
            _each(store_filter_from_payload),
        )

    # Favourites

    async def get_favourites(self) -> list[FavouriteItem]:
        """Return every favourite item across every favourites list."""
        return await self._call(
            "get favourites",
            self.service.get_favourites,
            _each(favourite_item_from_payload),
        )

    async def get_favourites_lists(self) -> list[FavouritesList]:
        return await self._call(
            "get favourites lists",
            self.service.get_favourites_lists,
            _each(favourites_list_from_payload),
        )

    async def get_favourites_for_list(self, shopping_list_id: str) -> FavouritesList:
        """Return the favourites list tied to a shopping list."""
        return await self._call(
            "get favourites",
            lambda: self.service.get_favourites_for_list(shopping_list_id),
            favourites_list_from_payload,
        )

    async def add_favourite(
        self, name: str, category: str | None = None
    ) -> FavouriteItem:
        return await self._call(
            "add favourite",
            lambda: self.service.add_favourite(name, category),
            favourite_item_from_payload,
        )

    async def add_favourite_to_list(
        self, list_id: str, name: str, category: str | None = None
    ) -> FavouriteItem:
        return await self._call(
            "add favourite",
            lambda: self.service.add_favourite_to_list(list_id, name, category),
            favourite_item_from_payload,
        )

    async def remove_favourite(self, list_id: str, item_id: str) -> None:
        await self._call(
            "remove favourite",
            lambda: self.service.remove_favourite(list_id, item_id),
        )

    async def add_favourite_to_shopping_list(
        self, favourite_list_id: str, favourite_id: str, shopping_list_id: str
    ) -> ListItem:
        """Copy a favourite onto a shopping list.

        Raises NotFoundError when the favourite is not on the named
        favourites list.
        """
        favourites_lists = await self._call(
            "get favourites lists", self.service.get_favourites_lists
        )
        favourite = _find_favourite(favourites_lists, favourite_list_id, favourite_id)
        if favourite is None:
            raise NotFoundError(FAVOURITE_NOT_FOUND)
        return await self._call(
            "add favourite to shopping list",
            lambda: self.service.add_favourite_to_shopping_list(
                favourite, shopping_list_id
            ),
            _list_item(shopping_list_id),
        )

    # Meal planning

    async def get_meal_plan_events(
        self, start_date: str, end_date: str
    ) -> list[MealPlanEvent]:
        """Return events between two ``YYYY-MM-DD`` dates, both inclusive."""
        _require_dates(start_date, end_date)
        return await self._call(
            "get meal plan events",
            lambda: self.service.get_meal_plan_events(start_date, end_date),
            _each(meal_plan_event_from_payload),
        )

    async def create_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        date: str,
        recipe_id: str | None = None,
        title: str | None = None,
        label_id: str | None = None,
    ) -> MealPlanEvent:
        """Create an event; the service requires a recipe id or a title."""
        _require_dates(date)
        return await self._call(
            "create meal plan event",
            lambda: self.service.create_meal_plan_event(
                calendar_id, date, recipe_id, title, label_id
            ),
            meal_plan_event_from_payload,
        )

    async def update_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        event_id: str,
        date: str,
        recipe_id: str | None = None,
        title: str | None = None,
        label_id: str | None = None,
    ) -> None:
        _require_dates(date)
        await self._call(
            "update meal plan event",
            lambda: self.service.update_meal_plan_event(
                calendar_id, event_id, date, recipe_id, title, label_id
            ),
        )

    async def delete_meal_plan_event(self, calendar_id: str, event_id: str) -> None:
        await self._call(
            "delete meal plan event",
            lambda: self.service.delete_meal_plan_event(calendar_id, event_id),
        )

    async def add_meal_plan_ingredients_to_list(
        self, list_id: str, start_date: str, end_date: str
    ) -> None:
        """Append the ingredients of every planned recipe in range to a list."""
        _require_dates(start_date, end_date)
        await self._call(
            "add meal plan ingredients to list",
            lambda: self.service.add_meal_plan_ingredients_to_list(
                list_id, start_date, end_date
            ),
        )

    # iCalendar

    async def enable_icalendar(self) -> ICalendarInfo:
        return await self._call(
            "enable iCalendar",
            self.service.enable_icalendar,
            icalendar_info_from_payload,
        )

    async def disable_icalendar(self) -> None:
        await self._call("disable iCalendar", self.service.disable_icalendar)

    async def get_icalendar_url(self) -> str | None:
        """Return the iCalendar feed URL, or None while sync is disabled."""
        return await self._call("get iCalendar URL", self.service.get_icalendar_url)

    # Recipe collections

    async def get_recipe_collections(self) -> list[RecipeCollection]:
        return await self._call(
            "get recipe collections",
            self.service.get_recipe_collections,
            _each(recipe_collection_from_payload),
        )

    async def create_recipe_collection(self, name: str) -> RecipeCollection:
        return await self._call(
            "create recipe collection",
            lambda: self.service.create_recipe_collection(name),
            recipe_collection_from_payload,
        )

    async def delete_recipe_collection(self, collection_id: str) -> None:
        await self._call(
            "delete recipe collection",
            lambda: self.service.delete_recipe_collection(collection_id),
        )

    async def add_recipe_to_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        await self._call(
            "add recipe to collection",
            lambda: self.service.add_recipe_to_collection(collection_id, recipe_id),
        )

    async def remove_recipe_from_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        await self._call(
            "remove recipe from collection",
            lambda: self.service.remove_recipe_from_collection(
                collection_id, recipe_id
            ),
        )

    async def _call(
        self,
        action: str,
        func: "Callable[[], Awaitable[Any]]",
        convert: "Callable[[Any], Any] | None" = None,
    ) -> Any:
        """Await one service call and convert its payload."""
        try:
            payload = await func()
        except _SERVICE_ERRORS as exc:
            _logger.warning("AnyList %s failed: %s", action, exc)
            raise _service_error(f"Failed to {action}", exc) from exc
        if convert is None:
            return payload
        try:
            return convert(payload)
        except _MALFORMED_ERRORS as exc:
            _logger.warning("AnyList %s returned a malformed payload: %s", action, exc)
            raise ServiceError(
                f"Failed to {action}: malformed response ({exc!r})"
            ) from exc


def _each(
    convert: "Callable[[dict[str, object]], Any]",
) -> "Callable[[list[dict[str, object]]], list[Any]]":
    def convert_all(payloads: list[dict[str, object]]) -> list[Any]:
        return [convert(payload) for payload in payloads]

    return convert_all


def _list_item(list_id: str) -> "Callable[[dict[str, object]], ListItem]":
    def convert(payload: dict[str, object]) -> ListItem:
        return list_item_from_payload(payload, list_id=list_id)

    return convert


def _find_favourite(
    favourites_lists: list[dict[str, object]],
    favourite_list_id: str,
    favourite_id: str,
) -> dict[str, object] | None:
    for favourites_list in favourites_lists:
        if favourites_list.get("id") != favourite_list_id:
            continue
        for item in favourites_list.get("items") or []:
            if isinstance(item, dict) and item.get("id") == favourite_id:
                return item
    return None


def _require_dates(*dates: str) -> None:
    for value in dates:
        if not value or not value.strip():
            raise ValueError("meal plan dates must be non-empty YYYY-MM-DD strings")


def _service_error(
    prefix: str, exc: Exception, error_cls: type[ServiceError] = ServiceError
) -> ServiceError:
    return error_cls(f"{prefix}: {exc}", status_code=_status_code_from_exception(exc))


def _status_code_from_exception(exc: Exception) -> int | None:
    """Extract an HTTP status code from a service exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    return status_code if isinstance(status_code, int) else None
