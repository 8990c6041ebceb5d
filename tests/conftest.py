"""Shared test fixtures."""

import copy
from dataclasses import dataclass, field
from uuid import uuid4

import pytest

from anylist_client.adapters.anylist_service import AnyListApiError, AnyListService
from anylist_client.config import Settings
from anylist_client.services.client import AnyListClient


def _new_id() -> str:
    return uuid4().hex


@dataclass
class InMemoryAnyListService(AnyListService):
    """In-memory AnyList service for tests."""

    tokens: dict[str, object] = field(
        default_factory=lambda: {
            "access_token": "access-1",
            "refresh_token": "refresh-1",
            "user_id": "user-1",
            "is_premium_user": True,
        }
    )
    identifier: str = "client-1"
    lists: dict[str, dict] = field(default_factory=dict)
    recipes: dict[str, dict] = field(default_factory=dict)
    category_groups: dict[str, list[dict]] = field(default_factory=dict)
    stores: dict[str, list[dict]] = field(default_factory=dict)
    store_filters: dict[str, list[dict]] = field(default_factory=dict)
    favourites_lists: dict[str, dict] = field(default_factory=dict)
    events: dict[str, dict] = field(default_factory=dict)
    icalendar: dict = field(
        default_factory=lambda: {"enabled": False, "url": None, "token": None}
    )
    collections: dict[str, dict] = field(default_factory=dict)
    photos: dict[str, tuple[str, bytes]] = field(default_factory=dict)
    scale_factors: list[float | None] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    fail_with: str | None = None
    closed: bool = False

    def export_tokens(self) -> dict[str, object]:
        return dict(self.tokens)

    def user_id(self) -> str:
        return str(self.tokens["user_id"])

    def is_premium_user(self) -> bool:
        return bool(self.tokens["is_premium_user"])

    def client_identifier(self) -> str:
        return self.identifier

    async def close(self) -> None:
        self.closed = True

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise AnyListApiError(self.fail_with)

    def _list(self, list_id: str) -> dict:
        if list_id not in self.lists:
            raise AnyListApiError(f"List not found: {list_id}")
        return self.lists[list_id]

    def _item(self, list_id: str, item_id: str) -> dict:
        for item in self._list(list_id)["items"]:
            if item["id"] == item_id:
                return item
        raise AnyListApiError(f"Item not found: {item_id}")

    def _recipe(self, recipe_id: str) -> dict:
        if recipe_id not in self.recipes:
            raise AnyListApiError(f"Recipe not found: {recipe_id}")
        return self.recipes[recipe_id]

    def _favourites_list(self, list_id: str) -> dict:
        if list_id not in self.favourites_lists:
            raise AnyListApiError(f"Favourites list not found: {list_id}")
        return self.favourites_lists[list_id]

    def _collection(self, collection_id: str) -> dict:
        if collection_id not in self.collections:
            raise AnyListApiError(f"Collection not found: {collection_id}")
        return self.collections[collection_id]

    async def get_lists(self) -> list[dict[str, object]]:
        self._enter("get_lists")
        return [copy.deepcopy(shopping_list) for shopping_list in self.lists.values()]

    async def get_list_by_id(self, list_id: str) -> dict[str, object]:
        self._enter("get_list_by_id")
        return copy.deepcopy(self._list(list_id))

    async def get_list_by_name(self, name: str) -> dict[str, object]:
        self._enter("get_list_by_name")
        for shopping_list in self.lists.values():
            if shopping_list["name"] == name:
                return copy.deepcopy(shopping_list)
        raise AnyListApiError(f"List not found: {name}")

    async def create_list(self, name: str) -> dict[str, object]:
        self._enter("create_list")
        list_id = _new_id()
        self.lists[list_id] = {"id": list_id, "name": name, "items": []}
        return copy.deepcopy(self.lists[list_id])

    async def rename_list(self, list_id: str, new_name: str) -> None:
        self._enter("rename_list")
        self._list(list_id)["name"] = new_name

    async def delete_list(self, list_id: str) -> None:
        self._enter("delete_list")
        self._list(list_id)
        del self.lists[list_id]

    async def add_item(self, list_id: str, name: str) -> dict[str, object]:
        return await self.add_item_with_details(list_id, name, None, None, None)

    async def add_item_with_details(  # noqa: PLR0913
        self,
        list_id: str,
        name: str,
        quantity: str | None,
        details: str | None,
        category: str | None,
    ) -> dict[str, object]:
        self._enter("add_item")
        item = {
            "id": _new_id(),
            "list_id": list_id,
            "name": name,
            "details": details or "",
            "checked": False,
            "quantity": quantity,
            "category": category,
            "user_id": self.user_id(),
            "product_upc": None,
        }
        self._list(list_id)["items"].append(item)
        return copy.deepcopy(item)

    async def update_item(  # noqa: PLR0913
        self,
        list_id: str,
        item_id: str,
        name: str,
        quantity: str | None,
        details: str | None,
        category: str | None,
    ) -> None:
        self._enter("update_item")
        item = self._item(list_id, item_id)
        item.update(
            {
                "name": name,
                "quantity": quantity,
                "details": details or "",
                "category": category,
            }
        )

    async def delete_item(self, list_id: str, item_id: str) -> None:
        self._enter("delete_item")
        self._item(list_id, item_id)
        shopping_list = self._list(list_id)
        shopping_list["items"] = [
            item for item in shopping_list["items"] if item["id"] != item_id
        ]

    async def bulk_delete_items(self, list_id: str, item_ids: list[str]) -> None:
        self._enter("bulk_delete_items")
        for item_id in item_ids:
            self._item(list_id, item_id)
        shopping_list = self._list(list_id)
        shopping_list["items"] = [
            item for item in shopping_list["items"] if item["id"] not in item_ids
        ]

    async def cross_off_item(self, list_id: str, item_id: str) -> None:
        self._enter("cross_off_item")
        self._item(list_id, item_id)["checked"] = True

    async def uncheck_item(self, list_id: str, item_id: str) -> None:
        self._enter("uncheck_item")
        self._item(list_id, item_id)["checked"] = False

    async def delete_all_crossed_off_items(self, list_id: str) -> None:
        self._enter("delete_all_crossed_off_items")
        shopping_list = self._list(list_id)
        shopping_list["items"] = [
            item for item in shopping_list["items"] if not item["checked"]
        ]

    async def get_recipes(self) -> list[dict[str, object]]:
        self._enter("get_recipes")
        return [copy.deepcopy(recipe) for recipe in self.recipes.values()]

    async def get_recipe_by_id(self, recipe_id: str) -> dict[str, object]:
        self._enter("get_recipe_by_id")
        return copy.deepcopy(self._recipe(recipe_id))

    async def get_recipe_by_name(self, name: str) -> dict[str, object]:
        self._enter("get_recipe_by_name")
        for recipe in self.recipes.values():
            if recipe["name"] == name:
                return copy.deepcopy(recipe)
        raise AnyListApiError(f"Recipe not found: {name}")

    async def save_recipe(self, payload: dict[str, object]) -> dict[str, object]:
        self._enter("save_recipe")
        if not payload.get("name"):
            raise AnyListApiError("Recipe name is required")
        recipe = copy.deepcopy(payload)
        if "id" in recipe:
            self._recipe(str(recipe["id"]))
        else:
            recipe["id"] = _new_id()
        self.recipes[str(recipe["id"])] = recipe
        return copy.deepcopy(recipe)

    async def delete_recipe(self, recipe_id: str) -> None:
        self._enter("delete_recipe")
        self._recipe(recipe_id)
        del self.recipes[recipe_id]

    async def add_recipe_to_list(
        self, recipe_id: str, list_id: str, scale_factor: float | None
    ) -> None:
        self._enter("add_recipe_to_list")
        self.scale_factors.append(scale_factor)
        self._append_ingredients(list_id, self._recipe(recipe_id))

    def _append_ingredients(self, list_id: str, recipe: dict) -> None:
        items = self._list(list_id)["items"]
        for ingredient in recipe.get("ingredients", []):
            items.append(
                {
                    "id": _new_id(),
                    "list_id": list_id,
                    "name": ingredient["name"],
                    "details": ingredient.get("note") or "",
                    "checked": False,
                    "quantity": ingredient.get("quantity"),
                    "category": None,
                    "user_id": self.user_id(),
                    "product_upc": None,
                }
            )

    async def upload_photo(self, data: bytes, filename: str) -> str:
        self._enter("upload_photo")
        photo_id = _new_id()
        self.photos[photo_id] = (filename, data)
        return photo_id

    async def get_category_groups(self, list_id: str) -> list[dict[str, object]]:
        self._enter("get_category_groups")
        self._list(list_id)
        return copy.deepcopy(self.category_groups.get(list_id, []))

    def _group(self, list_id: str, category_group_id: str) -> dict:
        self._list(list_id)
        for group in self.category_groups.get(list_id, []):
            if group["id"] == category_group_id:
                return group
        raise AnyListApiError(f"Category group not found: {category_group_id}")

    async def create_category(
        self, list_id: str, category_group_id: str, name: str
    ) -> dict[str, object]:
        self._enter("create_category")
        group = self._group(list_id, category_group_id)
        category = {
            "id": _new_id(),
            "name": name,
            "icon": None,
            "sort_index": len(group["categories"]),
        }
        group["categories"].append(category)
        return copy.deepcopy(category)

    async def rename_category(
        self, list_id: str, category_group_id: str, category_id: str, new_name: str
    ) -> None:
        self._enter("rename_category")
        for category in self._group(list_id, category_group_id)["categories"]:
            if category["id"] == category_id:
                category["name"] = new_name
                return
        raise AnyListApiError(f"Category not found: {category_id}")

    async def delete_category(self, list_id: str, category_id: str) -> None:
        self._enter("delete_category")
        self._list(list_id)
        for group in self.category_groups.get(list_id, []):
            remaining = [c for c in group["categories"] if c["id"] != category_id]
            if len(remaining) != len(group["categories"]):
                group["categories"] = remaining
                return
        raise AnyListApiError(f"Category not found: {category_id}")

    async def get_stores_for_list(self, list_id: str) -> list[dict[str, object]]:
        self._enter("get_stores_for_list")
        self._list(list_id)
        return copy.deepcopy(self.stores.get(list_id, []))

    async def create_store(self, list_id: str, name: str) -> dict[str, object]:
        self._enter("create_store")
        self._list(list_id)
        stores = self.stores.setdefault(list_id, [])
        store = {"id": _new_id(), "name": name, "sort_index": len(stores)}
        stores.append(store)
        return copy.deepcopy(store)

    async def update_store(self, list_id: str, store_id: str, new_name: str) -> None:
        self._enter("update_store")
        for store in self.stores.get(list_id, []):
            if store["id"] == store_id:
                store["name"] = new_name
                return
        raise AnyListApiError(f"Store not found: {store_id}")

    async def delete_store(self, list_id: str, store_id: str) -> None:
        self._enter("delete_store")
        stores = self.stores.get(list_id, [])
        if not any(store["id"] == store_id for store in stores):
            raise AnyListApiError(f"Store not found: {store_id}")
        self.stores[list_id] = [store for store in stores if store["id"] != store_id]
        for store_filter in self.store_filters.get(list_id, []):
            store_filter["store_ids"] = [
                sid for sid in store_filter["store_ids"] if sid != store_id
            ]

    async def get_store_filters_for_list(
        self, list_id: str
    ) -> list[dict[str, object]]:
        self._enter("get_store_filters_for_list")
        self._list(list_id)
        return copy.deepcopy(self.store_filters.get(list_id, []))

    async def get_favourites(self) -> list[dict[str, object]]:
        self._enter("get_favourites")
        return [
            copy.deepcopy(item)
            for favourites_list in self.favourites_lists.values()
            for item in favourites_list["items"]
        ]

    async def get_favourites_lists(self) -> list[dict[str, object]]:
        self._enter("get_favourites_lists")
        return [copy.deepcopy(fl) for fl in self.favourites_lists.values()]

    async def get_favourites_for_list(self, shopping_list_id: str) -> dict[str, object]:
        self._enter("get_favourites_for_list")
        for favourites_list in self.favourites_lists.values():
            if favourites_list["shopping_list_id"] == shopping_list_id:
                return copy.deepcopy(favourites_list)
        raise AnyListApiError(f"Favourites list not found: {shopping_list_id}")

    def add_favourites_list(
        self, name: str, shopping_list_id: str | None = None
    ) -> str:
        list_id = _new_id()
        self.favourites_lists[list_id] = {
            "id": list_id,
            "name": name,
            "items": [],
            "shopping_list_id": shopping_list_id,
        }
        return list_id

    async def add_favourite(
        self, name: str, category: str | None
    ) -> dict[str, object]:
        if not self.favourites_lists:
            self.add_favourites_list("Favourites")
        default_id = next(iter(self.favourites_lists))
        return await self.add_favourite_to_list(default_id, name, category)

    async def add_favourite_to_list(
        self, list_id: str, name: str, category: str | None
    ) -> dict[str, object]:
        self._enter("add_favourite_to_list")
        item = {
            "id": _new_id(),
            "list_id": list_id,
            "name": name,
            "quantity": None,
            "details": None,
            "category": category,
        }
        self._favourites_list(list_id)["items"].append(item)
        return copy.deepcopy(item)

    async def remove_favourite(self, list_id: str, item_id: str) -> None:
        self._enter("remove_favourite")
        favourites_list = self._favourites_list(list_id)
        remaining = [i for i in favourites_list["items"] if i["id"] != item_id]
        if len(remaining) == len(favourites_list["items"]):
            raise AnyListApiError(f"Favourite not found: {item_id}")
        favourites_list["items"] = remaining

    async def add_favourite_to_shopping_list(
        self, favourite: dict[str, object], shopping_list_id: str
    ) -> dict[str, object]:
        return await self.add_item_with_details(
            shopping_list_id,
            str(favourite["name"]),
            favourite.get("quantity"),
            favourite.get("details"),
            favourite.get("category"),
        )

    async def get_meal_plan_events(
        self, start_date: str, end_date: str
    ) -> list[dict[str, object]]:
        self._enter("get_meal_plan_events")
        return [
            copy.deepcopy(event)
            for event in self.events.values()
            if start_date <= event["date"] <= end_date
        ]

    async def create_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        date: str,
        recipe_id: str | None,
        title: str | None,
        label_id: str | None,
    ) -> dict[str, object]:
        self._enter("create_meal_plan_event")
        if recipe_id is None and title is None:
            raise AnyListApiError("Meal plan event needs a recipe or a title")
        event = {
            "id": _new_id(),
            "calendar_id": calendar_id,
            "date": date,
            "title": title,
            "recipe_id": recipe_id,
            "label_id": label_id,
            "details": None,
        }
        self.events[event["id"]] = event
        return copy.deepcopy(event)

    async def update_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        event_id: str,
        date: str,
        recipe_id: str | None,
        title: str | None,
        label_id: str | None,
    ) -> None:
        self._enter("update_meal_plan_event")
        if event_id not in self.events:
            raise AnyListApiError(f"Event not found: {event_id}")
        self.events[event_id].update(
            {"date": date, "recipe_id": recipe_id, "title": title, "label_id": label_id}
        )

    async def delete_meal_plan_event(self, calendar_id: str, event_id: str) -> None:
        self._enter("delete_meal_plan_event")
        if self.events.pop(event_id, None) is None:
            raise AnyListApiError(f"Event not found: {event_id}")

    async def add_meal_plan_ingredients_to_list(
        self, list_id: str, start_date: str, end_date: str
    ) -> None:
        self._enter("add_meal_plan_ingredients_to_list")
        for event in self.events.values():
            if start_date <= event["date"] <= end_date and event["recipe_id"]:
                self._append_ingredients(list_id, self._recipe(event["recipe_id"]))

    async def enable_icalendar(self) -> dict[str, object]:
        self._enter("enable_icalendar")
        token = _new_id()
        self.icalendar = {
            "enabled": True,
            "url": f"https://ical.example.test/{token}.ics",
            "token": token,
        }
        return dict(self.icalendar)

    async def disable_icalendar(self) -> None:
        self._enter("disable_icalendar")
        self.icalendar = {"enabled": False, "url": None, "token": None}

    async def get_icalendar_url(self) -> str | None:
        self._enter("get_icalendar_url")
        return self.icalendar["url"] if self.icalendar["enabled"] else None

    async def get_recipe_collections(self) -> list[dict[str, object]]:
        self._enter("get_recipe_collections")
        return [copy.deepcopy(c) for c in self.collections.values()]

    async def create_recipe_collection(self, name: str) -> dict[str, object]:
        self._enter("create_recipe_collection")
        collection = {"id": _new_id(), "name": name, "recipe_ids": []}
        self.collections[collection["id"]] = collection
        return copy.deepcopy(collection)

    async def delete_recipe_collection(self, collection_id: str) -> None:
        self._enter("delete_recipe_collection")
        self._collection(collection_id)
        del self.collections[collection_id]

    async def add_recipe_to_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        self._enter("add_recipe_to_collection")
        self._recipe(recipe_id)
        recipe_ids = self._collection(collection_id)["recipe_ids"]
        if recipe_id not in recipe_ids:
            recipe_ids.append(recipe_id)

    async def remove_recipe_from_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        self._enter("remove_recipe_from_collection")
        recipe_ids = self._collection(collection_id)["recipe_ids"]
        if recipe_id not in recipe_ids:
            raise AnyListApiError(f"Recipe not in collection: {recipe_id}")
        recipe_ids.remove(recipe_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        anylist_base_url="https://anylist.test",
        anylist_client_identifier="test-client",
    )


@pytest.fixture
def service() -> InMemoryAnyListService:
    return InMemoryAnyListService()


@pytest.fixture
def client(service: InMemoryAnyListService) -> AnyListClient:
    return AnyListClient(service)
