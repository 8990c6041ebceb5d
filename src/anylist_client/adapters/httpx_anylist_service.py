"""AnyList service implemented with httpx."""

import asyncio
import logging
import mimetypes
from dataclasses import dataclass, field
from uuid import uuid4

import httpx

from anylist_client.adapters.anylist_service import AnyListApiError, AnyListService
from anylist_client.config import Settings, normalize_base_url

_logger = logging.getLogger(__name__)


@dataclass
class _SessionTokens:
    access_token: str
    refresh_token: str
    user_id: str
    is_premium_user: bool

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "_SessionTokens":
        missing = [
            key
            for key in ("access_token", "refresh_token", "user_id")
            if not payload.get(key)
        ]
        if missing:
            raise AnyListApiError(f"Missing token fields: {', '.join(missing)}")
        return cls(
            access_token=str(payload["access_token"]),
            refresh_token=str(payload["refresh_token"]),
            user_id=str(payload["user_id"]),
            is_premium_user=bool(payload.get("is_premium_user", False)),
        )


@dataclass
class HttpxAnyListService(AnyListService):
    """AnyList service speaking JSON over httpx.

    The session tokens are shared by every in-flight call; a 401 response
    triggers a single token refresh and one retry.
    """

    base_url: str
    api_version: str
    timeout: float
    identifier: str
    session: _SessionTokens
    http_client: httpx.AsyncClient
    _refresh_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @classmethod
    async def login(
        cls,
        email: str,
        password: str,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "HttpxAnyListService":
        """Authenticate with email and password and return a live service."""
        resolved = settings or Settings()
        client = http_client or httpx.AsyncClient()
        base_url = normalize_base_url(resolved.anylist_base_url)
        identifier = resolved.anylist_client_identifier or uuid4().hex
        try:
            response = await client.post(
                f"{base_url}/auth/token",
                data={"email": email, "password": password},
                headers=_headers(resolved.anylist_api_version, identifier),
                timeout=resolved.anylist_timeout_seconds,
            )
            _raise_for_status(response)
            session = _SessionTokens.from_payload(_json(response))
        except Exception:
            if http_client is None:
                await client.aclose()
            raise
        return cls(
            base_url=base_url,
            api_version=resolved.anylist_api_version,
            timeout=resolved.anylist_timeout_seconds,
            identifier=identifier,
            session=session,
            http_client=client,
        )

    @classmethod
    def from_tokens(
        cls,
        tokens: dict[str, object],
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "HttpxAnyListService":
        """Build a service from saved tokens without contacting AnyList."""
        resolved = settings or Settings()
        session = _SessionTokens.from_payload(tokens)
        return cls(
            base_url=normalize_base_url(resolved.anylist_base_url),
            api_version=resolved.anylist_api_version,
            timeout=resolved.anylist_timeout_seconds,
            identifier=resolved.anylist_client_identifier or uuid4().hex,
            session=session,
            http_client=http_client or httpx.AsyncClient(),
        )

    def export_tokens(self) -> dict[str, object]:
        return {
            "access_token": self.session.access_token,
            "refresh_token": self.session.refresh_token,
            "user_id": self.session.user_id,
            "is_premium_user": self.session.is_premium_user,
        }

    def user_id(self) -> str:
        return self.session.user_id

    def is_premium_user(self) -> bool:
        return self.session.is_premium_user

    def client_identifier(self) -> str:
        return self.identifier

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    # Lists

    async def get_lists(self) -> list[dict[str, object]]:
        payload = await self._call("shopping-lists/get")
        return _records(payload, "lists")

    async def get_list_by_id(self, list_id: str) -> dict[str, object]:
        lists = await self.get_lists()
        return _find(lists, "id", list_id, entity="List")

    async def get_list_by_name(self, name: str) -> dict[str, object]:
        lists = await self.get_lists()
        return _find(lists, "name", name, entity="List")

    async def create_list(self, name: str) -> dict[str, object]:
        payload = await self._call("shopping-lists/create", {"name": name})
        return _record(payload, "list")

    async def rename_list(self, list_id: str, new_name: str) -> None:
        await self._call(
            "shopping-lists/rename", {"list_id": list_id, "name": new_name}
        )

    async def delete_list(self, list_id: str) -> None:
        await self._call("shopping-lists/delete", {"list_id": list_id})

    # Items

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
        payload = await self._call(
            "shopping-lists/add-item",
            {
                "list_id": list_id,
                "name": name,
                "quantity": quantity,
                "details": details,
                "category": category,
            },
        )
        return _record(payload, "item")

    async def update_item(  # noqa: PLR0913
        self,
        list_id: str,
        item_id: str,
        name: str,
        quantity: str | None,
        details: str | None,
        category: str | None,
    ) -> None:
        await self._call(
            "shopping-lists/update-item",
            {
                "list_id": list_id,
                "item_id": item_id,
                "name": name,
                "quantity": quantity,
                "details": details,
                "category": category,
            },
        )

    async def delete_item(self, list_id: str, item_id: str) -> None:
        await self.bulk_delete_items(list_id, [item_id])

    async def bulk_delete_items(self, list_id: str, item_ids: list[str]) -> None:
        await self._call(
            "shopping-lists/delete-items",
            {"list_id": list_id, "item_ids": list(item_ids)},
        )

    async def cross_off_item(self, list_id: str, item_id: str) -> None:
        await self._set_checked(list_id, item_id, checked=True)

    async def uncheck_item(self, list_id: str, item_id: str) -> None:
        await self._set_checked(list_id, item_id, checked=False)

    async def delete_all_crossed_off_items(self, list_id: str) -> None:
        await self._call("shopping-lists/delete-checked-items", {"list_id": list_id})

    async def _set_checked(self, list_id: str, item_id: str, *, checked: bool) -> None:
        await self._call(
            "shopping-lists/set-item-checked",
            {"list_id": list_id, "item_id": item_id, "checked": checked},
        )

    # Recipes

    async def get_recipes(self) -> list[dict[str, object]]:
        payload = await self._call("recipes/get")
        return _records(payload, "recipes")

    async def get_recipe_by_id(self, recipe_id: str) -> dict[str, object]:
        recipes = await self.get_recipes()
        return _find(recipes, "id", recipe_id, entity="Recipe")

    async def get_recipe_by_name(self, name: str) -> dict[str, object]:
        recipes = await self.get_recipes()
        return _find(recipes, "name", name, entity="Recipe")

    async def save_recipe(self, payload: dict[str, object]) -> dict[str, object]:
        response = await self._call("recipes/save", {"recipe": payload})
        return _record(response, "recipe")

    async def delete_recipe(self, recipe_id: str) -> None:
        await self._call("recipes/delete", {"recipe_id": recipe_id})

    async def add_recipe_to_list(
        self, recipe_id: str, list_id: str, scale_factor: float | None
    ) -> None:
        await self._call(
            "shopping-lists/add-recipe",
            {"recipe_id": recipe_id, "list_id": list_id, "scale_factor": scale_factor},
        )

    async def upload_photo(self, data: bytes, filename: str) -> str:
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        payload = await self._call(
            "photos/upload", files={"photo": (filename, data, content_type)}
        )
        photo_id = payload.get("photo_id")
        if not isinstance(photo_id, str) or not photo_id:
            raise AnyListApiError("Malformed response: missing 'photo_id'")
        return photo_id

    # Categories and stores

    async def get_category_groups(self, list_id: str) -> list[dict[str, object]]:
        payload = await self._call("categories/get", {"list_id": list_id})
        return _records(payload, "category_groups")

    async def create_category(
        self, list_id: str, category_group_id: str, name: str
    ) -> dict[str, object]:
        payload = await self._call(
            "categories/create",
            {"list_id": list_id, "category_group_id": category_group_id, "name": name},
        )
        return _record(payload, "category")

    async def rename_category(
        self, list_id: str, category_group_id: str, category_id: str, new_name: str
    ) -> None:
        await self._call(
            "categories/rename",
            {
                "list_id": list_id,
                "category_group_id": category_group_id,
                "category_id": category_id,
                "name": new_name,
            },
        )

    async def delete_category(self, list_id: str, category_id: str) -> None:
        await self._call(
            "categories/delete", {"list_id": list_id, "category_id": category_id}
        )

    async def get_stores_for_list(self, list_id: str) -> list[dict[str, object]]:
        payload = await self._call("stores/get", {"list_id": list_id})
        return _records(payload, "stores")

    async def create_store(self, list_id: str, name: str) -> dict[str, object]:
        payload = await self._call("stores/create", {"list_id": list_id, "name": name})
        return _record(payload, "store")

    async def update_store(self, list_id: str, store_id: str, new_name: str) -> None:
        await self._call(
            "stores/rename",
            {"list_id": list_id, "store_id": store_id, "name": new_name},
        )

    async def delete_store(self, list_id: str, store_id: str) -> None:
        await self._call("stores/delete", {"list_id": list_id, "store_id": store_id})

    async def get_store_filters_for_list(
        self, list_id: str
    ) -> list[dict[str, object]]:
        payload = await self._call("store-filters/get", {"list_id": list_id})
        return _records(payload, "store_filters")

    # Favourites

    async def get_favourites(self) -> list[dict[str, object]]:
        items: list[dict[str, object]] = []
        for favourites_list in await self.get_favourites_lists():
            items.extend(
                {"list_id": favourites_list.get("id"), **item}
                for item in _records(favourites_list, "items")
            )
        return items

    async def get_favourites_lists(self) -> list[dict[str, object]]:
        payload = await self._call("starter-lists/get")
        return _records(payload, "lists")

    async def get_favourites_for_list(self, shopping_list_id: str) -> dict[str, object]:
        lists = await self.get_favourites_lists()
        return _find(
            lists, "shopping_list_id", shopping_list_id, entity="Favourites list"
        )

    async def add_favourite(
        self, name: str, category: str | None
    ) -> dict[str, object]:
        payload = await self._call(
            "starter-lists/add-item", {"name": name, "category": category}
        )
        return _record(payload, "item")

    async def add_favourite_to_list(
        self, list_id: str, name: str, category: str | None
    ) -> dict[str, object]:
        payload = await self._call(
            "starter-lists/add-item",
            {"list_id": list_id, "name": name, "category": category},
        )
        return _record(payload, "item")

    async def remove_favourite(self, list_id: str, item_id: str) -> None:
        await self._call(
            "starter-lists/remove-item", {"list_id": list_id, "item_id": item_id}
        )

    async def add_favourite_to_shopping_list(
        self, favourite: dict[str, object], shopping_list_id: str
    ) -> dict[str, object]:
        payload = await self._call(
            "starter-lists/add-to-shopping-list",
            {"favourite": favourite, "shopping_list_id": shopping_list_id},
        )
        return _record(payload, "item")

    # Meal planning

    async def get_meal_plan_events(
        self, start_date: str, end_date: str
    ) -> list[dict[str, object]]:
        payload = await self._call(
            "meal-plan/events/get", {"start_date": start_date, "end_date": end_date}
        )
        return _records(payload, "events")

    async def create_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        date: str,
        recipe_id: str | None,
        title: str | None,
        label_id: str | None,
    ) -> dict[str, object]:
        payload = await self._call(
            "meal-plan/events/create",
            {
                "calendar_id": calendar_id,
                "date": date,
                "recipe_id": recipe_id,
                "title": title,
                "label_id": label_id,
            },
        )
        return _record(payload, "event")

    async def update_meal_plan_event(  # noqa: PLR0913
        self,
        calendar_id: str,
        event_id: str,
        date: str,
        recipe_id: str | None,
        title: str | None,
        label_id: str | None,
    ) -> None:
        await self._call(
            "meal-plan/events/update",
            {
                "calendar_id": calendar_id,
                "event_id": event_id,
                "date": date,
                "recipe_id": recipe_id,
                "title": title,
                "label_id": label_id,
            },
        )

    async def delete_meal_plan_event(self, calendar_id: str, event_id: str) -> None:
        await self._call(
            "meal-plan/events/delete",
            {"calendar_id": calendar_id, "event_id": event_id},
        )

    async def add_meal_plan_ingredients_to_list(
        self, list_id: str, start_date: str, end_date: str
    ) -> None:
        await self._call(
            "meal-plan/add-ingredients-to-list",
            {"list_id": list_id, "start_date": start_date, "end_date": end_date},
        )

    async def enable_icalendar(self) -> dict[str, object]:
        payload = await self._call("calendar/icalendar/enable")
        return _record(payload, "icalendar")

    async def disable_icalendar(self) -> None:
        await self._call("calendar/icalendar/disable")

    async def get_icalendar_url(self) -> str | None:
        payload = await self._call("calendar/icalendar/get")
        info = _record(payload, "icalendar")
        if not info.get("enabled"):
            return None
        url = info.get("url")
        return str(url) if url is not None else None

    # Recipe collections

    async def get_recipe_collections(self) -> list[dict[str, object]]:
        payload = await self._call("recipe-collections/get")
        return _records(payload, "collections")

    async def create_recipe_collection(self, name: str) -> dict[str, object]:
        payload = await self._call("recipe-collections/create", {"name": name})
        return _record(payload, "collection")

    async def delete_recipe_collection(self, collection_id: str) -> None:
        await self._call(
            "recipe-collections/delete", {"collection_id": collection_id}
        )

    async def add_recipe_to_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        await self._call(
            "recipe-collections/add-recipe",
            {"collection_id": collection_id, "recipe_id": recipe_id},
        )

    async def remove_recipe_from_collection(
        self, collection_id: str, recipe_id: str
    ) -> None:
        await self._call(
            "recipe-collections/remove-recipe",
            {"collection_id": collection_id, "recipe_id": recipe_id},
        )

    # Transport

    async def _call(
        self,
        path: str,
        payload: dict[str, object] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> dict[str, object]:
        """POST to a data endpoint, refreshing the session once on 401."""
        access_token = self.session.access_token
        response = await self._post(path, payload, files, access_token)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            await self._refresh(access_token)
            response = await self._post(
                path, payload, files, self.session.access_token
            )
        _raise_for_status(response)
        if not response.content:
            return {}
        return _json(response)

    async def _post(
        self,
        path: str,
        payload: dict[str, object] | None,
        files: dict[str, tuple[str, bytes, str]] | None,
        access_token: str,
    ) -> httpx.Response:
        headers = _headers(self.api_version, self.identifier)
        headers["Authorization"] = f"Bearer {access_token}"
        url = f"{self.base_url}/data/{path}"
        if files is not None:
            return await self.http_client.post(
                url, files=files, headers=headers, timeout=self.timeout
            )
        return await self.http_client.post(
            url, json=payload or {}, headers=headers, timeout=self.timeout
        )

    async def _refresh(self, stale_access_token: str) -> None:
        """Exchange the refresh token for a new access token."""
        async with self._refresh_lock:
            if self.session.access_token != stale_access_token:
                return
            response = await self.http_client.post(
                f"{self.base_url}/auth/token/refresh",
                data={"refresh_token": self.session.refresh_token},
                headers=_headers(self.api_version, self.identifier),
                timeout=self.timeout,
            )
            _raise_for_status(response)
            payload = _json(response)
            refreshed = _SessionTokens(
                access_token=str(payload.get("access_token") or ""),
                refresh_token=str(
                    payload.get("refresh_token") or self.session.refresh_token
                ),
                user_id=self.session.user_id,
                is_premium_user=bool(
                    payload.get("is_premium_user", self.session.is_premium_user)
                ),
            )
            if not refreshed.access_token:
                raise AnyListApiError("Token refresh returned no access token")
            self.session = refreshed
            _logger.info("Refreshed access token for user %s", self.session.user_id)


def _headers(api_version: str, identifier: str) -> dict[str, str]:
    return {
        "X-AnyLeaf-API-Version": api_version,
        "X-AnyLeaf-Client-Identifier": identifier,
    }


def _raise_for_status(response: httpx.Response) -> None:
    """Raise an AnyListApiError carrying the server's message on failure."""
    if not response.is_error:
        return
    message = response.reason_phrase or "Request failed"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        if detail:
            message = str(detail)
    elif response.text:
        message = response.text.strip()
    raise AnyListApiError(
        f"{message} (HTTP {response.status_code})",
        status_code=response.status_code,
    )


def _json(response: httpx.Response) -> dict[str, object]:
    try:
        body = response.json()
    except ValueError as exc:
        raise AnyListApiError(f"Malformed response: {exc}") from exc
    if not isinstance(body, dict):
        raise AnyListApiError(f"Malformed response from {response.url.path}")
    return body


def _record(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise AnyListApiError(f"Malformed response: missing '{key}'")
    return value


def _records(payload: dict[str, object], key: str) -> list[dict[str, object]]:
    value = payload.get(key, [])
    if not isinstance(value, list):
        raise AnyListApiError(f"Malformed response: '{key}' is not a list")
    return [entry for entry in value if isinstance(entry, dict)]


def _find(
    records: list[dict[str, object]], key: str, value: str, *, entity: str
) -> dict[str, object]:
    for record in records:
        if record.get(key) == value:
            return record
    raise AnyListApiError(f"{entity} not found: {value}", status_code=404)
