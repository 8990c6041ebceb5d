"""Conversion between AnyList service payloads and domain records."""

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
from anylist_client.domain.recipes import (
    CreateRecipeOptions,
    Ingredient,
    IngredientInput,
    Recipe,
    RecipeCollection,
)
from anylist_client.domain.tokens import SavedTokens


def tokens_from_payload(payload: dict[str, object]) -> SavedTokens:
    """Build saved tokens from a service token payload."""
    return SavedTokens(
        access_token=str(payload["access_token"]),
        refresh_token=str(payload["refresh_token"]),
        user_id=str(payload["user_id"]),
        is_premium_user=bool(payload.get("is_premium_user", False)),
    )


def tokens_payload(tokens: SavedTokens) -> dict[str, object]:
    return tokens.model_dump()


def list_item_from_payload(
    payload: dict[str, object], list_id: str | None = None
) -> ListItem:
    """Build a list item; the wire ``checked`` flag becomes ``is_checked``."""
    return ListItem(
        id=str(payload["id"]),
        list_id=str(payload.get("list_id") or list_id or ""),
        name=str(payload.get("name", "")),
        details=str(payload.get("details") or ""),
        is_checked=bool(payload.get("checked", False)),
        quantity=_optional_str(payload, "quantity"),
        category=_optional_str(payload, "category"),
        user_id=_optional_str(payload, "user_id"),
        product_upc=_optional_str(payload, "product_upc"),
    )


def list_from_payload(payload: dict[str, object]) -> List:
    list_id = str(payload["id"])
    return List(
        id=list_id,
        name=str(payload.get("name", "")),
        items=tuple(
            list_item_from_payload(item, list_id=list_id)
            for item in _dicts(payload, "items")
        ),
    )


def category_from_payload(payload: dict[str, object]) -> Category:
    return Category(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        sort_index=_int(payload, "sort_index"),
        icon=_optional_str(payload, "icon"),
    )


def category_group_from_payload(payload: dict[str, object]) -> CategoryGroup:
    return CategoryGroup(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        categories=tuple(
            category_from_payload(category)
            for category in _dicts(payload, "categories")
        ),
    )


def store_from_payload(payload: dict[str, object]) -> Store:
    return Store(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        sort_index=_int(payload, "sort_index"),
    )


def store_filter_from_payload(payload: dict[str, object]) -> StoreFilter:
    return StoreFilter(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        store_ids=_strings(payload, "store_ids"),
    )


def ingredient_from_payload(payload: dict[str, object]) -> Ingredient:
    return Ingredient(
        name=str(payload.get("name", "")),
        quantity=_optional_str(payload, "quantity"),
        note=_optional_str(payload, "note"),
    )


def ingredient_payload(ingredient: IngredientInput) -> dict[str, object]:
    payload: dict[str, object] = {"name": ingredient.name}
    if ingredient.quantity is not None:
        payload["quantity"] = ingredient.quantity
    if ingredient.note is not None:
        payload["note"] = ingredient.note
    return payload


def recipe_from_payload(payload: dict[str, object]) -> Recipe:
    """Build a recipe with its embedded ingredients."""
    return Recipe(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        ingredients=tuple(
            ingredient_from_payload(ingredient)
            for ingredient in _dicts(payload, "ingredients")
        ),
        preparation_steps=_strings(payload, "preparation_steps"),
        note=_optional_str(payload, "note"),
        source_name=_optional_str(payload, "source_name"),
        source_url=_optional_str(payload, "source_url"),
        servings=_optional_str(payload, "servings"),
        prep_time=_optional_int(payload, "prep_time"),
        cook_time=_optional_int(payload, "cook_time"),
        rating=_optional_int(payload, "rating"),
        nutritional_info=_optional_str(payload, "nutritional_info"),
        photo_id=_optional_str(payload, "photo_id"),
    )


def recipe_payload(
    options: CreateRecipeOptions,
    recipe_id: str | None = None,
    name: str | None = None,
) -> dict[str, object]:
    """Build a full recipe write payload.

    Every optional field is present; ``None`` clears it on the service.
    """
    payload: dict[str, object] = {
        "name": name if name is not None else options.name,
        "ingredients": [ingredient_payload(item) for item in options.ingredients],
        "preparation_steps": list(options.preparation_steps),
        "note": options.note,
        "source_name": options.source_name,
        "source_url": options.source_url,
        "servings": options.servings,
        "prep_time": options.prep_time,
        "cook_time": options.cook_time,
        "rating": options.rating,
        "nutritional_info": options.nutritional_info,
        "photo_id": options.photo_id,
    }
    if recipe_id is not None:
        payload["id"] = recipe_id
    return payload


def recipe_collection_from_payload(payload: dict[str, object]) -> RecipeCollection:
    return RecipeCollection(
        id=str(payload["id"]),
        name=str(payload.get("name", "")),
        recipe_ids=_strings(payload, "recipe_ids"),
    )


def favourite_item_from_payload(
    payload: dict[str, object], list_id: str | None = None
) -> FavouriteItem:
    return FavouriteItem(
        id=str(payload["id"]),
        list_id=str(payload.get("list_id") or list_id or ""),
        name=str(payload.get("name", "")),
        quantity=_optional_str(payload, "quantity"),
        details=_optional_str(payload, "details"),
        category=_optional_str(payload, "category"),
    )


def favourites_list_from_payload(payload: dict[str, object]) -> FavouritesList:
    list_id = str(payload["id"])
    return FavouritesList(
        id=list_id,
        name=str(payload.get("name", "")),
        items=tuple(
            favourite_item_from_payload(item, list_id=list_id)
            for item in _dicts(payload, "items")
        ),
        shopping_list_id=_optional_str(payload, "shopping_list_id"),
    )


def meal_plan_event_from_payload(payload: dict[str, object]) -> MealPlanEvent:
    return MealPlanEvent(
        id=str(payload["id"]),
        date=str(payload.get("date", "")),
        title=_optional_str(payload, "title"),
        recipe_id=_optional_str(payload, "recipe_id"),
        label_id=_optional_str(payload, "label_id"),
        details=_optional_str(payload, "details"),
    )


def icalendar_info_from_payload(payload: dict[str, object]) -> ICalendarInfo:
    return ICalendarInfo(
        enabled=bool(payload.get("enabled", False)),
        url=_optional_str(payload, "url"),
        token=_optional_str(payload, "token"),
    )


def _optional_str(payload: dict[str, object], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    return str(value)


def _optional_int(payload: dict[str, object], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    return int(value)


def _int(payload: dict[str, object], key: str) -> int:
    value = payload.get(key)
    return int(value) if value is not None else 0


def _dicts(payload: dict[str, object], key: str) -> list[dict[str, object]]:
    value = payload.get(key) or []
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _strings(payload: dict[str, object], key: str) -> tuple[str, ...]:
    value = payload.get(key) or []
    if not isinstance(value, list):
        return ()
    return tuple(str(entry) for entry in value)
