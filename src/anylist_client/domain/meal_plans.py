"""Domain models for meal planning and calendar sync."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MealPlanEvent:
    """A meal plan calendar entry. ``date`` is ``YYYY-MM-DD``."""

    id: str
    date: str
    title: str | None = None
    recipe_id: str | None = None
    label_id: str | None = None
    details: str | None = None


@dataclass(frozen=True)
class ICalendarInfo:
    """iCalendar sync state for the user."""

    enabled: bool
    url: str | None = None
    token: str | None = None
