"""Display labels, ordering and grouping for notification categories."""

from __future__ import annotations

from typing import Iterable

_LABELS: dict[str, str] = {
    "MOVIE_WATCHLIST_RELEASED": "Movie from your watchlist is available",
    "SERIES_NEW_SEASON": "New season available",
    "SERIES_NEW_EPISODE": "New episode available",
    "SERIES_STATUS_CHANGED": "Series status update",
    "WATCHLIST_ITEM_REVIEWED": "Watchlist item reviewed",
    "FAVORITE_ITEM_REVIEWED": "Favorite reviewed",
    "MILESTONE_REACHED": "Milestone reached",
    "UPCOMING_RELEASES": "Weekly release digest",
    "SYSTEM_ANNOUNCEMENT": "System announcement",
    "NEW_MOVIE_RELEASE": "New movie release",
    "NEW_EPISODE_AVAILABLE": "New episode available",
    "SERIES_STATUS_UPDATE": "Series status update",
    "WATCHLIST_REMINDER": "Watchlist reminder",
    "RATING_UPDATE": "Rating update",
    "NEW_SEASON_ANNOUNCED": "New season announced",
    "RECOMMENDATION": "Recommendation",
    "BIRTHDAY_REMINDER": "Birthday reminder",
    "NEW_USER_REGISTERED": "New user registered",
}

_DISPLAY_ORDER: tuple[str, ...] = (
    "MOVIE_WATCHLIST_RELEASED",
    "SERIES_NEW_SEASON",
    "SERIES_NEW_EPISODE",
    "SERIES_STATUS_CHANGED",
    "WATCHLIST_ITEM_REVIEWED",
    "FAVORITE_ITEM_REVIEWED",
    "RATING_UPDATE",
    "MILESTONE_REACHED",
    "UPCOMING_RELEASES",
    "NEW_MOVIE_RELEASE",
    "NEW_EPISODE_AVAILABLE",
    "SERIES_STATUS_UPDATE",
    "WATCHLIST_REMINDER",
    "NEW_SEASON_ANNOUNCED",
    "RECOMMENDATION",
    "BIRTHDAY_REMINDER",
    "SYSTEM_ANNOUNCEMENT",
)
_RANK = {tag: index for index, tag in enumerate(_DISPLAY_ORDER)}

_GROUPS: dict[str, tuple[str, tuple[str, ...]]] = {
    "watchlist": (
        "Watchlist",
        (
            "MOVIE_WATCHLIST_RELEASED",
            "SERIES_NEW_SEASON",
            "SERIES_NEW_EPISODE",
            "SERIES_STATUS_CHANGED",
        ),
    ),
    "reviews": (
        "Reviews",
        ("WATCHLIST_ITEM_REVIEWED", "FAVORITE_ITEM_REVIEWED", "RATING_UPDATE"),
    ),
    "achievements": ("Achievements", ("MILESTONE_REACHED", "UPCOMING_RELEASES")),
    "general": (
        "General",
        (
            "NEW_MOVIE_RELEASE",
            "NEW_EPISODE_AVAILABLE",
            "SERIES_STATUS_UPDATE",
            "WATCHLIST_REMINDER",
            "NEW_SEASON_ANNOUNCED",
            "RECOMMENDATION",
            "BIRTHDAY_REMINDER",
            "SYSTEM_ANNOUNCEMENT",
        ),
    ),
}


def category_label(category: str) -> str:
    return _LABELS.get(category, category)


def sort_categories(categories: Iterable[str]) -> list[str]:
    """Sort into display order; unknown tags go last in their original order."""
    return sorted(categories, key=lambda tag: _RANK.get(tag, len(_RANK)))


def group_categories(categories: Iterable[str]) -> dict[str, dict]:
    """Group tags for the settings page, omitting groups with nothing available."""
    available = set(categories)
    result: dict[str, dict] = {}
    for key, (title, members) in _GROUPS.items():
        present = [tag for tag in members if tag in available]
        if present:
            result[key] = {"title": title, "categories": present}
    return result
