"""Preference resolution — effective channel state and display status.

Everything here is pure: no I/O, no mutation of the inputs.
"""

from __future__ import annotations

from typing import Iterable, Optional

from notification_client.models.preferences import (
    CategoryPreferenceModel,
    Channel,
    GlobalSettingsModel,
    StatusSummary,
)

ADMIN_ROLE = "ADMIN"

# Never offered for editing (still delivered as a notification).
_HIDDEN_CATEGORIES = frozenset({"WELCOME_NEW_USER"})

# Only meaningful to administrators.
_ROLE_RESTRICTED_CATEGORIES: dict[str, frozenset[str]] = {
    "NEW_USER_REGISTERED": frozenset({ADMIN_ROLE}),
}


def effective_channel(
    global_settings: GlobalSettingsModel,
    pref: Optional[CategoryPreferenceModel],
    channel: Channel,
) -> bool:
    """Return whether ``channel`` is actually active for a category.

    The global switch caps the category switch; a missing record counts as
    enabled on both channels.
    """
    category_enabled = True if pref is None else pref.enabled(channel)
    return global_settings.enabled(channel) and category_enabled


def aggregate_status(global_settings: GlobalSettingsModel) -> StatusSummary:
    email = global_settings.email_enabled
    web = global_settings.web_enabled

    if email and web:
        return StatusSummary(text="All notifications enabled", severity="success")
    if email:
        return StatusSummary(text="Only email notifications enabled", severity="warning")
    if web:
        return StatusSummary(text="Only web notifications enabled", severity="warning")
    return StatusSummary(text="All notifications disabled", severity="danger")


def filter_applicable(
    categories: Optional[Iterable[str]], viewer_role: Optional[str]
) -> list[str]:
    """Drop categories the viewer cannot act on, preserving order."""
    if categories is None or not viewer_role:
        return []

    result: list[str] = []
    for category in categories:
        if category in _HIDDEN_CATEGORIES:
            continue
        allowed_roles = _ROLE_RESTRICTED_CATEGORIES.get(category)
        if allowed_roles is not None and viewer_role not in allowed_roles:
            continue
        result.append(category)
    return result
