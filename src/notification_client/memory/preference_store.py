"""Preference store — one user's global switches and per-category records."""

from __future__ import annotations

from typing import Iterable, Optional

from notification_client.models.preferences import (
    CategoryPreferenceModel,
    Channel,
    GlobalSettingsModel,
    ViewerModel,
)


class PreferenceStore:
    """In-memory preference state for a single user.

    Owned by exactly one settings surface and mutated only through
    PreferenceSyncService. Categories without a record read back as an
    all-enabled default that is not stored until it is changed.
    """

    def __init__(self):
        self.reset()

    # --- reads -------------------------------------------------------------

    @property
    def global_settings(self) -> GlobalSettingsModel:
        return self._global

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def viewer(self) -> Optional[ViewerModel]:
        return self._viewer

    def preferences(self) -> list[CategoryPreferenceModel]:
        """Explicit records only, in the order they were stored."""
        return list(self._preferences.values())

    def has_record(self, category: str) -> bool:
        return category in self._preferences

    def get(self, category: str) -> CategoryPreferenceModel:
        pref = self._preferences.get(category)
        if pref is None:
            return CategoryPreferenceModel(category=category)
        return pref

    def with_preference(
        self, category: str, channel: Channel, value: bool
    ) -> list[CategoryPreferenceModel]:
        """Full collection with one record replaced (or appended from defaults)."""
        updated = self.get(category).with_channel(channel, value)
        result: list[CategoryPreferenceModel] = []
        replaced = False
        for pref in self._preferences.values():
            if pref.category == category:
                result.append(updated)
                replaced = True
            else:
                result.append(pref)
        if not replaced:
            result.append(updated)
        return result

    # --- writes (PreferenceSyncService only) --------------------------------

    def replace_global(self, global_settings: GlobalSettingsModel) -> None:
        self._global = global_settings

    def replace_categories(self, categories: Iterable[str]) -> None:
        self._categories = list(categories)

    def replace_preferences(self, preferences: Iterable[CategoryPreferenceModel]) -> None:
        self._preferences = {pref.category: pref for pref in preferences}

    def set_viewer(self, viewer: Optional[ViewerModel]) -> None:
        self._viewer = viewer

    def reset(self) -> None:
        self._global = GlobalSettingsModel()
        self._categories: list[str] = []
        self._preferences: dict[str, CategoryPreferenceModel] = {}
        self._viewer: Optional[ViewerModel] = None
