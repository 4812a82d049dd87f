"""Preference sync — loads the store and pushes every local change remotely."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional

import structlog

from notification_client.memory.preference_store import PreferenceStore
from notification_client.models.preferences import (
    CategoryPreferenceModel,
    Channel,
    GlobalSettingsModel,
)
from notification_client.preferences.labels import sort_categories
from notification_client.preferences.resolver import filter_applicable
from notification_client.tools.api_client import NotAuthenticatedError, NotificationApiClient

logger = structlog.get_logger()

_UNSET = object()
_FAILED = object()


class _CoalescingWriter:
    """Sends full-state writes for one target strictly one at a time.

    A value submitted while a write is in flight waits for it; if several are
    submitted meanwhile only the latest is sent, and every waiter gets that
    write's outcome.
    """

    def __init__(self, target: str, send: Callable[[Any], Awaitable[bool]]):
        self.target = target
        self._send = send
        self._pending: Any = _UNSET
        self._waiters: list[asyncio.Future] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, payload: Any) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        if self._pending is not _UNSET:
            logger.debug("preferences.write.coalesced", target=self.target)
        self._pending = payload
        self._waiters.append(future)
        if not self.busy:
            self._task = asyncio.create_task(self._drain())
        return future

    async def _drain(self) -> None:
        waiters: list[asyncio.Future] = []
        try:
            while self._pending is not _UNSET:
                payload, self._pending = self._pending, _UNSET
                waiters, self._waiters = self._waiters, []
                ok = await self._send(payload)
                for waiter in waiters:
                    if not waiter.done():
                        waiter.set_result(ok)
        finally:
            # Cancelled mid-write: nobody may be left waiting.
            for waiter in waiters + self._waiters:
                if not waiter.done():
                    waiter.set_result(False)

    async def wait_idle(self) -> None:
        if self._task is not None:
            await asyncio.shield(self._task)


class PreferenceSyncService:
    """Owns the load/save protocol for one PreferenceStore.

    Local state is updated optimistically before every remote write and is
    not rolled back when the write fails; the failure is surfaced through
    ``error`` instead so the user can retry.
    """

    def __init__(self, client: NotificationApiClient, store: Optional[PreferenceStore] = None):
        self.client = client
        self.store = store or PreferenceStore()
        self.user_id: Optional[str] = None
        self.loading = False
        self.error: Optional[str] = None

        self._generation = 0
        self._closed = False
        self._global_touched = False
        self._preferences_touched = False
        self._global_writer = _CoalescingWriter("global", self._send_global)
        self._preferences_writer = _CoalescingWriter("preferences", self._send_preferences)

    @property
    def saving(self) -> bool:
        return self._global_writer.busy or self._preferences_writer.busy

    def clear_error(self) -> None:
        self.error = None

    # -----------------------------------------------------------------------
    # Load
    # -----------------------------------------------------------------------

    async def load(self, user_id: Optional[str]) -> None:
        """Fetch every slice concurrently; a failed slice keeps its prior value.

        With no user only the public category list is fetched and everything
        else stays at its defaults.
        """
        self._generation += 1
        generation = self._generation

        same_user = user_id == self.user_id
        if not same_user:
            self.store.reset()
        self.user_id = user_id
        self.loading = True
        self.error = None
        # A write still in flight may land after this load's GET; keep its value.
        self._global_touched = same_user and self._global_writer.busy
        self._preferences_touched = same_user and self._preferences_writer.busy

        logger.info("preferences.load.start", user_id=user_id)
        global_settings, categories, preferences, viewer = await asyncio.gather(
            self._fetch("global", self._for_user(user_id, self.client.fetch_global_settings)),
            self._fetch("categories", self.client.fetch_categories()),
            self._fetch("preferences", self._for_user(user_id, self.client.fetch_preferences)),
            self._fetch("viewer", self.client.fetch_viewer()),
        )

        if self._closed or generation != self._generation:
            logger.info("preferences.load.discarded", user_id=user_id, reason="superseded")
            return

        # Toggles made while loading win over what the server sent back.
        if global_settings is not _FAILED and not self._global_touched:
            self.store.replace_global(global_settings)
        if categories is not _FAILED:
            self.store.replace_categories(categories)
        if preferences is not _FAILED and not self._preferences_touched:
            self.store.replace_preferences(preferences)
        if viewer is not _FAILED:
            self.store.set_viewer(viewer)

        self.loading = False
        logger.info(
            "preferences.load.done",
            user_id=user_id,
            category_count=len(self.store.categories),
            record_count=len(self.store.preferences()),
        )

    async def _for_user(
        self, user_id: Optional[str], fetch: Callable[[str], Awaitable[Any]]
    ) -> Any:
        if user_id is None:
            raise NotAuthenticatedError("no signed-in user")
        return await fetch(user_id)

    async def _fetch(self, slice_name: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except NotAuthenticatedError:
            logger.info("preferences.load.skip", slice=slice_name, reason="not authenticated")
            return _FAILED
        except Exception:
            logger.exception("preferences.load.failed", slice=slice_name)
            return _FAILED

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    async def set_global(self, channel: Channel, value: bool) -> bool:
        """Flip one global switch and push the whole settings object.

        Returns True once the write (or a newer one that superseded it)
        was acknowledged.
        """
        if self._closed:
            return False
        updated = self.store.global_settings.with_channel(Channel(channel), value)
        self.store.replace_global(updated)
        self._global_touched = True
        return await self._global_writer.submit((self.user_id, updated))

    async def set_category_preference(
        self, category: str, channel: Channel, value: bool
    ) -> bool:
        """Flip one category switch and push the whole preference collection."""
        if self._closed:
            return False
        updated = self.store.with_preference(category, Channel(channel), value)
        self.store.replace_preferences(updated)
        self._preferences_touched = True
        return await self._preferences_writer.submit((self.user_id, updated))

    async def _send_global(self, payload: tuple[Optional[str], GlobalSettingsModel]) -> bool:
        user_id, global_settings = payload
        return await self._write(
            "global",
            lambda: self.client.replace_global_settings(user_id, global_settings),
            user_id,
            "Could not save global notification settings",
        )

    async def _send_preferences(
        self, payload: tuple[Optional[str], list[CategoryPreferenceModel]]
    ) -> bool:
        user_id, preferences = payload
        return await self._write(
            "preferences",
            lambda: self.client.replace_preferences(user_id, preferences),
            user_id,
            "Could not save notification preferences",
        )

    async def _write(
        self,
        target: str,
        call: Callable[[], Awaitable[None]],
        user_id: Optional[str],
        failure_message: str,
    ) -> bool:
        generation = self._generation
        try:
            if user_id is None:
                raise NotAuthenticatedError(f"no user loaded for {target} write")
            await call()
        except NotAuthenticatedError:
            logger.warning("preferences.write.skip", target=target, reason="not authenticated")
            self._surface_error(generation, "Sign in to save notification settings")
            return False
        except Exception:
            logger.exception("preferences.write.failed", target=target, user_id=user_id)
            self._surface_error(generation, failure_message)
            return False

        logger.info("preferences.write.done", target=target, user_id=user_id)
        return True

    def _surface_error(self, generation: int, message: str) -> None:
        if not self._closed and generation == self._generation:
            self.error = message

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def preference_for(self, category: str) -> CategoryPreferenceModel:
        return self.store.get(category)

    def applicable_categories(self) -> list[str]:
        viewer = self.store.viewer
        role = viewer.role if viewer is not None else None
        return sort_categories(filter_applicable(self.store.categories, role))

    # -----------------------------------------------------------------------
    # Teardown
    # -----------------------------------------------------------------------

    async def close(self) -> None:
        """Let outstanding saves land, then stop applying any further results."""
        self._closed = True
        await self._global_writer.wait_idle()
        await self._preferences_writer.wait_idle()
