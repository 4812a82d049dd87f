"""Mount/teardown lifecycles for the notification panel and the settings page."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog

from notification_client.config import Settings, settings as default_settings
from notification_client.memory.notification_feed import NotificationFeed
from notification_client.memory.preference_store import PreferenceStore
from notification_client.models.notification import NotificationId, NotificationModel
from notification_client.notifications.mutator import NotificationMutator
from notification_client.notifications.poller import NotificationPoller
from notification_client.preferences.sync import PreferenceSyncService
from notification_client.tools.api_client import NotAuthenticatedError, NotificationApiClient

logger = structlog.get_logger()


async def resolve_user_id(client: NotificationApiClient) -> Optional[str]:
    """Look up the signed-in user; None means the surface runs unauthenticated."""
    if not client.authenticated:
        return None
    try:
        viewer = await client.fetch_viewer()
    except NotAuthenticatedError:
        return None
    except Exception:
        logger.exception("surface.viewer.failed")
        return None
    return viewer.id


class NotificationCenter:
    """The bell-and-dropdown surface: one feed, its poller and its mutator."""

    def __init__(self, feed: NotificationFeed, poller: NotificationPoller, mutator: NotificationMutator):
        self.feed = feed
        self.poller = poller
        self.mutator = mutator

    @property
    def user_id(self) -> Optional[str]:
        return self.poller.user_id

    @property
    def notifications(self) -> list[NotificationModel]:
        return self.feed.entries

    @property
    def unread_count(self) -> int:
        return self.feed.unread_count

    @property
    def unread_only(self) -> bool:
        return self.feed.unread_only

    async def open_panel(self) -> bool:
        return await self.poller.refresh()

    async def refresh(self) -> bool:
        return await self.poller.refresh()

    async def toggle_unread_only(self) -> bool:
        return await self.poller.set_unread_only(not self.feed.unread_only)

    async def mark_read(self, notification_id: NotificationId) -> bool:
        return await self.mutator.mark_read(notification_id)

    async def mark_all_read(self) -> bool:
        return await self.mutator.mark_all_read()

    async def delete(self, notification_id: NotificationId) -> bool:
        return await self.mutator.delete(notification_id)

    async def delete_all(self) -> bool:
        return await self.mutator.delete_all()


@asynccontextmanager
async def notification_center(
    client: NotificationApiClient,
    user_id: Optional[str] = None,
    *,
    unread_only: bool = False,
    config: Optional[Settings] = None,
) -> AsyncIterator[NotificationCenter]:
    """Mount a notification panel: initial refresh, then polling until exit."""
    config = config or default_settings
    if user_id is None:
        user_id = await resolve_user_id(client)

    feed = NotificationFeed(unread_only=unread_only)
    poller = NotificationPoller(client, feed, user_id, config=config)
    mutator = NotificationMutator(client, feed, user_id)
    center = NotificationCenter(feed, poller, mutator)

    logger.info("surface.notifications.mount", user_id=user_id)
    try:
        await poller.refresh()
        poller.start()
        yield center
    finally:
        await poller.stop()
        feed.close()
        logger.info("surface.notifications.teardown", user_id=user_id)


@asynccontextmanager
async def preference_settings(
    client: NotificationApiClient,
    user_id: Optional[str] = None,
    store: Optional[PreferenceStore] = None,
) -> AsyncIterator[PreferenceSyncService]:
    """Mount the settings page: load once, flush outstanding saves on exit."""
    if user_id is None:
        user_id = await resolve_user_id(client)

    service = PreferenceSyncService(client, store)
    logger.info("surface.preferences.mount", user_id=user_id)
    try:
        await service.load(user_id)
        yield service
    finally:
        await service.close()
        logger.info("surface.preferences.teardown", user_id=user_id)
