"""Notification mutations — optimistic local change first, remote call second."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import structlog

from notification_client.memory.notification_feed import NotificationFeed, PendingIntent
from notification_client.models.notification import NotificationId
from notification_client.tools.api_client import NotAuthenticatedError, NotificationApiClient

logger = structlog.get_logger()


class NotificationMutator:
    """Applies read/delete actions to the feed and mirrors them remotely.

    Each method returns True when the server acknowledged the change. Remote
    failures are logged and the optimistic state is left in place; the next
    poll is what brings the feed back in line.
    """

    def __init__(
        self,
        client: NotificationApiClient,
        feed: NotificationFeed,
        user_id: Optional[str],
    ):
        self.client = client
        self.feed = feed
        self.user_id = user_id

    async def mark_read(self, notification_id: NotificationId) -> bool:
        if self.feed.closed:
            return False
        intent = self.feed.mark_read_local(notification_id)
        if intent is None:
            logger.debug("feed.mark_read.noop", notification_id=notification_id)
            return False
        return await self._mirror(
            "mark_read",
            intent,
            lambda: self.client.mark_read(notification_id),
            notification_id=notification_id,
        )

    async def mark_all_read(self) -> bool:
        if self.feed.closed:
            return False
        intent = self.feed.mark_all_read_local()
        return await self._mirror(
            "mark_all_read",
            intent,
            lambda: self.client.mark_all_read(self._require_user()),
        )

    async def delete(self, notification_id: NotificationId) -> bool:
        if self.feed.closed:
            return False
        intent = self.feed.remove_local(notification_id)
        if intent is None:
            # Already gone locally (double click, or an earlier delete).
            logger.debug("feed.delete.noop", notification_id=notification_id)
            return False
        return await self._mirror(
            "delete",
            intent,
            lambda: self.client.delete_notification(notification_id),
            notification_id=notification_id,
        )

    async def delete_all(self) -> bool:
        if self.feed.closed:
            return False
        intent = self.feed.clear_local()
        return await self._mirror(
            "delete_all",
            intent,
            lambda: self.client.delete_all(self._require_user()),
        )

    def _require_user(self) -> str:
        if not self.user_id:
            raise NotAuthenticatedError("no signed-in user")
        return self.user_id

    async def _mirror(
        self,
        action: str,
        intent: PendingIntent,
        call: Callable[[], Awaitable[None]],
        **context,
    ) -> bool:
        try:
            await call()
        except NotAuthenticatedError:
            logger.warning(f"feed.{action}.skip", reason="not authenticated", **context)
            self.feed.settle(intent, acknowledged=False)
            return False
        except Exception:
            logger.exception(f"feed.{action}.failed", user_id=self.user_id, **context)
            self.feed.settle(intent, acknowledged=False)
            return False

        self.feed.settle(intent, acknowledged=True)
        logger.info(f"feed.{action}.done", user_id=self.user_id, **context)
        return True
