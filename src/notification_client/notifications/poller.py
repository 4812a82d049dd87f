"""Notification poller — periodic and on-demand refresh of a NotificationFeed."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

import structlog

from notification_client.config import Settings, settings as default_settings
from notification_client.memory.notification_feed import NotificationFeed
from notification_client.tools.api_client import NotAuthenticatedError, NotificationApiClient

logger = structlog.get_logger()


class NotificationPoller:
    """Keeps a feed in step with the server while it is mounted.

    The interval runs on a fixed schedule; manual refreshes happen in between
    without shifting it. ``stop()`` cancels the interval task and waits for
    it, after which nothing is written to the feed.
    """

    def __init__(
        self,
        client: NotificationApiClient,
        feed: NotificationFeed,
        user_id: Optional[str],
        interval_sec: Optional[float] = None,
        config: Optional[Settings] = None,
    ):
        config = config or default_settings
        self.client = client
        self.feed = feed
        self.user_id = user_id
        self.interval_sec = interval_sec if interval_sec is not None else config.poll_interval_sec
        self.refreshing = False
        self._in_flight = 0
        self._task: Optional[asyncio.Task] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> bool:
        """Fetch the list and unread count together and swap them in.

        Returns True when the result was applied to the feed.
        """
        if self._stopped:
            return False

        if not self.user_id or not self.client.authenticated:
            logger.info("feed.refresh.skip", reason="not authenticated")
            self.feed.clear()
            return False

        token = self.feed.begin_refresh()
        unread_only = self.feed.unread_only

        self._in_flight += 1
        self.refreshing = True
        try:
            entries, count = await asyncio.gather(
                self.client.fetch_notifications(self.user_id, unread_only=unread_only),
                self.client.fetch_unread_count(self.user_id),
                return_exceptions=True,
            )
        finally:
            self._in_flight -= 1
            self.refreshing = self._in_flight > 0

        for result in (entries, count):
            if isinstance(result, NotAuthenticatedError):
                logger.info("feed.refresh.skip", reason="not authenticated")
                return False
            if isinstance(result, BaseException):
                logger.warning(
                    "feed.refresh.failed",
                    user_id=self.user_id,
                    error=repr(result),
                )
                return False

        if self._stopped:
            return False

        applied = self.feed.apply_refresh(token, entries, count, unread_only=unread_only)
        if applied:
            logger.info(
                "feed.refresh.done",
                user_id=self.user_id,
                unread_only=unread_only,
                entry_count=len(self.feed),
                unread_count=self.feed.unread_count,
            )
        return applied

    async def set_unread_only(self, unread_only: bool) -> bool:
        """Switch view mode; a change triggers an immediate refresh."""
        if not self.feed.set_unread_only(unread_only):
            return False
        return await self.refresh()

    def start(self) -> None:
        if self._stopped:
            raise RuntimeError("poller was stopped; create a new one")
        if not self.running:
            self._task = asyncio.create_task(self._run(), name="notification-poller")
            logger.info("feed.poller.started", interval_sec=self.interval_sec)

    async def stop(self) -> None:
        self._stopped = True
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("feed.poller.stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval_sec
        while not self._stopped:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            # Skip ticks missed while a slow refresh was running.
            now = loop.time()
            while next_tick <= now:
                next_tick += self.interval_sec
            await self.refresh()
