"""Notification feed — the locally held, ordered view of a user's notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog

from notification_client.models.notification import NotificationId, NotificationModel

logger = structlog.get_logger()


@dataclass(eq=False)
class PendingIntent:
    """A local change the server has not confirmed yet.

    Refresh results requested before the acknowledgement still get the change
    re-applied on top; the first refresh requested after it drops the intent.
    """

    kind: str  # "read" | "delete" | "read_all" | "delete_all"
    ids: frozenset
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    acked_after: Optional[int] = None


class NotificationFeed:
    """Ordered notifications plus a derived unread count.

    ``unread_count`` is computed from the held entries, so no local mutation
    can leave it stale or negative.
    """

    def __init__(self, unread_only: bool = False):
        self.unread_only = unread_only
        self.reported_unread_count: Optional[int] = None
        self.loaded = False
        self._entries: list[NotificationModel] = []
        self._intents: list[PendingIntent] = []
        self._issued = 0
        self._applied = 0
        self._closed = False

    # --- reads -------------------------------------------------------------

    @property
    def entries(self) -> list[NotificationModel]:
        return list(self._entries)

    @property
    def unread_count(self) -> int:
        return sum(1 for entry in self._entries if not entry.read)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_intents(self) -> int:
        return len(self._intents)

    def get(self, notification_id: NotificationId) -> Optional[NotificationModel]:
        for entry in self._entries:
            if entry.id == notification_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    # --- refresh protocol --------------------------------------------------

    def begin_refresh(self) -> int:
        """Hand out a token identifying a refresh about to be requested."""
        self._issued += 1
        return self._issued

    def apply_refresh(
        self,
        token: int,
        entries: Iterable[NotificationModel],
        reported_unread_count: Optional[int],
        unread_only: Optional[bool] = None,
    ) -> bool:
        """Replace the feed with a server snapshot in one step.

        Returns False when the snapshot was dropped: the feed is closed, a
        newer snapshot was already applied, or it was fetched for the other
        view mode.
        """
        if self._closed:
            logger.debug("feed.refresh.dropped", token=token, reason="closed")
            return False
        if token <= self._applied:
            logger.debug("feed.refresh.dropped", token=token, reason="stale")
            return False
        if unread_only is not None and unread_only != self.unread_only:
            logger.debug("feed.refresh.dropped", token=token, reason="view changed")
            return False

        self._applied = token
        self._intents = [
            intent
            for intent in self._intents
            if intent.acked_after is None or token <= intent.acked_after
        ]

        snapshot = list(entries)
        for intent in self._intents:
            snapshot = self._apply_intent(snapshot, intent)

        self._entries = snapshot
        self.reported_unread_count = reported_unread_count
        self.loaded = True

        if reported_unread_count is not None and reported_unread_count != self.unread_count:
            logger.debug(
                "feed.unread_count.mismatch",
                reported=reported_unread_count,
                held=self.unread_count,
            )
        return True

    def clear(self) -> None:
        """Empty the feed, e.g. when there is no signed-in user."""
        self._applied = self.begin_refresh()
        self._entries = []
        self._intents = []
        self.reported_unread_count = 0
        self.loaded = True

    def set_unread_only(self, unread_only: bool) -> bool:
        """Switch view mode; read entries leave the list right away."""
        changed = unread_only != self.unread_only
        self.unread_only = unread_only
        if changed and unread_only:
            self._entries = [entry for entry in self._entries if not entry.read]
        return changed

    def close(self) -> None:
        self._closed = True

    # --- optimistic mutations ----------------------------------------------

    def mark_read_local(self, notification_id: NotificationId) -> Optional[PendingIntent]:
        entry = self.get(notification_id)
        if entry is None or entry.read:
            return None
        return self._record(PendingIntent(kind="read", ids=frozenset({notification_id})))

    def mark_all_read_local(self) -> PendingIntent:
        ids = frozenset(entry.id for entry in self._entries)
        return self._record(PendingIntent(kind="read_all", ids=ids))

    def remove_local(self, notification_id: NotificationId) -> Optional[PendingIntent]:
        if self.get(notification_id) is None:
            return None
        return self._record(PendingIntent(kind="delete", ids=frozenset({notification_id})))

    def clear_local(self) -> PendingIntent:
        ids = frozenset(entry.id for entry in self._entries)
        return self._record(PendingIntent(kind="delete_all", ids=ids))

    def settle(self, intent: PendingIntent, acknowledged: bool) -> None:
        """Record the server's answer for an optimistic change.

        A failed change is forgotten so the next refresh shows server truth.
        """
        if not acknowledged:
            if intent in self._intents:
                self._intents.remove(intent)
            return
        intent.acked_after = self._issued

    def _record(self, intent: PendingIntent) -> PendingIntent:
        self._intents.append(intent)
        self._entries = self._apply_intent(self._entries, intent)
        return intent

    def _apply_intent(
        self, entries: list[NotificationModel], intent: PendingIntent
    ) -> list[NotificationModel]:
        if intent.kind in ("delete", "delete_all"):
            return [entry for entry in entries if entry.id not in intent.ids]

        result: list[NotificationModel] = []
        for entry in entries:
            if entry.id in intent.ids and not entry.read:
                if self.unread_only:
                    continue
                entry = entry.model_copy(update={"read": True, "read_at": intent.at})
            result.append(entry)
        return result
