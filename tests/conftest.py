"""
Shared fixtures for notification-client tests.
The remote backend is replaced by an AsyncMock specced on NotificationApiClient,
so nothing here touches the network.
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

# Set test environment BEFORE any imports that read settings
os.environ.setdefault("NOTIFY_API_BASE_URL", "http://backend.test")
os.environ.setdefault("NOTIFY_POLL_INTERVAL_SEC", "30")

from notification_client.memory.notification_feed import NotificationFeed  # noqa: E402
from notification_client.models.notification import NotificationModel  # noqa: E402
from notification_client.models.preferences import (  # noqa: E402
    CategoryPreferenceModel,
    GlobalSettingsModel,
    ViewerModel,
)
from notification_client.tools.api_client import NotificationApiClient  # noqa: E402

TEST_USER_ID = "user-123"
BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_notification(notification_id, read=False, category="NEW_MOVIE_RELEASE", **extra):
    return NotificationModel(
        id=notification_id,
        category=category,
        title=f"Notification {notification_id}",
        message="Something happened",
        read=read,
        created_at=BASE_TIME,
        read_at=BASE_TIME if read else None,
        **extra,
    )


def make_feed(*entries, unread_only=False):
    feed = NotificationFeed(unread_only=unread_only)
    feed.apply_refresh(feed.begin_refresh(), list(entries), sum(not e.read for e in entries))
    return feed


# ─── Remote backend mock ───────────────────────────────────────────────

@pytest.fixture()
def client():
    """AsyncMock backend with an authenticated caller and empty defaults."""
    mock = AsyncMock(spec=NotificationApiClient)
    mock.authenticated = True
    mock.token = "test-token"
    mock.fetch_notifications.return_value = []
    mock.fetch_unread_count.return_value = 0
    mock.fetch_viewer.return_value = ViewerModel(id=TEST_USER_ID, role="USER")
    mock.fetch_global_settings.return_value = GlobalSettingsModel()
    mock.fetch_categories.return_value = []
    mock.fetch_preferences.return_value = []
    mock.mark_read.return_value = None
    mock.mark_all_read.return_value = None
    mock.delete_notification.return_value = None
    mock.delete_all.return_value = None
    mock.replace_global_settings.return_value = None
    mock.replace_preferences.return_value = None
    return mock


@pytest.fixture()
def anonymous_client(client):
    """Same backend, no bearer token."""
    client.authenticated = False
    client.token = None
    return client


@pytest.fixture()
def sample_preferences():
    return [
        CategoryPreferenceModel(category="NEW_MOVIE_RELEASE", email_enabled=False, web_enabled=True),
        CategoryPreferenceModel(category="RECOMMENDATION", email_enabled=True, web_enabled=False),
    ]
