"""Tests for the notification panel and settings page lifecycles."""

import pytest

from conftest import TEST_USER_ID, make_notification

from notification_client.config import Settings
from notification_client.models.preferences import GlobalSettingsModel
from notification_client.surface import (
    notification_center,
    preference_settings,
    resolve_user_id,
)
from notification_client.tools.api_client import NotificationApiError


@pytest.fixture()
def test_settings():
    return Settings(api_base_url="http://backend.test", poll_interval_sec=60)


class TestNotificationCenter:
    @pytest.mark.asyncio
    async def test_mount_refreshes_and_teardown_stops(self, client, test_settings):
        client.fetch_notifications.return_value = [make_notification(1), make_notification(2)]
        client.fetch_unread_count.return_value = 2

        async with notification_center(client, config=test_settings) as center:
            assert center.user_id == TEST_USER_ID
            assert center.unread_count == 2
            assert center.poller.running is True

            await center.mark_read(1)
            assert center.unread_count == 1

        assert center.poller.running is False
        assert center.feed.closed is True
        assert await center.refresh() is False
        assert await center.delete(2) is False

    @pytest.mark.asyncio
    async def test_toggle_unread_only(self, client, test_settings):
        async with notification_center(client, TEST_USER_ID, config=test_settings) as center:
            await center.toggle_unread_only()
            assert center.unread_only is True

        client.fetch_notifications.assert_awaited_with(TEST_USER_ID, unread_only=True)

    @pytest.mark.asyncio
    async def test_unauthenticated_mount_shows_empty_feed(self, anonymous_client, test_settings):
        async with notification_center(anonymous_client, config=test_settings) as center:
            assert center.user_id is None
            assert center.notifications == []
            assert center.unread_count == 0

        anonymous_client.fetch_notifications.assert_not_awaited()


class TestPreferenceSettings:
    @pytest.mark.asyncio
    async def test_mount_loads(self, client):
        client.fetch_global_settings.return_value = GlobalSettingsModel(web_enabled=False)

        async with preference_settings(client) as service:
            assert service.loading is False
            assert service.store.global_settings.web_enabled is False
            await service.set_global("web", True)

        client.replace_global_settings.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_viewer_lookup_failure_degrades(self, client):
        client.fetch_viewer.side_effect = NotificationApiError("down")

        assert await resolve_user_id(client) is None
