"""Notification/preference backend client — async httpx wrapper."""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from notification_client.config import Settings, settings as default_settings
from notification_client.models.notification import (
    NotificationId,
    NotificationModel,
    UnreadCountModel,
)
from notification_client.models.preferences import (
    CategoryPreferenceModel,
    GlobalSettingsModel,
    ViewerModel,
)

logger = structlog.get_logger()

_NOTIFICATIONS = "/api/notifications"
_PREFERENCES = "/api/notification-preferences"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class NotificationApiError(RuntimeError):
    """A remote call failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotAuthenticatedError(NotificationApiError):
    """An authenticated route was called without a bearer token."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class NotificationApiClient:
    """Thin typed wrapper over the notification REST routes.

    Every route except the category-tag enumeration requires a bearer token.
    Without one, those calls raise NotAuthenticatedError before any I/O so
    callers can degrade to an unauthenticated view.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        config: Optional[Settings] = None,
    ):
        config = config or default_settings
        self.token = token if token is not None else config.api_token
        self._http = httpx.AsyncClient(
            base_url=base_url or config.api_base_url,
            timeout=timeout if timeout is not None else config.request_timeout_sec,
            transport=transport,
        )

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "NotificationApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = True,
        json: Any = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if auth:
            if not self.token:
                raise NotAuthenticatedError(f"{method} {path} requires a bearer token")
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            resp = await self._http.request(method, path, headers=headers, json=json)
        except httpx.HTTPError as exc:
            raise NotificationApiError(f"{method} {path} failed: {exc}") from exc

        if resp.is_error:
            raise NotificationApiError(
                f"{method} {path} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        logger.debug("api.request.done", method=method, path=path, status=resp.status_code)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise NotificationApiError(
                f"{method} {path} returned a non-JSON body", status_code=resp.status_code
            ) from exc

    # --- identity ----------------------------------------------------------

    async def fetch_viewer(self) -> ViewerModel:
        data = await self._request("GET", "/api/users/me")
        return ViewerModel.model_validate(data)

    # --- notifications -----------------------------------------------------

    async def fetch_notifications(
        self, user_id: str, unread_only: bool = False
    ) -> list[NotificationModel]:
        path = f"{_NOTIFICATIONS}/user/{user_id}"
        if unread_only:
            path += "/unread"
        data = await self._request("GET", path)
        return [NotificationModel.model_validate(item) for item in data or []]

    async def fetch_unread_count(self, user_id: str) -> int:
        data = await self._request("GET", f"{_NOTIFICATIONS}/user/{user_id}/unread/count")
        return UnreadCountModel.model_validate(data).count

    async def mark_read(self, notification_id: NotificationId) -> None:
        await self._request("PUT", f"{_NOTIFICATIONS}/{notification_id}/read")

    async def mark_all_read(self, user_id: str) -> None:
        await self._request("PUT", f"{_NOTIFICATIONS}/user/{user_id}/read-all")

    async def delete_notification(self, notification_id: NotificationId) -> None:
        await self._request("DELETE", f"{_NOTIFICATIONS}/{notification_id}")

    async def delete_all(self, user_id: str) -> None:
        await self._request("DELETE", f"{_NOTIFICATIONS}/user/{user_id}/delete-all")

    # --- preferences -------------------------------------------------------

    async def fetch_global_settings(self, user_id: str) -> GlobalSettingsModel:
        data = await self._request("GET", f"{_PREFERENCES}/user/{user_id}/global")
        return GlobalSettingsModel.model_validate(data)

    async def replace_global_settings(
        self, user_id: str, global_settings: GlobalSettingsModel
    ) -> None:
        await self._request(
            "PUT",
            f"{_PREFERENCES}/user/{user_id}/global",
            json=global_settings.model_dump(by_alias=True),
        )

    async def fetch_categories(self) -> list[str]:
        data = await self._request("GET", f"{_PREFERENCES}/types", auth=False)
        return [str(tag) for tag in data or []]

    async def fetch_preferences(self, user_id: str) -> list[CategoryPreferenceModel]:
        data = await self._request("GET", f"{_PREFERENCES}/user/{user_id}")
        return [CategoryPreferenceModel.model_validate(item) for item in data or []]

    async def replace_preferences(
        self, user_id: str, preferences: list[CategoryPreferenceModel]
    ) -> None:
        await self._request(
            "PUT",
            f"{_PREFERENCES}/user/{user_id}",
            json=[pref.model_dump(by_alias=True) for pref in preferences],
        )
