"""Pydantic models for notification records."""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

NotificationId = Union[int, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationModel(BaseModel):
    """A notification as reported by the backend.

    The client only reflects server state and requests transitions; it never
    creates or finalizes one of these on its own.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: NotificationId
    category: str = Field(default="", alias="type")
    title: str = ""
    message: str = ""
    read: bool = False
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    read_at: Optional[datetime] = Field(default=None, alias="readAt")
    item_id: Optional[str] = Field(default=None, alias="itemId")
    item_type: Optional[str] = Field(default=None, alias="itemType")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("created_at", mode="before")
    @classmethod
    def _default_created_at(cls, value: Any) -> Any:
        # Older records come back with createdAt = null
        return _utcnow() if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value: Any) -> Any:
        return {} if value is None else value


class UnreadCountModel(BaseModel):
    count: int = Field(ge=0)
