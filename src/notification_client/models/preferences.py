"""Pydantic models for notification preferences."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Channel(str, Enum):
    EMAIL = "email"
    WEB = "web"


class GlobalSettingsModel(BaseModel):
    """Per-user master switches, one per channel."""

    model_config = ConfigDict(populate_by_name=True)

    email_enabled: bool = Field(default=True, alias="emailNotificationsEnabled")
    web_enabled: bool = Field(default=True, alias="webNotificationsEnabled")

    def enabled(self, channel: Channel) -> bool:
        return self.email_enabled if Channel(channel) is Channel.EMAIL else self.web_enabled

    def with_channel(self, channel: Channel, value: bool) -> "GlobalSettingsModel":
        field = "email_enabled" if Channel(channel) is Channel.EMAIL else "web_enabled"
        return self.model_copy(update={field: value})


class CategoryPreferenceModel(BaseModel):
    """Channel switches for a single notification category."""

    model_config = ConfigDict(populate_by_name=True)

    category: str = Field(alias="type")
    email_enabled: bool = Field(default=True, alias="emailEnabled")
    web_enabled: bool = Field(default=True, alias="webEnabled")

    def enabled(self, channel: Channel) -> bool:
        return self.email_enabled if Channel(channel) is Channel.EMAIL else self.web_enabled

    def with_channel(self, channel: Channel, value: bool) -> "CategoryPreferenceModel":
        field = "email_enabled" if Channel(channel) is Channel.EMAIL else "web_enabled"
        return self.model_copy(update={field: value})


class StatusSummary(BaseModel):
    text: str
    severity: Literal["success", "warning", "danger"]


class ViewerModel(BaseModel):
    """The acting user as reported by /api/users/me."""

    id: str
    role: str = "USER"
    username: str = ""
