from __future__ import annotations

from pydantic import BaseModel


class SettingsOut(BaseModel):
    notifications_enabled: bool
    email_updates_enabled: bool
    intro_requests_enabled: bool

    model_config = {"from_attributes": True}


class UpdateSettingsRequest(BaseModel):
    notifications_enabled: bool | None = None
    email_updates_enabled: bool | None = None
    intro_requests_enabled: bool | None = None
