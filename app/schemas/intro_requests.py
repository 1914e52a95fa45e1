from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, model_validator

from app.core.config import settings


class CreateIntroRequest(BaseModel):
    type: Literal["friend", "introduction"]
    to_user_id: UUID
    via_user_id: UUID | None = None
    message: str | None = None

    @model_validator(mode="after")
    def check_message_length(self) -> "CreateIntroRequest":
        if self.message is not None and len(self.message) > settings.intro_message_max_length:
            raise ValueError(f"message must be {settings.intro_message_max_length} characters or fewer")
        return self


class IntroRequestOut(BaseModel):
    id: UUID
    type: str
    from_user_id: UUID
    to_user_id: UUID
    via_user_id: UUID | None
    message: str | None
    status: str
    connector_status: str
    target_status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
