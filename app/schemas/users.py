from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserSummary(BaseModel):
    id: UUID
    username: str
    display_name: str
    photo_url: str | None = None


class UserProfile(UserSummary):
    location: str | None = None
    about: str | None = None
    instagram_handle: str | None = None
    whatsapp_number: str | None = None
    phone_number: str | None = None


class MeResponse(UserProfile):
    email: EmailStr


class UpdateProfileRequest(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=50)
    display_name: str | None = Field(default=None, min_length=1, max_length=120)
    photo_url: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=120)
    about: str | None = Field(default=None, max_length=1000)
    instagram_handle: str | None = Field(default=None, max_length=64)
    whatsapp_number: str | None = Field(default=None, max_length=32)
    phone_number: str | None = Field(default=None, max_length=32)


class DeleteAccountResponse(BaseModel):
    ok: bool
