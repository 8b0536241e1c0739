from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoginSession(BaseModel):
    """Server-issued identity pair returned by login."""

    user_id: str = Field(alias="userID")
    session_id: str = Field(alias="sessionID")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class UploadHandle(BaseModel):
    """Opaque token referencing uploaded content, passed on when creating a document."""

    handle: str

    model_config = ConfigDict(extra="allow")


__all__ = ["LoginSession", "UploadHandle"]
