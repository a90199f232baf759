"""
Pydantic schemas for the JSON logos API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from logos.db import LogoRecord


class LogoPayload(BaseModel):
    title: str = Field(..., max_length=256)
    imageUrl: Optional[str] = Field(default=None, max_length=2048)


class LogoResponse(BaseModel):
    id: str
    title: str
    createdBy: str
    createdById: Optional[str] = None
    imageUrl: Optional[str] = None

    @classmethod
    def from_record(cls, record: LogoRecord) -> "LogoResponse":
        return cls(**record.as_dict())


class ListLogosResponse(BaseModel):
    items: list[LogoResponse]
    nextPageToken: Optional[str] = None


class DeleteResponse(BaseModel):
    status: Literal["ok"]
