"""
Topic request/response schemas.
"""
import uuid
from datetime import datetime
from pydantic import Field, field_validator

from tracker.schemas.common import CamelModel


class TopicCreate(CamelModel):
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def name_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Topic name is required")
        return v


class TopicUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def name_present(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Topic name cannot be empty")
        return v


class TopicSummary(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class TopicResponse(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
