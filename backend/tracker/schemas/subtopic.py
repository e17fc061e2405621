"""
Subtopic request/response schemas. `topic` in request bodies is the parent topic id.
"""
import uuid
from datetime import datetime
from typing import Literal
from pydantic import AliasChoices, Field, field_validator

from tracker.schemas.common import CamelModel
from tracker.schemas.topic import TopicSummary
from tracker.services.validation import validate_link

Difficulty = Literal["easy", "medium", "tough"]
Status = Literal["pending", "completed"]

_TOPIC_ALIASES = AliasChoices("topic", "topicId", "topic_id")


class _Links(CamelModel):
    youtube_link: str | None = None
    leetcode_link: str | None = None
    article_link: str | None = None

    @field_validator("youtube_link", "leetcode_link", "article_link")
    @classmethod
    def link_is_url(cls, v: str | None) -> str | None:
        return validate_link(v)


class SubtopicCreate(_Links):
    name: str = Field(max_length=100)
    topic_id: str = Field(validation_alias=_TOPIC_ALIASES)
    description: str | None = None
    difficulty: Difficulty = "medium"
    order: int = Field(default=0, ge=0)
    status: Status = "pending"

    @field_validator("name")
    @classmethod
    def name_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please add a subtopic name")
        return v


class SubtopicUpdate(_Links):
    """Allow-listed update; only fields present in the body are applied."""
    name: str | None = Field(default=None, max_length=100)
    topic_id: str | None = Field(default=None, validation_alias=_TOPIC_ALIASES)
    description: str | None = None
    difficulty: Difficulty | None = None
    order: int | None = Field(default=None, ge=0)
    status: Status | None = None

    @field_validator("name")
    @classmethod
    def name_present(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Subtopic name cannot be empty")
        return v


class SubtopicStatusUpdate(CamelModel):
    status: Status


class SubtopicResponse(CamelModel):
    id: uuid.UUID
    topic_id: uuid.UUID
    topic: TopicSummary | None = None
    name: str
    slug: str
    description: str | None = None
    difficulty: str
    youtube_link: str | None = None
    leetcode_link: str | None = None
    article_link: str | None = None
    order: int
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
