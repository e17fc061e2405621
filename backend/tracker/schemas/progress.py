"""
Completion and progress schemas.
"""
import uuid
from datetime import datetime
from pydantic import AliasChoices, Field

from tracker.schemas.common import CamelModel


class ProgressBucket(CamelModel):
    completed: int = 0
    total: int = 0
    percentage: int = 0


class ProgressStats(CamelModel):
    easy: ProgressBucket
    medium: ProgressBucket
    tough: ProgressBucket
    overall: ProgressBucket


class ToggleCompletionRequest(CamelModel):
    # Left as a raw string so a malformed id is reported by the service, not the validator
    subtopic_id: str | None = Field(default=None, validation_alias=AliasChoices("subtopicId", "subtopic_id"))


class ToggleCompletionResponse(CamelModel):
    subtopic_id: uuid.UUID
    is_completed: bool
    progress: ProgressStats


class CompletionStatusResponse(CamelModel):
    subtopic_id: uuid.UUID
    is_completed: bool
    completed_at: datetime | None = None


class SubtopicWithCompletion(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    difficulty: str
    youtube_link: str | None = None
    leetcode_link: str | None = None
    article_link: str | None = None
    order: int
    status: str
    is_completed: bool = False


class TopicWithSubtopics(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None = None
    subtopics: list[SubtopicWithCompletion]
