"""
Problem (legacy catalog unit) schemas. Topic/subtopic labels must come from PROBLEM_TAXONOMY.
"""
import uuid
from datetime import datetime
from typing import Literal
from pydantic import Field, model_validator

from tracker.models.problem import PROBLEM_TAXONOMY
from tracker.schemas.common import CamelModel
from tracker.schemas.subtopic import _Links

ProblemDifficulty = Literal["Easy", "Medium", "Hard"]


def taxonomy_error(topic: str, subtopic: str) -> str | None:
    """Message when (topic, subtopic) is outside the taxonomy, else None."""
    allowed = PROBLEM_TAXONOMY.get(topic)
    if allowed is None:
        return f"'{topic}' is not a valid topic"
    if subtopic not in allowed:
        return f"'{subtopic}' is not a valid subtopic for {topic}"
    return None


class ProblemCreate(_Links):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    topic: str
    subtopic: str
    difficulty: ProblemDifficulty = "Medium"
    order: int = Field(ge=0)
    is_active: bool = True

    @model_validator(mode="after")
    def labels_in_taxonomy(self):
        msg = taxonomy_error(self.topic, self.subtopic)
        if msg:
            raise ValueError(msg)
        return self


class ProblemUpdate(_Links):
    """Allow-listed update; taxonomy is re-checked by the service against the merged labels."""
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1)
    topic: str | None = None
    subtopic: str | None = None
    difficulty: ProblemDifficulty | None = None
    order: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ProblemResponse(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    topic: str
    subtopic: str
    difficulty: str
    youtube_link: str | None = None
    leetcode_link: str | None = None
    article_link: str | None = None
    order: int
    is_active: bool
    created_at: datetime | None = None


class ProblemSubtopicGroup(CamelModel):
    name: str
    problems: list[ProblemResponse]


class ProblemTopicGroup(CamelModel):
    topic: str
    subtopics: list[ProblemSubtopicGroup]


class ProblemToggleResponse(CamelModel):
    problem_id: uuid.UUID
    is_completed: bool
    completed_count: int
