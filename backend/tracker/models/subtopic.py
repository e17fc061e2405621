"""
Subtopic: catalog leaf under one Topic; the unit users mark complete.
Name and order are unique within a topic; slug is unique globally.
`status` is a catalog-level flag, independent of per-user completion (see CompletedProblem).
"""
import uuid
from datetime import datetime
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from tracker.database import Base
from tracker.models.types import UuidType

DIFFICULTIES = ("easy", "medium", "tough")
STATUSES = ("pending", "completed")


class Subtopic(Base):
    __tablename__ = "subtopics"

    id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), primary_key=True, default=uuid.uuid4
    )
    topic_id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str] = mapped_column(String(10), nullable=False, default="easy", index=True)
    youtube_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    leetcode_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    article_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    # "order" is reserved in SQL; attribute keeps the API name
    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("topic_id", "name", name="uq_subtopics_topic_name"),
        UniqueConstraint("topic_id", "sort_order", name="uq_subtopics_topic_order"),
        CheckConstraint("difficulty IN ('easy', 'medium', 'tough')", name="subtopics_difficulty_check"),
        CheckConstraint("status IN ('pending', 'completed')", name="subtopics_status_check"),
    )

    topic = relationship("Topic", back_populates="subtopics")
    completions = relationship("CompletedProblem", back_populates="subtopic", cascade="all, delete-orphan")
