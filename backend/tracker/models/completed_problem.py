"""
CompletedProblem: a user has completed a subtopic. Existence of the row is the completion state.
The (user_id, subtopic_id) unique constraint is what arbitrates concurrent toggles.
"""
import uuid
from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from tracker.database import Base
from tracker.models.types import UuidType, utcnow


class CompletedProblem(Base):
    __tablename__ = "completed_problems"

    id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    subtopic_id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), ForeignKey("subtopics.id", ondelete="CASCADE"), nullable=False, index=True
    )
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("user_id", "subtopic_id", name="uq_completed_problems_user_subtopic"),)

    user = relationship("User", back_populates="completions")
    subtopic = relationship("Subtopic", back_populates="completions")
