"""
Completion / progress: per-user completion toggle on subtopics, per-difficulty progress, and the
topic tree annotated with each subtopic's completion state.

A completion is the existence of a CompletedProblem row for (user, subtopic). The toggle reads that
row and deletes or inserts it. Two concurrent toggles can both read "absent"; the unique constraint
rejects the second insert, which is then reconciled by re-reading instead of failing the request.
"""
import logging
import math
import uuid

from sqlalchemy import and_, case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracker.models.completed_problem import CompletedProblem
from tracker.models.subtopic import DIFFICULTIES, Subtopic
from tracker.models.topic import Topic
from tracker.models.types import utcnow
from tracker.models.user import User
from tracker.schemas.progress import (
    CompletionStatusResponse,
    ProgressBucket,
    ProgressStats,
    SubtopicWithCompletion,
    ToggleCompletionResponse,
    TopicWithSubtopics,
)
from tracker.services.result import Ok, Result, invalid, not_found
from tracker.services.validation import parse_id

logger = logging.getLogger(__name__)

# Bucket for subtopics whose difficulty is missing or unrecognised
DEFAULT_BUCKET = "medium"


def percentage(completed: int, total: int) -> int:
    """completed/total as a whole percent, rounded half up; 0 when there is nothing to complete."""
    if total <= 0:
        return 0
    return math.floor(completed * 100 / total + 0.5)


def _bucket(completed: int, total: int) -> ProgressBucket:
    return ProgressBucket(completed=completed, total=total, percentage=percentage(completed, total))


def get_progress_stats(db: Session, user: User) -> ProgressStats:
    """Completed/total/percentage per difficulty and overall, in one grouped query."""
    done = case((CompletedProblem.id.isnot(None), 1), else_=0)
    rows = (
        db.query(Subtopic.difficulty, func.count(Subtopic.id), func.sum(done))
        .outerjoin(
            CompletedProblem,
            and_(CompletedProblem.subtopic_id == Subtopic.id, CompletedProblem.user_id == user.id),
        )
        .group_by(Subtopic.difficulty)
        .all()
    )
    totals = {d: [0, 0] for d in DIFFICULTIES}
    for difficulty, total, completed in rows:
        key = difficulty if difficulty in totals else DEFAULT_BUCKET
        totals[key][0] += int(completed or 0)
        totals[key][1] += int(total or 0)
    overall_completed = sum(c for c, _ in totals.values())
    overall_total = sum(t for _, t in totals.values())
    return ProgressStats(
        easy=_bucket(*totals["easy"]),
        medium=_bucket(*totals["medium"]),
        tough=_bucket(*totals["tough"]),
        overall=_bucket(overall_completed, overall_total),
    )


def progress_result(db: Session, user: User) -> Result:
    return Ok(get_progress_stats(db, user), "Progress statistics retrieved successfully")


def _find_completion(db: Session, user_id: uuid.UUID, subtopic_id: uuid.UUID) -> CompletedProblem | None:
    return (
        db.query(CompletedProblem)
        .filter(CompletedProblem.user_id == user_id, CompletedProblem.subtopic_id == subtopic_id)
        .first()
    )


def _mark_completed(db: Session, user_id: uuid.UUID, subtopic_id: uuid.UUID) -> bool:
    """Insert the completion row. On a uniqueness violation another request won: re-read the state."""
    db.add(CompletedProblem(user_id=user_id, subtopic_id=subtopic_id, completed_at=utcnow()))
    try:
        db.commit()
        return True
    except IntegrityError:
        db.rollback()
        logger.info("Concurrent completion for user=%s subtopic=%s; re-reading state", user_id, subtopic_id)
        return _find_completion(db, user_id, subtopic_id) is not None


def toggle_completion(db: Session, user: User, subtopic_id: str | None) -> Result:
    """Flip completion for (user, subtopic); returns the new state and a fresh progress snapshot."""
    sid = parse_id(subtopic_id)
    if sid is None:
        return invalid("Invalid subtopic ID")
    if db.query(Subtopic.id).filter(Subtopic.id == sid).first() is None:
        return not_found("Subtopic not found")

    if _find_completion(db, user.id, sid) is not None:
        # Bulk delete so a concurrent delete of the same row is a no-op rather than an error
        db.query(CompletedProblem).filter(
            CompletedProblem.user_id == user.id, CompletedProblem.subtopic_id == sid
        ).delete(synchronize_session=False)
        db.commit()
        is_completed = False
    else:
        is_completed = _mark_completed(db, user.id, sid)

    logger.info("Completion toggled: user=%s subtopic=%s completed=%s", user.id, sid, is_completed)
    return Ok(
        ToggleCompletionResponse(
            subtopic_id=sid,
            is_completed=is_completed,
            progress=get_progress_stats(db, user),
        ),
        "Subtopic marked as completed" if is_completed else "Subtopic marked as not completed",
    )


def get_completion_status(db: Session, user: User, subtopic_id: str) -> Result:
    sid = parse_id(subtopic_id)
    if sid is None:
        return invalid("Invalid subtopic ID")
    if db.query(Subtopic.id).filter(Subtopic.id == sid).first() is None:
        return not_found("Subtopic not found")
    record = _find_completion(db, user.id, sid)
    return Ok(
        CompletionStatusResponse(
            subtopic_id=sid,
            is_completed=record is not None,
            completed_at=record.completed_at if record else None,
        ),
        "Completion status retrieved successfully",
    )


def get_all_topics_with_subtopics(db: Session, user: User | None = None) -> Result:
    """Active topics by name, subtopics by order; every subtopic carries isCompleted (false when anonymous)."""
    topics = db.query(Topic).filter(Topic.is_active.is_(True)).order_by(Topic.name).all()
    if not topics:
        return Ok([], "No topics found")
    topic_ids = [t.id for t in topics]
    subtopics = (
        db.query(Subtopic)
        .filter(Subtopic.topic_id.in_(topic_ids))
        .order_by(Subtopic.topic_id, Subtopic.order)
        .all()
    )
    completed_ids: set[uuid.UUID] = set()
    if user is not None and subtopics:
        completed_ids = {
            row[0]
            for row in db.query(CompletedProblem.subtopic_id)
            .filter(
                CompletedProblem.user_id == user.id,
                CompletedProblem.subtopic_id.in_([s.id for s in subtopics]),
            )
            .all()
        }
    by_topic: dict[uuid.UUID, list[SubtopicWithCompletion]] = {tid: [] for tid in topic_ids}
    for s in subtopics:
        by_topic[s.topic_id].append(
            SubtopicWithCompletion(
                id=s.id,
                name=s.name,
                slug=s.slug,
                difficulty=s.difficulty,
                youtube_link=s.youtube_link,
                leetcode_link=s.leetcode_link,
                article_link=s.article_link,
                order=s.order,
                status=s.status,
                is_completed=s.id in completed_ids,
            )
        )
    data = [
        TopicWithSubtopics(
            id=t.id,
            name=t.name,
            slug=t.slug,
            description=t.description,
            subtopics=by_topic[t.id],
        )
        for t in topics
    ]
    return Ok(data, "Topics with subtopics retrieved successfully")
