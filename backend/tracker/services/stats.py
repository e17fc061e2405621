"""
Admin dashboard rollups over users, catalog and completion records. Recomputed on every request.
"""
from datetime import datetime, time, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from tracker.models.completed_problem import CompletedProblem
from tracker.models.subtopic import Subtopic
from tracker.models.topic import Topic
from tracker.models.types import utcnow
from tracker.models.user import User
from tracker.schemas.stats import (
    CatalogStats,
    CompletionTotals,
    DailyActivity,
    DashboardStats,
    TopTopic,
    UserStats,
)
from tracker.services.result import Ok, Result

TOP_TOPICS_LIMIT = 5
ACTIVITY_WINDOW_DAYS = 7


def _user_stats(db: Session, now: datetime, week_ago: datetime) -> UserStats:
    start_of_day = datetime.combine(now.date(), time.min, tzinfo=timezone.utc)
    return UserStats(
        total=db.query(func.count(User.id)).filter(User.role == "user").scalar() or 0,
        active_today=db.query(func.count(func.distinct(CompletedProblem.user_id)))
        .filter(CompletedProblem.completed_at >= start_of_day)
        .scalar()
        or 0,
        new_this_week=db.query(func.count(User.id))
        .filter(User.role == "user", User.created_at >= week_ago)
        .scalar()
        or 0,
    )


def _completion_totals(db: Session) -> CompletionTotals:
    total = (
        db.query(func.count(CompletedProblem.id))
        .join(Subtopic, CompletedProblem.subtopic_id == Subtopic.id)
        .scalar()
        or 0
    )
    per_user = (
        db.query(CompletedProblem.user_id, func.count(CompletedProblem.id).label("n"))
        .group_by(CompletedProblem.user_id)
        .subquery()
    )
    avg_n, max_n = db.query(func.avg(per_user.c.n), func.max(per_user.c.n)).one()
    return CompletionTotals(
        total_completed=total,
        average_per_user=round(float(avg_n), 2) if avg_n else 0.0,
        max_completed=int(max_n or 0),
    )


def _top_topics(db: Session) -> list[TopTopic]:
    n = func.count(CompletedProblem.id).label("completed_count")
    rows = (
        db.query(Topic.id, Topic.name, n)
        .join(Subtopic, Subtopic.topic_id == Topic.id)
        .join(CompletedProblem, CompletedProblem.subtopic_id == Subtopic.id)
        .group_by(Topic.id, Topic.name)
        .order_by(n.desc(), Topic.name)
        .limit(TOP_TOPICS_LIMIT)
        .all()
    )
    return [TopTopic(topic_id=tid, topic_name=name, completed_count=count) for tid, name, count in rows]


def _recent_activity(db: Session, since: datetime) -> list[DailyActivity]:
    day = func.date(CompletedProblem.completed_at)
    rows = (
        db.query(day, func.count(CompletedProblem.id))
        .filter(CompletedProblem.completed_at >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )
    # SQLite returns 'YYYY-MM-DD' strings, PostgreSQL returns date objects
    return [DailyActivity(date=str(d), count=c) for d, c in rows]


def get_dashboard_stats(db: Session) -> Result:
    now = utcnow()
    week_ago = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
    total_subtopics = db.query(func.count(Subtopic.id)).scalar() or 0
    progress = _completion_totals(db)
    completion_rate = (
        round(progress.total_completed / total_subtopics * 100, 2) if total_subtopics else 0.0
    )
    stats = DashboardStats(
        users=_user_stats(db, now, week_ago),
        topics=CatalogStats(
            total=db.query(func.count(Topic.id)).filter(Topic.is_active.is_(True)).scalar() or 0,
            subtopics=total_subtopics,
            completion_rate=completion_rate,
        ),
        progress=progress,
        top_topics=_top_topics(db),
        recent_activity=_recent_activity(db, week_ago),
    )
    return Ok(stats, "Dashboard statistics retrieved successfully")
