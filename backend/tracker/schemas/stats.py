"""
Admin dashboard statistics.
"""
import uuid

from tracker.schemas.common import CamelModel


class UserStats(CamelModel):
    total: int
    active_today: int
    new_this_week: int


class CatalogStats(CamelModel):
    total: int
    subtopics: int
    completion_rate: float


class CompletionTotals(CamelModel):
    total_completed: int
    average_per_user: float
    max_completed: int


class TopTopic(CamelModel):
    topic_id: uuid.UUID
    topic_name: str
    completed_count: int


class DailyActivity(CamelModel):
    date: str  # YYYY-MM-DD
    count: int


class DashboardStats(CamelModel):
    users: UserStats
    topics: CatalogStats
    progress: CompletionTotals
    top_topics: list[TopTopic]
    recent_activity: list[DailyActivity]
