"""
SQLAlchemy models. Import here so Alembic and the app can use them.
"""
from tracker.models.user import User
from tracker.models.topic import Topic
from tracker.models.subtopic import Subtopic
from tracker.models.completed_problem import CompletedProblem
from tracker.models.problem import Problem, ProblemCompletion

__all__ = ["User", "Topic", "Subtopic", "CompletedProblem", "Problem", "ProblemCompletion"]
