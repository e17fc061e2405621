"""Initial schema: users, topics, subtopics, completed_problems, problems, problem_completions.

Revision ID: 001
Revises:
Create Date: Initial

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("token", sa.String(1024), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('user', 'admin')", name="users_role_check"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "topics",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_topics_slug", "topics", ["slug"], unique=True)

    op.create_table(
        "subtopics",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("topic_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("difficulty", sa.String(10), nullable=False, server_default="easy"),
        sa.Column("youtube_link", sa.String(512), nullable=True),
        sa.Column("leetcode_link", sa.String(512), nullable=True),
        sa.Column("article_link", sa.String(512), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.CheckConstraint("difficulty IN ('easy', 'medium', 'tough')", name="subtopics_difficulty_check"),
        sa.CheckConstraint("status IN ('pending', 'completed')", name="subtopics_status_check"),
        sa.ForeignKeyConstraint(["topic_id"], ["topics.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("topic_id", "name", name="uq_subtopics_topic_name"),
        sa.UniqueConstraint("topic_id", "sort_order", name="uq_subtopics_topic_order"),
    )
    op.create_index("ix_subtopics_topic_id", "subtopics", ["topic_id"], unique=False)
    op.create_index("ix_subtopics_slug", "subtopics", ["slug"], unique=True)
    op.create_index("ix_subtopics_difficulty", "subtopics", ["difficulty"], unique=False)

    op.create_table(
        "completed_problems",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("subtopic_id", sa.String(36), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["subtopic_id"], ["subtopics.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "subtopic_id", name="uq_completed_problems_user_subtopic"),
    )
    op.create_index("ix_completed_problems_user_id", "completed_problems", ["user_id"], unique=False)
    op.create_index("ix_completed_problems_subtopic_id", "completed_problems", ["subtopic_id"], unique=False)
    op.create_index("ix_completed_problems_completed_at", "completed_problems", ["completed_at"], unique=False)

    op.create_table(
        "problems",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("topic", sa.String(50), nullable=False),
        sa.Column("subtopic", sa.String(100), nullable=False),
        sa.Column("difficulty", sa.String(10), nullable=False, server_default="Medium"),
        sa.Column("youtube_link", sa.String(512), nullable=True),
        sa.Column("leetcode_link", sa.String(512), nullable=True),
        sa.Column("article_link", sa.String(512), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("difficulty IN ('Easy', 'Medium', 'Hard')", name="problems_difficulty_check"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("topic", "subtopic", "sort_order", name="uq_problems_topic_subtopic_order"),
    )
    op.create_index("ix_problems_topic", "problems", ["topic"], unique=False)

    op.create_table(
        "problem_completions",
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("problem_id", sa.String(36), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["problem_id"], ["problems.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "problem_id"),
    )


def downgrade() -> None:
    op.drop_table("problem_completions")
    op.drop_index("ix_problems_topic", table_name="problems")
    op.drop_table("problems")
    op.drop_index("ix_completed_problems_completed_at", table_name="completed_problems")
    op.drop_index("ix_completed_problems_subtopic_id", table_name="completed_problems")
    op.drop_index("ix_completed_problems_user_id", table_name="completed_problems")
    op.drop_table("completed_problems")
    op.drop_index("ix_subtopics_difficulty", table_name="subtopics")
    op.drop_index("ix_subtopics_slug", table_name="subtopics")
    op.drop_index("ix_subtopics_topic_id", table_name="subtopics")
    op.drop_table("subtopics")
    op.drop_index("ix_topics_slug", table_name="topics")
    op.drop_table("topics")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
