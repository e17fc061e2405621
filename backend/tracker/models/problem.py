"""
Problem: legacy catalog unit labelled with a fixed topic/subtopic taxonomy (free text, not FKs).
Order is unique within (topic, subtopic). Per-user completion lives in ProblemCompletion.
"""
import uuid
from datetime import datetime
from sqlalchemy import String, Integer, Text, Boolean, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from tracker.database import Base
from tracker.models.types import UuidType, utcnow

PROBLEM_DIFFICULTIES = ("Easy", "Medium", "Hard")

# Allowed subtopic labels per topic label
PROBLEM_TAXONOMY: dict[str, tuple[str, ...]] = {
    "Arrays": (
        "Array Basics", "Hashing", "Sliding Window", "Two Pointers", "Prefix Sum",
        "Kadane's Algorithm", "Merging Intervals", "Cyclic Sort", "In-place Array Manipulation",
    ),
    "Strings": (
        "String Basics", "String Matching", "String Manipulation", "String Hashing",
        "Suffix Arrays", "Regular Expressions",
    ),
    "Linked Lists": (
        "Singly Linked Lists", "Doubly Linked Lists", "Circular Linked Lists",
        "Fast and Slow Pointers", "Linked List Manipulation",
    ),
    "Stacks": ("Implementation", "Monotonic Stack", "Parentheses Problems", "Postfix/Prefix Evaluation"),
    "Queues": ("Implementation", "Priority Queue/Heap", "Deque", "BFS"),
    "Trees": (
        "Binary Trees", "Binary Search Trees", "N-ary Trees", "Trie", "Segment Trees",
        "Binary Indexed Tree", "AVL Trees", "Red-Black Trees",
    ),
    "Graphs": (
        "Graph Representation", "BFS/DFS", "Topological Sort", "Shortest Path",
        "Minimum Spanning Tree", "Strongly Connected Components", "Eulerian Path/Circuit", "Network Flow",
    ),
    "Sorting": ("Comparison Sorts", "Non-comparison Sorts", "Sorting with Custom Comparators"),
    "Searching": ("Binary Search", "Ternary Search", "Interpolation Search"),
    "Dynamic Programming": (
        "0/1 Knapsack", "Unbounded Knapsack", "Fibonacci", "LCS", "LIS", "Edit Distance",
        "Matrix Chain Multiplication", "DP on Trees", "DP on Grids", "Digit DP", "Bitmask DP",
    ),
    "Backtracking": ("Subsets", "Permutations", "Combinations", "N-Queens", "Sudoku"),
    "Greedy": ("Activity Selection", "Fractional Knapsack", "Job Sequencing", "Huffman Coding"),
    "Bit Manipulation": ("Bitwise Operations", "Bitmasking", "Bit Tricks"),
    "Math": ("Number Theory", "Combinatorics", "Geometry", "Probability", "Game Theory"),
    "Other": ("System Design", "OOP Design", "Concurrency", "SQL", "Shell Scripting"),
}


class Problem(Base):
    __tablename__ = "problems"

    id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    subtopic: Mapped[str] = mapped_column(String(100), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(10), nullable=False, default="Medium")
    youtube_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    leetcode_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    article_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("topic", "subtopic", "sort_order", name="uq_problems_topic_subtopic_order"),
        CheckConstraint("difficulty IN ('Easy', 'Medium', 'Hard')", name="problems_difficulty_check"),
    )

    completions = relationship("ProblemCompletion", back_populates="problem", cascade="all, delete-orphan")


class ProblemCompletion(Base):
    """A user has completed a problem; primary key (user_id, problem_id) prevents duplicates."""
    __tablename__ = "problem_completions"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    problem_id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), ForeignKey("problems.id", ondelete="CASCADE"), primary_key=True
    )
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="problem_completions")
    problem = relationship("Problem", back_populates="completions")
