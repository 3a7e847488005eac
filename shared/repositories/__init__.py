"""Data access layer - repository pattern for database operations."""
from .problem_repository import ProblemRepository, clamp_recent_limit
from .attempt_repository import AttemptRepository

__all__ = [
    "ProblemRepository",
    "AttemptRepository",
    "clamp_recent_limit",
]
