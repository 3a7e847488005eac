"""Solver services."""
from .llm_gateway import LLMGateway
from .problem_service import ProblemService

__all__ = ["LLMGateway", "ProblemService"]
