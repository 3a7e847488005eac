"""Structured outputs the model must return for each operation."""
from typing import Any, Optional

from pydantic import BaseModel, Field


class ExtractionResult(BaseModel):
    """Transcription of a problem image."""
    problem_text: str = Field(..., min_length=1)
    category: str
    title: str


class SolveResult(BaseModel):
    """Full worked solution plus the concise final answer."""
    solution: str = Field(..., min_length=1)
    answer: str


class DecomposeResult(BaseModel):
    """Diagnosis of the student's gap and an easier subproblem isolating it."""
    student_summary: str
    missing_insight: str
    subproblem_text: str = Field(..., min_length=1)
    tutor_intro: str
    tutor_subproblem_message: str
    hidden_subproblem_solution: str


class CheckThinkingResult(BaseModel):
    feedback: str = Field(..., min_length=1)


class VerifyResult(BaseModel):
    solved: bool
    tutor_message: str


class GatewayResult(BaseModel):
    """
    Outcome of one gateway operation.

    Exactly one of `data` (on success) or `error` (on failure) is set.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: BaseModel) -> "GatewayResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "GatewayResult":
        return cls(success=False, error=error)
