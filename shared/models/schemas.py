"""Pydantic API request/response schemas.

All bodies travel as camelCase JSON; Python code uses snake_case attributes.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class IngestRequest(CamelModel):
    """New problem: an uploaded image URL, typed text, or both."""
    image_url: Optional[str] = None
    text: Optional[str] = None


class WorkSubmission(CamelModel):
    """Student work attached to stuck / check / complete requests."""
    user_work_images: List[str] = Field(default_factory=list)
    user_text: Optional[str] = None


class StuckRequest(WorkSubmission):
    problem_id: Optional[str] = None


class CheckRequest(WorkSubmission):
    problem_id: Optional[str] = None


class CompleteRequest(WorkSubmission):
    subproblem_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class IngestResponse(CamelModel):
    """Identifier of the created root node plus its public description."""
    problem_id: str
    problem_text: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None


class ParentSummary(CamelModel):
    """Shallow public summary of a node's parent."""
    id: str
    title: str
    text: str
    image_url: Optional[str] = None


class ProblemView(CamelModel):
    """Public projection of a problem node. Hidden fields are never part of it."""
    id: str
    text: str
    category: str
    title: str
    image_url: Optional[str] = None
    status: str
    parent_id: Optional[str] = None
    is_subproblem: bool
    target_insight: Optional[str] = None
    parent: Optional[ParentSummary] = None


class StuckResponse(CamelModel):
    """New subproblem id plus the tutoring messages (without its hidden solution)."""
    subproblem_id: str
    student_summary: str
    missing_insight: str
    subproblem_text: str
    tutor_intro: str
    tutor_subproblem_message: str


class CheckResponse(CamelModel):
    feedback: str


class CompleteResponse(CamelModel):
    solved: bool
    tutor_message: str


class RevealResponse(CamelModel):
    solution: str
    answer: str


class RecentProblem(CamelModel):
    """Row of the recent-activity list."""
    id: str
    title: str
    category: str
    status: str
    last_active_at: datetime
    created_at: datetime


class RecentProblemsResponse(CamelModel):
    problems: List[RecentProblem]
