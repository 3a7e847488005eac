"""Shared models: ORM entities, domain types, and API schemas."""
from .entities import Base, ProblemNode, Attempt
from .domain import (
    GeneratedBy,
    ProblemStatus,
    ALLOWED_STATUS_TRANSITIONS,
    TextContent,
    ImageContent,
    TextWithImageContent,
    ProblemContent,
    StudentWork,
    HiddenFields,
    build_content,
)
from .schemas import (
    IngestRequest,
    IngestResponse,
    StuckRequest,
    StuckResponse,
    CheckRequest,
    CheckResponse,
    CompleteRequest,
    CompleteResponse,
    RevealResponse,
    ProblemView,
    ParentSummary,
    RecentProblem,
    RecentProblemsResponse,
)
