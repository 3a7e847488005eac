"""Problem hierarchy business logic.

The service keeps no state between calls. The server holds the problem tree;
the client holds its path through it and reconciles using the ids returned
here.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session as DBSession

from shared.models.domain import (
    GeneratedBy,
    ProblemStatus,
    StudentWork,
    TextContent,
    build_content,
    content_image_url,
    content_text,
)
from shared.models.entities import ProblemNode
from shared.models.schemas import (
    CheckResponse,
    CompleteResponse,
    IngestResponse,
    ParentSummary,
    ProblemView,
    RecentProblem,
    RecentProblemsResponse,
    RevealResponse,
    StuckResponse,
)
from shared.repositories import AttemptRepository, ProblemRepository
from shared.utils.constants import (
    DEFAULT_CATEGORY,
    DEFAULT_PROBLEM_TITLE,
    DEFAULT_RECENT_PROBLEMS,
    DEFAULT_RECENT_TITLE,
    SUBPROBLEM_HIDDEN_ANSWER,
)
from shared.utils.exceptions import InvalidRequestException, LLMProviderException
from solver.services.llm_gateway import LLMGateway

logger = logging.getLogger("solver.problem_service")

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def require_problem_id(value: Optional[str], label: str = "Problem ID") -> str:
    """Reject missing or non-UUID ids before touching the store."""
    if not value or not value.strip():
        raise InvalidRequestException(f"{label} is required")
    value = value.strip()
    if not _UUID_RE.match(value):
        raise InvalidRequestException(f"Invalid {label} format")
    return value.lower()


class ProblemService:
    """Orchestrates the problem tree over the store and the LLM gateway."""

    def __init__(self, db: DBSession, gateway: LLMGateway):
        self.db = db
        self.gateway = gateway
        self.problems = ProblemRepository(db)
        self.attempts = AttemptRepository(db)

    # ─── Ingest ───────────────────────────────────────────────────────

    def ingest(self, image_url: Optional[str] = None, text: Optional[str] = None) -> IngestResponse:
        """
        Solve a new problem and store it as a root node.

        An image without text is transcribed first; the solution and answer
        are stored as hidden fields and never returned here.
        """
        image_url = image_url.strip() if image_url and image_url.strip() else None
        text = text.strip() if text and text.strip() else None
        if not image_url and not text:
            raise InvalidRequestException("An image URL or problem text is required")

        problem_text = text
        category = None
        title = None

        if image_url and not text:
            extraction = self.gateway.extract_problem(image_url)
            if not extraction.success:
                raise LLMProviderException("process_problem", extraction.error or "extraction failed")
            problem_text = extraction.data.problem_text
            category = extraction.data.category
            title = extraction.data.title

        solved = self.gateway.solve(problem_text, image_url)
        if not solved.success:
            raise LLMProviderException("process_problem", solved.error or "solve failed")

        node = self.problems.create_node(
            content=build_content(text=problem_text, image_url=image_url, category=category, title=title),
            generated_by=GeneratedBy.USER_UPLOAD,
            hidden_solution=solved.data.solution,
            hidden_answer=solved.data.answer,
        )
        logger.info(f"Ingested problem {node.id} (image={'yes' if image_url else 'no'})")

        return IngestResponse(
            problem_id=node.id,
            problem_text=problem_text,
            category=category,
            title=title,
        )

    # ─── Reads ────────────────────────────────────────────────────────

    def get_problem(self, problem_id: Optional[str]) -> ProblemView:
        """Public projection of a node and a shallow summary of its parent."""
        problem_id = require_problem_id(problem_id)
        node = self.problems.get_node(problem_id, include_parent=True)
        return self.project(node)

    def reveal(self, problem_id: Optional[str]) -> RevealResponse:
        """Return the hidden solution and answer. No status change, no attempt logged."""
        problem_id = require_problem_id(problem_id)
        hidden = self.problems.get_hidden_fields(problem_id)
        logger.info(f"Revealed solution for problem {problem_id}")
        return RevealResponse(solution=hidden.hidden_solution, answer=hidden.hidden_answer)

    def recent_problems(self, limit: Optional[int] = DEFAULT_RECENT_PROBLEMS) -> RecentProblemsResponse:
        """Recently uploaded problems with their last activity time."""
        rows = self.problems.list_recent(generated_by=GeneratedBy.USER_UPLOAD, limit=limit)
        problems = []
        for node, last_attempt_at in rows:
            content = self.problems.parse_content(node)
            problems.append(RecentProblem(
                id=node.id,
                title=getattr(content, "title", None) or DEFAULT_RECENT_TITLE,
                category=getattr(content, "category", None) or DEFAULT_CATEGORY,
                status=node.status,
                last_active_at=last_attempt_at or node.created_at,
                created_at=node.created_at,
            ))
        return RecentProblemsResponse(problems=problems)

    # ─── Tutoring workflows ───────────────────────────────────────────

    def stuck(
        self,
        problem_id: Optional[str],
        user_work_images: Optional[List[str]] = None,
        user_text: Optional[str] = None,
    ) -> StuckResponse:
        """
        Generate an easier subproblem for a student who is stuck.

        Always creates a new child node (no reuse of earlier siblings) and logs
        the submitted work as an attempt against the parent.
        """
        problem_id = require_problem_id(problem_id)
        work = StudentWork(images=user_work_images or [], text=user_text)

        node = self.problems.get_node(problem_id)
        content = self.problems.parse_content(node)
        hidden_solution = node.hidden_solution
        self._end_read()

        result = self.gateway.decompose(content, hidden_solution, work)
        if not result.success:
            raise LLMProviderException("generate_subproblem", result.error or "decompose failed")
        generated = result.data

        subproblem = self.problems.create_node(
            content=TextContent(text=generated.subproblem_text),
            generated_by=GeneratedBy.LLM_SUBPROBLEM,
            hidden_solution=generated.hidden_subproblem_solution,
            parent_id=problem_id,
            hidden_answer=SUBPROBLEM_HIDDEN_ANSWER,
            target_insight=generated.missing_insight,
        )
        self.attempts.create(problem_id, work.images, work.text)

        logger.info(f"Created subproblem {subproblem.id} under {problem_id}")
        return StuckResponse(
            subproblem_id=subproblem.id,
            student_summary=generated.student_summary,
            missing_insight=generated.missing_insight,
            subproblem_text=generated.subproblem_text,
            tutor_intro=generated.tutor_intro,
            tutor_subproblem_message=generated.tutor_subproblem_message,
        )

    def check_thinking(
        self,
        problem_id: Optional[str],
        user_work_images: Optional[List[str]] = None,
        user_text: Optional[str] = None,
    ) -> CheckResponse:
        """Advisory feedback on the current work. Logs an attempt; never changes status."""
        problem_id = require_problem_id(problem_id)
        work = StudentWork(images=user_work_images or [], text=user_text)

        content = self.problems.parse_content(self.problems.get_node(problem_id))
        self._end_read()

        result = self.gateway.check_thinking(content, work)
        if not result.success:
            raise LLMProviderException("check_thinking", result.error or "check failed")

        self.attempts.create(problem_id, work.images, work.text)
        return CheckResponse(feedback=result.data.feedback)

    def complete(
        self,
        subproblem_id: Optional[str],
        user_work_images: Optional[List[str]] = None,
        user_text: Optional[str] = None,
    ) -> CompleteResponse:
        """
        Verify an attempt at a subproblem.

        Only the direct parent is given to the model as context. A verified
        attempt moves the node to solved; popping the client stack is left to
        the caller.
        """
        subproblem_id = require_problem_id(subproblem_id, label="Subproblem ID")
        work = StudentWork(images=user_work_images or [], text=user_text)

        node = self.problems.get_node(subproblem_id, include_parent=True)
        sub_content = self.problems.parse_content(node)
        parent_content = self.problems.parse_content(node.parent) if node.parent is not None else None
        self._end_read()

        result = self.gateway.verify(parent_content, sub_content, work)
        if not result.success:
            raise LLMProviderException("verify_attempt", result.error or "verify failed")
        verdict = result.data

        if verdict.solved:
            self.problems.update_status(subproblem_id, ProblemStatus.SOLVED)
        self.attempts.create(subproblem_id, work.images, work.text)

        logger.info(f"Verified attempt on {subproblem_id}: solved={verdict.solved}")
        return CompleteResponse(solved=verdict.solved, tutor_message=verdict.tutor_message)

    def _end_read(self) -> None:
        """Close the read transaction so no connection is held during a model call."""
        self.db.rollback()

    # ─── Projection ───────────────────────────────────────────────────

    @staticmethod
    def project(node: ProblemNode) -> ProblemView:
        """
        Allow-list projection of a node for the client.

        Hidden solution and answer are not read here.
        """
        content = ProblemRepository.parse_content(node)
        parent = None
        if node.parent is not None:
            parent_content = ProblemRepository.parse_content(node.parent)
            parent = ParentSummary(
                id=node.parent.id,
                title=getattr(parent_content, "title", None) or DEFAULT_PROBLEM_TITLE,
                text=content_text(parent_content) or "",
                image_url=content_image_url(parent_content),
            )

        return ProblemView(
            id=node.id,
            text=content_text(content) or "",
            category=getattr(content, "category", None) or DEFAULT_CATEGORY,
            title=getattr(content, "title", None) or DEFAULT_PROBLEM_TITLE,
            image_url=content_image_url(content),
            status=node.status,
            parent_id=node.parent_id,
            is_subproblem=node.generated_by == GeneratedBy.LLM_SUBPROBLEM.value,
            target_insight=node.target_insight,
            parent=parent,
        )
