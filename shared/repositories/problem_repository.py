"""Problem node data access layer."""
import json
import logging
from typing import List, Optional, Tuple, Union
from datetime import datetime
from uuid import uuid4

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession, joinedload

from shared.models.entities import ProblemNode, Attempt, utcnow
from shared.models.domain import (
    GeneratedBy,
    ProblemStatus,
    HiddenFields,
    is_transition_allowed,
    problem_content_adapter,
)
from shared.utils.constants import DEFAULT_RECENT_PROBLEMS, MAX_RECENT_PROBLEMS
from shared.utils.exceptions import (
    DatabaseException,
    ProblemNotFoundException,
    StateTransitionException,
)

logger = logging.getLogger(__name__)


def clamp_recent_limit(limit: Optional[int]) -> int:
    """Bound a caller-supplied limit to [1, MAX_RECENT_PROBLEMS]."""
    if limit is None:
        return DEFAULT_RECENT_PROBLEMS
    return max(1, min(limit, MAX_RECENT_PROBLEMS))


class ProblemRepository:
    """Repository for problem node CRUD operations."""

    def __init__(self, db: DBSession):
        self.db = db

    # ─── Writes ───────────────────────────────────────────────────────

    def create_node(
        self,
        content,
        generated_by: GeneratedBy,
        hidden_solution: str,
        parent_id: Optional[str] = None,
        hidden_answer: str = "",
        target_insight: Optional[str] = None,
    ) -> ProblemNode:
        """
        Create a new problem node with status=active.

        Args:
            content: ProblemContent variant (or a dict that validates as one)
            generated_by: Provenance tag
            hidden_solution: Full solution, never shown to the student
            parent_id: Node this one was decomposed from
            hidden_answer: Final answer, empty for subproblems
            target_insight: Concept a generated subproblem is meant to teach

        Returns:
            Created ProblemNode

        Raises:
            ProblemNotFoundException: if parent_id does not reference an existing node
        """
        content = problem_content_adapter.validate_python(content)

        if parent_id is not None and not self.exists(parent_id):
            raise ProblemNotFoundException(parent_id)

        node = ProblemNode(
            id=str(uuid4()),
            parent_id=parent_id,
            content_json=content.model_dump_json(),
            hidden_solution=hidden_solution,
            hidden_answer=hidden_answer or "",
            target_insight=target_insight,
            generated_by=GeneratedBy(generated_by).value,
            status=ProblemStatus.ACTIVE.value,
            created_at=utcnow(),
        )
        self.db.add(node)
        self._commit("create_node")
        self.db.refresh(node)

        logger.info(f"Created problem node {node.id} (generated_by={node.generated_by}, parent={parent_id})")
        return node

    def update_status(self, problem_id: str, status: Union[ProblemStatus, str]) -> ProblemNode:
        """
        Move a node to a new status.

        Writing the current status again is a no-op. Transitions outside
        ALLOWED_STATUS_TRANSITIONS raise StateTransitionException.
        """
        target = ProblemStatus(status)
        node = self.get_node(problem_id)
        current = ProblemStatus(node.status)

        if current == target:
            return node

        if not is_transition_allowed(current, target):
            raise StateTransitionException(problem_id, current.value, target.value)

        node.status = target.value
        self._commit("update_status")
        logger.info(f"Problem {problem_id} status {current.value} -> {target.value}")
        return node

    # ─── Reads ────────────────────────────────────────────────────────

    def exists(self, problem_id: str) -> bool:
        return self.db.get(ProblemNode, problem_id) is not None

    def get_node(self, problem_id: str, include_parent: bool = False) -> ProblemNode:
        """
        Retrieve a node by ID, optionally with its parent eagerly loaded.

        Raises:
            ProblemNotFoundException: if no node has this ID
        """
        query = self.db.query(ProblemNode)
        if include_parent:
            query = query.options(joinedload(ProblemNode.parent))
        node = query.filter(ProblemNode.id == problem_id).first()
        if node is None:
            raise ProblemNotFoundException(problem_id)
        return node

    def get_hidden_fields(self, problem_id: str) -> HiddenFields:
        """Select only the hidden solution and answer columns."""
        row = (
            self.db.query(ProblemNode.hidden_solution, ProblemNode.hidden_answer)
            .filter(ProblemNode.id == problem_id)
            .first()
        )
        if row is None:
            raise ProblemNotFoundException(problem_id)
        return HiddenFields(hidden_solution=row[0] or "", hidden_answer=row[1] or "")

    def list_recent(
        self,
        generated_by: Optional[GeneratedBy] = None,
        limit: Optional[int] = DEFAULT_RECENT_PROBLEMS,
    ) -> List[Tuple[ProblemNode, Optional[datetime]]]:
        """
        Most recently created nodes, each paired with its latest attempt time.

        Args:
            generated_by: Optional provenance filter
            limit: Requested row count, clamped to MAX_RECENT_PROBLEMS

        Returns:
            List of (ProblemNode, last_attempt_at or None), newest node first
        """
        latest = (
            self.db.query(
                Attempt.problem_node_id.label("problem_node_id"),
                func.max(Attempt.timestamp).label("last_attempt_at"),
            )
            .group_by(Attempt.problem_node_id)
            .subquery()
        )

        query = (
            self.db.query(ProblemNode, latest.c.last_attempt_at)
            .outerjoin(latest, latest.c.problem_node_id == ProblemNode.id)
        )
        if generated_by is not None:
            query = query.filter(ProblemNode.generated_by == GeneratedBy(generated_by).value)

        rows = query.order_by(ProblemNode.created_at.desc()).limit(clamp_recent_limit(limit)).all()
        return [(node, last_attempt_at) for node, last_attempt_at in rows]

    # ─── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    def parse_content(node: ProblemNode):
        """Decode the stored content JSON into its ProblemContent variant."""
        return problem_content_adapter.validate_python(json.loads(node.content_json))

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Problem repository {operation} failed: {e}")
            raise DatabaseException(operation, e) from e
