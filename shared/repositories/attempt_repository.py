"""Attempt logging data access layer."""
import json
import logging
from typing import List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from shared.models.entities import Attempt, ProblemNode, utcnow
from shared.utils.exceptions import DatabaseException, ProblemNotFoundException

logger = logging.getLogger(__name__)


class AttemptRepository:
    """Repository for the append-only attempt log."""

    def __init__(self, db: DBSession):
        self.db = db

    def create(
        self,
        problem_node_id: str,
        user_work: Optional[List[str]] = None,
        user_text: Optional[str] = None,
    ) -> Attempt:
        """
        Log one submission of student work.

        Args:
            problem_node_id: Node the work was submitted against
            user_work: Image URLs of the student's work
            user_text: Typed work, if any

        Returns:
            Created Attempt model

        Raises:
            ProblemNotFoundException: if the node does not exist
        """
        if self.db.get(ProblemNode, problem_node_id) is None:
            raise ProblemNotFoundException(problem_node_id)

        attempt = Attempt(
            id=str(uuid4()),
            problem_node_id=problem_node_id,
            user_work_json=json.dumps({"image_urls": list(user_work or [])}),
            user_text=user_text,
            timestamp=utcnow(),
        )
        self.db.add(attempt)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Attempt log for {problem_node_id} failed: {e}")
            raise DatabaseException("create_attempt", e) from e
        self.db.refresh(attempt)
        return attempt
