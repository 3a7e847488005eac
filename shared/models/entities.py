"""SQLAlchemy ORM database models."""
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProblemNode(Base):
    """Problem node table - original problems and the subproblems generated from them."""
    __tablename__ = "problem_nodes"

    id = Column(String, primary_key=True)
    parent_id = Column(String, ForeignKey("problem_nodes.id"), nullable=True)
    content_json = Column(Text, nullable=False)  # JSON: tagged ProblemContent variant
    hidden_solution = Column(Text, nullable=False)
    hidden_answer = Column(Text, nullable=False, default="")
    target_insight = Column(Text, nullable=True)  # Subproblems only
    generated_by = Column(String, nullable=False)  # 'user_upload', 'llm_subproblem'
    status = Column(String, nullable=False, default="active")  # 'active', 'solved', 'aborted'
    created_at = Column(DateTime, default=utcnow, nullable=False)

    parent = relationship("ProblemNode", remote_side=[id], back_populates="children")
    children = relationship("ProblemNode", back_populates="parent")
    attempts = relationship("Attempt", back_populates="problem_node", order_by="Attempt.timestamp")

    __table_args__ = (
        Index("idx_problem_parent", "parent_id"),
        Index("idx_problem_generated_created", "generated_by", "created_at"),
    )


class Attempt(Base):
    """Attempt log - one row per submission of student work. Append-only."""
    __tablename__ = "attempts"

    id = Column(String, primary_key=True)
    problem_node_id = Column(String, ForeignKey("problem_nodes.id"), nullable=False)
    user_work_json = Column(Text, nullable=False)  # JSON: {"image_urls": [...]}
    user_text = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False)

    problem_node = relationship("ProblemNode", back_populates="attempts")

    __table_args__ = (
        Index("idx_attempt_node_time", "problem_node_id", "timestamp"),
    )
