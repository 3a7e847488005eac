"""Unit tests for ProblemRepository against in-memory SQLite."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from shared.models.domain import (
    GeneratedBy,
    ImageContent,
    ProblemStatus,
    TextContent,
    TextWithImageContent,
)
from shared.models.entities import ProblemNode
from shared.repositories import AttemptRepository, ProblemRepository, clamp_recent_limit
from shared.utils.exceptions import (
    DatabaseException,
    ProblemNotFoundException,
    StateTransitionException,
)

MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.fixture
def repo(db_session):
    return ProblemRepository(db_session)


class TestClampRecentLimit:

    @pytest.mark.parametrize("requested,expected", [
        (None, 5), (0, 1), (-3, 1), (1, 1), (7, 7), (10, 10), (11, 10), (9999, 10),
    ])
    def test_clamps_to_range(self, requested, expected):
        assert clamp_recent_limit(requested) == expected


class TestCreateNode:

    def test_root_node_defaults(self, repo):
        node = repo.create_node(
            content=TextContent(text="Evaluate 2+2"),
            generated_by=GeneratedBy.USER_UPLOAD,
            hidden_solution="2+2=4",
            hidden_answer="4",
        )
        assert node.id
        assert node.parent_id is None
        assert node.status == "active"
        assert node.generated_by == "user_upload"
        assert node.created_at is not None

    def test_accepts_content_dict(self, repo):
        node = repo.create_node(
            content={"kind": "image", "image_url": "https://x/p.png"},
            generated_by="user_upload",
            hidden_solution="s",
        )
        assert isinstance(repo.parse_content(node), ImageContent)

    def test_child_references_parent(self, repo, root_problem):
        child = repo.create_node(
            content=TextContent(text="Easier one"),
            generated_by=GeneratedBy.LLM_SUBPROBLEM,
            hidden_solution="sub",
            parent_id=root_problem.id,
            target_insight="insight",
        )
        assert child.parent_id == root_problem.id
        assert child.hidden_answer == ""
        assert child.target_insight == "insight"

    def test_unknown_parent_raises(self, repo, db_session):
        with pytest.raises(ProblemNotFoundException):
            repo.create_node(
                content=TextContent(text="Orphan"),
                generated_by=GeneratedBy.LLM_SUBPROBLEM,
                hidden_solution="s",
                parent_id=MISSING_ID,
            )
        assert db_session.query(ProblemNode).count() == 0

    def test_commit_failure_becomes_database_exception(self, repo, db_session, mocker):
        mocker.patch.object(db_session, "commit", side_effect=SQLAlchemyError("disk full"))
        rollback = mocker.spy(db_session, "rollback")

        with pytest.raises(DatabaseException) as exc_info:
            repo.create_node(
                content=TextContent(text="x"),
                generated_by=GeneratedBy.USER_UPLOAD,
                hidden_solution="s",
            )
        assert exc_info.value.operation == "create_node"
        rollback.assert_called_once()


class TestReads:

    def test_get_node(self, repo, root_problem):
        assert repo.get_node(root_problem.id).id == root_problem.id

    def test_get_node_missing_raises(self, repo):
        with pytest.raises(ProblemNotFoundException) as exc_info:
            repo.get_node(MISSING_ID)
        assert exc_info.value.problem_id == MISSING_ID

    def test_get_node_with_parent(self, repo, root_problem, subproblem):
        node = repo.get_node(subproblem.id, include_parent=True)
        assert node.parent.id == root_problem.id

    def test_exists(self, repo, root_problem):
        assert repo.exists(root_problem.id)
        assert not repo.exists(MISSING_ID)

    def test_get_hidden_fields(self, repo, root_problem):
        hidden = repo.get_hidden_fields(root_problem.id)
        assert hidden.hidden_solution == "SECRET-SOLUTION-STEPS"
        assert hidden.hidden_answer == "SECRET-ANSWER"

    def test_get_hidden_fields_missing_raises(self, repo):
        with pytest.raises(ProblemNotFoundException):
            repo.get_hidden_fields(MISSING_ID)

    def test_siblings_share_parent(self, repo, db_session, root_problem, subproblem):
        second = repo.create_node(
            content=TextContent(text="Another easier one"),
            generated_by=GeneratedBy.LLM_SUBPROBLEM,
            hidden_solution="s2",
            parent_id=root_problem.id,
        )
        children = db_session.query(ProblemNode).filter(ProblemNode.parent_id == root_problem.id).all()
        assert {c.id for c in children} == {subproblem.id, second.id}

    def test_parse_content_variants(self, repo, root_problem, image_problem):
        assert isinstance(repo.parse_content(root_problem), TextContent)
        content = repo.parse_content(image_problem)
        assert isinstance(content, TextWithImageContent)
        assert content.image_url == "https://cdn.example.com/uploads/p1.png"


class TestUpdateStatus:

    def test_active_to_solved(self, repo, subproblem):
        node = repo.update_status(subproblem.id, ProblemStatus.SOLVED)
        assert node.status == "solved"
        assert repo.get_node(subproblem.id).status == "solved"

    def test_accepts_string_status(self, repo, subproblem):
        assert repo.update_status(subproblem.id, "aborted").status == "aborted"

    def test_same_status_is_noop(self, repo, subproblem):
        repo.update_status(subproblem.id, ProblemStatus.SOLVED)
        assert repo.update_status(subproblem.id, ProblemStatus.SOLVED).status == "solved"

    def test_solved_cannot_reopen(self, repo, subproblem):
        repo.update_status(subproblem.id, ProblemStatus.SOLVED)
        with pytest.raises(StateTransitionException) as exc_info:
            repo.update_status(subproblem.id, ProblemStatus.ACTIVE)
        assert exc_info.value.from_status == "solved"
        assert repo.get_node(subproblem.id).status == "solved"

    def test_missing_node_raises(self, repo):
        with pytest.raises(ProblemNotFoundException):
            repo.update_status(MISSING_ID, ProblemStatus.SOLVED)

    def test_unknown_status_rejected(self, repo, subproblem):
        with pytest.raises(ValueError):
            repo.update_status(subproblem.id, "paused")


class TestListRecent:

    def _make_root(self, repo, db_session, title, created_at):
        node = repo.create_node(
            content=TextContent(text=f"Problem {title}", title=title),
            generated_by=GeneratedBy.USER_UPLOAD,
            hidden_solution="s",
        )
        node.created_at = created_at
        db_session.commit()
        return node

    def test_newest_first(self, repo, db_session):
        base = datetime(2026, 1, 1, 12, 0, 0)
        old = self._make_root(repo, db_session, "old", base)
        new = self._make_root(repo, db_session, "new", base + timedelta(hours=1))

        rows = repo.list_recent()
        assert [node.id for node, _ in rows] == [new.id, old.id]

    def test_limit_is_clamped(self, repo, db_session):
        base = datetime(2026, 1, 1, 12, 0, 0)
        for i in range(12):
            self._make_root(repo, db_session, f"p{i}", base + timedelta(minutes=i))

        assert len(repo.list_recent(limit=9999)) == 10
        assert len(repo.list_recent(limit=0)) == 1
        assert len(repo.list_recent()) == 5

    def test_filter_by_generated_by(self, repo, root_problem, subproblem):
        rows = repo.list_recent(generated_by=GeneratedBy.USER_UPLOAD)
        assert [node.id for node, _ in rows] == [root_problem.id]

    def test_last_attempt_time(self, repo, db_session, root_problem):
        rows = repo.list_recent()
        assert rows[0][1] is None

        attempts = AttemptRepository(db_session)
        attempts.create(root_problem.id, [], "first")
        latest = attempts.create(root_problem.id, [], "second")

        rows = repo.list_recent()
        assert rows[0][1] == latest.timestamp
