"""Pytest configuration and shared fixtures."""
import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

os.environ.setdefault("OPENAI_API_KEY", "test-key-fake")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from shared.models.entities import Base
from shared.models.domain import GeneratedBy, TextContent, TextWithImageContent
from shared.repositories import ProblemRepository
from solver.models.llm_outputs import (
    CheckThinkingResult,
    DecomposeResult,
    ExtractionResult,
    GatewayResult,
    SolveResult,
    VerifyResult,
)
from solver.services.llm_gateway import LLMGateway


@pytest.fixture(scope="function")
def db_session():
    """
    Create a test database session with in-memory SQLite.

    This fixture creates a fresh database for each test function,
    ensuring test isolation. The single connection is shared across threads
    so API tests (sync endpoints run in a worker thread) see the same data.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(engine)

    # Create session
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()

    yield session

    # Cleanup
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


# ---------------------------------------------------------------------------
# Sample model outputs
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_extraction():
    return ExtractionResult(
        problem_text="Find all integers $n$ such that $n^2 + 1$ is divisible by $n + 1$.",
        category="Number Theory",
        title="Divisibility Problem",
    )


@pytest.fixture
def sample_solve():
    return SolveResult(
        solution="Integrate by parts twice: $\\int x^2 e^x dx = e^x(x^2 - 2x + 2) + C$.",
        answer="$e^x(x^2 - 2x + 2) + C$",
    )


@pytest.fixture
def sample_decompose():
    return DecomposeResult(
        student_summary="You set up integration by parts correctly.",
        missing_insight="Integration by parts may need to be applied more than once.",
        subproblem_text="Evaluate $\\int x e^x dx$.",
        tutor_intro="Nice start with choosing $u = x^2$!",
        tutor_subproblem_message="Try this smaller integral first; it is the piece you need next.",
        hidden_subproblem_solution="$\\int x e^x dx = e^x(x - 1) + C$",
    )


@pytest.fixture
def fake_gateway(mocker, sample_extraction, sample_solve, sample_decompose):
    """LLMGateway double whose operations all succeed by default."""
    gateway = mocker.create_autospec(LLMGateway, instance=True)
    gateway.extract_problem.return_value = GatewayResult.ok(sample_extraction)
    gateway.solve.return_value = GatewayResult.ok(sample_solve)
    gateway.decompose.return_value = GatewayResult.ok(sample_decompose)
    gateway.check_thinking.return_value = GatewayResult.ok(
        CheckThinkingResult(feedback="You're on the right track; check the sign in step 2.")
    )
    gateway.verify.return_value = GatewayResult.ok(
        VerifyResult(solved=True, tutor_message="Exactly! Now apply the same idea to the original integral.")
    )
    return gateway


# ---------------------------------------------------------------------------
# Seeded data
# ---------------------------------------------------------------------------

@pytest.fixture
def root_problem(db_session):
    """A user-uploaded root node with a hidden solution and answer."""
    repo = ProblemRepository(db_session)
    return repo.create_node(
        content=TextContent(text="Evaluate $\\int x^2 e^x dx$", category="Calculus", title="Integration by Parts"),
        generated_by=GeneratedBy.USER_UPLOAD,
        hidden_solution="SECRET-SOLUTION-STEPS",
        hidden_answer="SECRET-ANSWER",
    )


@pytest.fixture
def image_problem(db_session):
    repo = ProblemRepository(db_session)
    return repo.create_node(
        content=TextWithImageContent(
            text="Find $x$ if $2^x = 32$.",
            image_url="https://cdn.example.com/uploads/p1.png",
            category="Algebra",
            title="Exponential Equation",
        ),
        generated_by=GeneratedBy.USER_UPLOAD,
        hidden_solution="32 = 2^5 so x = 5",
        hidden_answer="5",
    )


@pytest.fixture
def subproblem(db_session, root_problem):
    """A generated subproblem one level under root_problem."""
    repo = ProblemRepository(db_session)
    return repo.create_node(
        content=TextContent(text="Evaluate $\\int x e^x dx$."),
        generated_by=GeneratedBy.LLM_SUBPROBLEM,
        hidden_solution="SUB-SECRET",
        parent_id=root_problem.id,
        target_insight="Apply integration by parts repeatedly.",
    )


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------

@pytest.fixture
def app(mocker, db_session, fake_gateway):
    """Full application with the test session and gateway injected."""
    from config import Settings
    from database import get_db
    from main import create_app
    from solver.api.dependencies import get_llm_gateway

    settings = Settings(openai_api_key="test-key-fake", database_url="sqlite:///:memory:")
    application = create_app(
        settings=settings,
        db_manager=mocker.MagicMock(),
        llm_service=mocker.MagicMock(),
    )

    def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_llm_gateway] = lambda: fake_gateway
    return application


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    return TestClient(app)
