"""Problem hierarchy API endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session as DBSession

from database import get_db
from shared.models.schemas import (
    CheckRequest,
    CheckResponse,
    CompleteRequest,
    CompleteResponse,
    IngestRequest,
    IngestResponse,
    ProblemView,
    RecentProblemsResponse,
    RevealResponse,
    StuckRequest,
    StuckResponse,
)
from shared.utils.constants import DEFAULT_RECENT_PROBLEMS
from shared.utils.exceptions import SolveWithMeException
from solver.api.dependencies import get_llm_gateway
from solver.services.llm_gateway import LLMGateway
from solver.services.problem_service import ProblemService

logger = logging.getLogger("solver.api")

router = APIRouter(tags=["problems"])


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.exception(f"Error {action}: {error}")
    return HTTPException(status_code=500, detail="Internal Server Error")


@router.post("/ingest", response_model=IngestResponse)
def ingest_problem(
    request: IngestRequest,
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Solve a new problem (image URL and/or text) and store it as a root node."""
    try:
        return ProblemService(db, gateway).ingest(image_url=request.image_url, text=request.text)
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("ingesting problem", e)


@router.get("/problem/{problem_id}", response_model=ProblemView)
def get_problem(
    problem_id: str,
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Public view of a problem node. Never includes the hidden solution or answer."""
    try:
        return ProblemService(db, gateway).get_problem(problem_id)
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("loading problem", e)


@router.post("/stuck", response_model=StuckResponse)
def stuck(
    request: StuckRequest,
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Generate a subproblem targeting the insight the student is missing."""
    try:
        return ProblemService(db, gateway).stuck(
            request.problem_id, request.user_work_images, request.user_text
        )
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("generating subproblem", e)


@router.post("/check", response_model=CheckResponse)
def check_thinking(
    request: CheckRequest,
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Advisory feedback on the student's current work."""
    try:
        return ProblemService(db, gateway).check_thinking(
            request.problem_id, request.user_work_images, request.user_text
        )
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("checking thinking", e)


@router.post("/complete", response_model=CompleteResponse)
def complete_subproblem(
    request: CompleteRequest,
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Verify a subproblem attempt; a verified attempt marks the node solved."""
    try:
        return ProblemService(db, gateway).complete(
            request.subproblem_id, request.user_work_images, request.user_text
        )
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("verifying attempt", e)


@router.get("/reveal", response_model=RevealResponse)
def reveal_solution(
    problem_id: Optional[str] = Query(default=None, alias="problemId"),
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Return the hidden solution and answer for one node."""
    try:
        return ProblemService(db, gateway).reveal(problem_id)
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("revealing solution", e)


@router.get("/recent-problems", response_model=RecentProblemsResponse)
def recent_problems(
    limit: int = Query(default=DEFAULT_RECENT_PROBLEMS),
    db: DBSession = Depends(get_db),
    gateway: LLMGateway = Depends(get_llm_gateway),
):
    """Recently uploaded problems; at most 10 regardless of the requested limit."""
    try:
        return ProblemService(db, gateway).recent_problems(limit)
    except SolveWithMeException as e:
        raise e.to_http_exception()
    except Exception as e:
        raise _internal_error("listing recent problems", e)
