"""FastAPI dependencies for the solver routes."""
from fastapi import Request

from solver.services.llm_gateway import LLMGateway


def get_llm_gateway(request: Request) -> LLMGateway:
    """
    Gateway over the LLMService the lifespan attached to the app.

    A missing client (no credential configured) still yields a gateway; its
    operations then fail closed with a 500 on first use.
    """
    return LLMGateway(getattr(request.app.state, "llm_service", None))
