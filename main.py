"""
SolveWithMe Backend - FastAPI Application

This is the main entry point for the Socratic problem-solving API.
The process owns its clients: the lifespan validates configuration, builds the
database manager and the model client once, and releases both on shutdown.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings, validate_required_settings
from database import DatabaseManager
from shared.api import health
from shared.services.llm_service import LLMService
from solver.api import problems

logger = logging.getLogger("main")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    db_manager: Optional[DatabaseManager] = None,
    llm_service: Optional[LLMService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Clients passed in are used as-is; missing ones are constructed by the
    lifespan after configuration has been validated.
    """
    app_settings = settings or get_settings()
    configure_logging(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting SolveWithMe backend...")

        owns_db = app.state.db_manager is None
        owns_llm = app.state.llm_service is None
        if owns_db or owns_llm:
            validate_required_settings(app_settings)

        if owns_db:
            app.state.db_manager = DatabaseManager(app_settings)
        if owns_llm:
            app.state.llm_service = LLMService(
                api_key=app_settings.openai_api_key,
                model_id=app_settings.openai_model,
                max_retries=app_settings.llm_max_retries,
                timeout=app_settings.llm_timeout_seconds,
                max_tokens=app_settings.llm_max_tokens,
            )

        if app.state.db_manager.health_check():
            logger.info("Database connection healthy")
        else:
            logger.warning("Database health check failed on startup")

        logger.info("Application started successfully")
        yield

        if owns_llm:
            app.state.llm_service.close()
        if owns_db:
            app.state.db_manager.close()
        logger.info("Application shut down")

    app = FastAPI(
        title="SolveWithMe Backend",
        description="Socratic AI tutoring API: solve, decompose, check, verify, reveal",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.db_manager = db_manager
    app.state.llm_service = llm_service

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Malformed request"},
        )

    # Include routers
    app.include_router(health.router)
    app.include_router(problems.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development"
    )
