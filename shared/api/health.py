"""Health check API endpoints."""
from fastapi import APIRouter, Depends, Request

from config import Settings
from database import DatabaseManager, get_db_manager

router = APIRouter(tags=["health"])

SERVICE_NAME = "SolveWithMe Backend"
SERVICE_VERSION = "1.0.0"


@router.get("/")
def read_root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return request.app.state.settings


@router.get("/config/models")
def get_model_config(settings: Settings = Depends(get_app_settings)):
    """Return the model every tutoring operation is sent to."""
    return {
        "provider": "openai",
        "model_id": settings.openai_model,
        "timeout_seconds": settings.llm_timeout_seconds,
    }


@router.get("/health/db")
def database_health(db_manager: DatabaseManager = Depends(get_db_manager)):
    """Database health check."""
    try:
        if db_manager.health_check():
            return {"status": "ok", "database": "connected"}
        return {"status": "error", "database": "connection_failed"}
    except Exception as e:
        return {"status": "error", "database": f"error: {type(e).__name__}"}
