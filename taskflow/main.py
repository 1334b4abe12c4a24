import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .api import auth
from .api import health
from .api import tasks
from .config import Settings
from .database import Database
from .errors import TaskflowError
from .logging_setup import setup_logging
from .services.insights import InsightGenerator
from .services.validator import describe_error

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, kind: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "kind": kind, **extra}},
    )


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    insights: Optional[InsightGenerator] = None,
) -> FastAPI:
    """Build the application.

    Collaborators default to ones built from ``settings`` (itself read from the
    environment when omitted); tests pass their own.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.sql_echo)
    insights = insights or InsightGenerator(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.connect()
        try:
            yield
        finally:
            database.disconnect()

    app = FastAPI(title="TaskFlow", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.insights = insights

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TaskflowError)
    async def handle_domain_error(request: Request, exc: TaskflowError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        response = JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # skip the leading "body"/"query" location segment
        message = describe_error(exc.errors()[0], skip=1)
        return _error_response(400, message, "validation_error")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        extra = {"detail": repr(exc)} if settings.is_development else {}
        return _error_response(500, "Internal Server Error", "internal_error", **extra)

    # Mount routers
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth-legacy"], include_in_schema=False)
    app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks-legacy"], include_in_schema=False)
    app.include_router(health.router, tags=["health"])

    @app.get("/")
    async def read_root():
        return {"message": "TaskFlow API is running."}

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "taskflow.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
