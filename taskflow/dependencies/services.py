"""Per-request access to the collaborators built in ``main.create_app``."""

from datetime import timedelta

from fastapi import Request

from ..crud import TaskStore, UserStore
from ..database import Database
from ..services.auth import AuthService
from ..services.insights import InsightGenerator
from ..services.tasks import TaskService


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_auth_service(request: Request) -> AuthService:
    settings = request.app.state.settings
    return AuthService(
        UserStore(get_database(request)),
        settings.jwt_secret,
        timedelta(days=settings.jwt_expire_days),
    )


def get_task_service(request: Request) -> TaskService:
    return TaskService(TaskStore(get_database(request)))


def get_insight_generator(request: Request) -> InsightGenerator:
    return request.app.state.insights
