"""Health check endpoint."""

from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from ..database import Database
from ..dependencies.services import get_database

router = APIRouter()


@router.get("/health")
def health_check(database: Database = Depends(get_database)):
    """
    Returns 200 while the database answers, 503 otherwise.
    """
    healthy = database.ping()
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "error",
            "database": "ok" if healthy else "unavailable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
