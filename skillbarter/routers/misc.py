"""Miscellaneous routes: health."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from skillbarter.constants import APP_VERSION
from skillbarter.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["misc"])


@router.get(
    "/health",
    summary="Health check",
    description="Verifies DB connectivity.",
    response_description="Health status with component details.",
)
async def health(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Health check endpoint — verifies DB connectivity.

    Args:
        request: The incoming request.
        db: Database session.

    Returns:
        Dict with status, database and version information.
    """
    request_id = getattr(request.state, "request_id", "")

    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.exception("Health check could not reach the database")
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "version": APP_VERSION,
        "request_id": request_id,
    }
