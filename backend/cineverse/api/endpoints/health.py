"""Health check endpoint."""

from typing import Literal

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from cineverse.common.request_id import get_request_id
from cineverse.core.logging import get_logger
from cineverse.db.session import get_db

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"]
    database: Literal["ok", "down"]
    request_id: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Checks the database. Returns 503 when it cannot be reached.",
    responses={503: {"model": HealthResponse}},
)
async def health_check(request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check failed", extra={"request_id": request_id, "error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=HealthResponse(
                status="unhealthy", database="down", request_id=request_id
            ).model_dump(),
        )

    return HealthResponse(status="healthy", database="ok", request_id=request_id)
