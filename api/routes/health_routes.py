"""Health check endpoints."""

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import check_db_connection
from schemas import HealthResponse

SERVICE_NAME = "estate-api"

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={
        503: {
            "description": "Service unavailable - DB unreachable",
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "error": {"message": "Database unavailable", "code": 1500},
                    }
                }
            },
        }
    },
)
async def ready(request: Request) -> HealthResponse:
    """Readiness endpoint. Returns 200 only when the database is reachable."""
    try:
        await check_db_connection(request.app.state.engine)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        ) from e

    return HealthResponse(status="ready", service=SERVICE_NAME)
