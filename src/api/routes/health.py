"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION, DATA_STORE_URL

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if the data store is configured, 503 otherwise.
    """
    data_store_configured = bool(DATA_STORE_URL)
    timestamp = datetime.now(timezone.utc).isoformat()

    if data_store_configured:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            data_store_configured=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                data_store_configured=False,
                timestamp=timestamp,
                error="DATA_STORE_URL is not configured",
            ).model_dump(),
        )
