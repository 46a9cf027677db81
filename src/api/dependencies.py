"""FastAPI dependencies for authentication and shared resources."""

import secrets

from fastapi import Depends, Header, HTTPException, status

from api.models.responses import ErrorCodes
from core.config import WORKSHOP_API_KEY
from core.lifecycle import Role
from core.store_client import get_data_store
from models.events import CallerIdentity
from services.data_store import DataStore
from services.scheduling import SchedulingCoordinator


async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> str:
    """
    Verify API key from X-API-Key header.

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    if not WORKSHOP_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "API key not configured on server",
                "code": ErrorCodes.INTERNAL_ERROR,
                "details": [],
            },
        )

    # Use constant-time comparison to prevent timing attacks
    if not secrets.compare_digest(x_api_key, WORKSHOP_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Invalid or missing API key",
                "code": ErrorCodes.UNAUTHORIZED,
                "details": [],
            },
        )

    return x_api_key


async def get_caller(
    x_user_role: str = Header(..., alias="X-User-Role"),
    x_user_id: int | None = Header(None, alias="X-User-Id"),
    x_user_email: str | None = Header(None, alias="X-User-Email"),
) -> CallerIdentity:
    """
    Caller identity forwarded by the authenticating front end.

    Raises:
        HTTPException: 400 for an unknown role
    """
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": f"Unknown role '{x_user_role}'",
                "code": ErrorCodes.INVALID_REQUEST,
                "details": [f"Expected one of: {', '.join(r.value for r in Role)}"],
            },
        )
    return CallerIdentity(role=role, user_id=x_user_id, email=x_user_email or None)


def get_store() -> DataStore:
    """
    Shared Data Store client.

    Raises:
        HTTPException: 503 if DATA_STORE_URL is not configured
    """
    try:
        return get_data_store()
    except RuntimeError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Data store not configured",
                "code": ErrorCodes.DATA_STORE_UNAVAILABLE,
                "details": [str(e)],
            },
        )


def get_coordinator(store: DataStore = Depends(get_store)) -> SchedulingCoordinator:
    """One coordinator per request; HTTP requests share no view state."""
    return SchedulingCoordinator(store)
