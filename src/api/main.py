"""FastAPI application entry point."""

import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import (
    bookings_router,
    health_router,
    repair_jobs_router,
    reservations_router,
    schedule_router,
)
from core.config import API_DEBUG, API_VERSION, DATA_STORE_URL, WORKSHOP_API_KEY


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: verify critical settings
    if not DATA_STORE_URL:
        warnings.warn("DATA_STORE_URL is not set; schedule endpoints will answer 503")
    if not WORKSHOP_API_KEY:
        warnings.warn("WORKSHOP_API_KEY is not set; /v1 endpoints will answer 500")

    yield


app = FastAPI(
    title="Workshop Scheduling API",
    description="REST API for the workshop calendar: role-scoped schedules and booking lifecycle",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Return structured error details as the body itself."""
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        content = ErrorResponse(**exc.detail).model_dump()
    else:
        content = ErrorResponse(error=str(exc.detail), code=ErrorCodes.INVALID_REQUEST).model_dump()
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed query/body: 400, keeping 422 for rejected bookings."""
    details = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Invalid request",
            code=ErrorCodes.INVALID_REQUEST,
            details=details,
        ).model_dump(),
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(schedule_router)
app.include_router(bookings_router)
app.include_router(reservations_router)
app.include_router(repair_jobs_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )
