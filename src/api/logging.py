"""SQLite request logging for API."""

import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator

from fastapi import HTTPException, Request

from api.errors import to_http_exception
from core.database import get_connection


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    role: str | None = None
    user_id: int | None = None
    record_id: int | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    events_returned: int | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)


def log_request(log: RequestLog) -> None:
    """Write request log to SQLite database."""
    conn = get_connection()
    try:
        cursor = conn.cursor()

        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                role, user_id, record_id, status_code, error_code,
                error_message, processing_time_ms, events_returned
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.role,
                log.user_id,
                log.record_id,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.events_returned,
            ),
        )

        for detail_type, message in log.details:
            cursor.execute(
                """
                INSERT INTO api_request_details (request_id, detail_type, message)
                VALUES (?, ?, ?)
            """,
                (log.request_id, detail_type, message),
            )

        conn.commit()
    finally:
        conn.close()


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _record_http_error(request_log: RequestLog, exc: HTTPException) -> None:
    request_log.status_code = exc.status_code
    if isinstance(exc.detail, dict):
        request_log.error_code = exc.detail.get("code")
        request_log.error_message = exc.detail.get("error")
        for detail in exc.detail.get("details", []):
            request_log.details.append(("validation_error", detail))
    else:
        request_log.error_message = str(exc.detail)


@contextmanager
def tracked_request(request: Request, **fields) -> Iterator[RequestLog]:
    """
    Log one API request, translating domain errors into HTTP errors.

    The body of the `with` block fills in the yielded RequestLog; the entry
    is written when the block exits, whatever the outcome.
    """
    start_time = time.time()
    request_log = RequestLog(
        endpoint=request.url.path,
        method=request.method,
        client_ip=get_client_ip(request),
        **fields,
    )

    try:
        yield request_log
        if not request_log.status_code:
            request_log.status_code = 200

    except HTTPException as e:
        _record_http_error(request_log, e)
        raise

    except Exception as e:
        http_exc = to_http_exception(e)
        _record_http_error(request_log, http_exc)
        if http_exc.status_code >= 500:
            request_log.error_message = str(e)
        raise http_exc from e

    finally:
        request_log.processing_time_ms = int((time.time() - start_time) * 1000)
        # Always log the request
        try:
            log_request(request_log)
        except sqlite3.Error:
            # Don't fail the request if logging fails
            pass
