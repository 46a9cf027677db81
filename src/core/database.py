"""
SQLite database operations for the API request log.
"""

import sqlite3

from core.config import DB_PATH


def get_connection() -> sqlite3.Connection:
    """Get a database connection."""
    return sqlite3.connect(DB_PATH)


def create_schema(conn: sqlite3.Connection):
    """Create request log tables and indexes if they don't exist."""
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()

    # One row per HTTP request
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS api_requests (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            request_id TEXT UNIQUE NOT NULL,
            timestamp TEXT NOT NULL,
            endpoint TEXT NOT NULL,
            method TEXT NOT NULL,
            client_ip TEXT,
            role TEXT,
            user_id INTEGER,
            record_id INTEGER,
            status_code INTEGER NOT NULL,
            error_code TEXT,
            error_message TEXT,
            processing_time_ms INTEGER NOT NULL,
            events_returned INTEGER
        )
    """)

    # Validation errors and data store notifications per request
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS api_request_details (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            request_id TEXT NOT NULL,
            detail_type TEXT NOT NULL CHECK(detail_type IN ('validation_error', 'notification', 'warning')),
            message TEXT NOT NULL,
            FOREIGN KEY (request_id) REFERENCES api_requests(request_id)
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_requests_timestamp ON api_requests(timestamp)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_requests_status ON api_requests(status_code)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_api_request_details_request ON api_request_details(request_id)"
    )
    conn.commit()


def count_requests_by_status(conn: sqlite3.Connection) -> dict[int, int]:
    """Logged request totals keyed by HTTP status code."""
    cursor = conn.cursor()
    cursor.execute("SELECT status_code, COUNT(*) FROM api_requests GROUP BY status_code")
    return {status_code: count for status_code, count in cursor.fetchall()}
