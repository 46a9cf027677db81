"""
Data Store client setup with lazy initialization.
"""

from core.config import DATA_STORE_TIMEOUT_SECONDS, DATA_STORE_TOKEN, DATA_STORE_URL
from services.data_store import HttpDataStore

_data_store: HttpDataStore | None = None


def get_data_store() -> HttpDataStore:
    """Get or create the Data Store client (lazy initialization)."""
    global _data_store
    if _data_store is None:
        if not DATA_STORE_URL:
            raise RuntimeError("DATA_STORE_URL is not configured")
        _data_store = HttpDataStore(
            base_url=DATA_STORE_URL,
            token=DATA_STORE_TOKEN or None,
            timeout=DATA_STORE_TIMEOUT_SECONDS,
        )
    return _data_store
