"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("WORKSHOP_DB_PATH", PROJECT_ROOT / "data" / "db" / "workshop-api.db"))
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# DATA STORE (REST backend)
# =============================================================================

DATA_STORE_URL = os.environ.get("DATA_STORE_URL", "")
DATA_STORE_TOKEN = os.environ.get("DATA_STORE_TOKEN", "")
DATA_STORE_TIMEOUT_SECONDS = float(os.environ.get("DATA_STORE_TIMEOUT_SECONDS", "30"))

# =============================================================================
# SCHEDULING RULES
# =============================================================================

RESERVATION_MIN_MINUTES = 30
RESERVATION_MAX_MINUTES = 120

DEFAULT_RESERVATION_MINUTES = 60
DEFAULT_REPAIR_JOB_MINUTES = 120

DEFAULT_RESERVATION_SERVICE = "Checkup"
DEFAULT_REPAIR_JOB_SERVICE = "Repair"
UNKNOWN_CLIENT_NAME = "Unknown"

# Day view shows 00:00 to 20:00
DAY_VIEW_START_HOUR = 0
DAY_VIEW_END_HOUR = 20

WORKSHOP_TIMEZONE = ZoneInfo(os.environ.get("WORKSHOP_TIMEZONE", "UTC"))

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

SCHEDULE_HEADERS = ["Date", "Start", "End", "Type", "Title", "Label", "Status", "Mechanic"]
WORKLOAD_HEADERS = ["Mechanic", "Reservations", "Repair Jobs", "Cancelled", "Total"]

# =============================================================================
# API CONFIGURATION
# =============================================================================

WORKSHOP_API_KEY = os.environ.get("WORKSHOP_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
