import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# dose_scheduler_service/config.env; real environment variables win
ENV_PATH = Path(__file__).resolve().parents[2] / "config.env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

# fallback for records that carry no start time at all (unparseable strings still map to 00:00)
DEFAULT_START_TIME = os.getenv("DEFAULT_START_TIME", "08:00")

PLANNER_DEFAULT_DAYS = int(os.getenv("PLANNER_DEFAULT_DAYS", "7"))
PLANNER_MAX_DAYS = int(os.getenv("PLANNER_MAX_DAYS", "28"))  # four weeks ahead

MISS_ALERT_THRESHOLD = int(os.getenv("MISS_ALERT_THRESHOLD", "2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

def dose_log_write_key() -> Optional[str]:
    # read per request so the key can be rotated without a restart
    return os.getenv("INTERNAL_SERVICE_SECRET") or None
