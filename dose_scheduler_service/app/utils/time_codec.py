# app/utils/time_codec.py
from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

# "8:00 AM", "08:00pm", "20:00", "20:00:00"
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?\s*([AaPp][Mm])?$")

def parse_time_to_minutes(value: Any) -> int:
    """
    Minutes from midnight for a 12h or 24h time string.
    Fails closed: anything unparseable is 0 (treat as "unknown, start of day").
    """
    s = str(value or "").strip()
    m = _TIME_RE.match(s)
    if not m:
        logger.debug("unparseable time %r, using 00:00", value)
        return 0

    h, mins = int(m.group(1)), int(m.group(2))
    period = (m.group(3) or "").upper()
    if mins > 59:
        logger.debug("minute out of range in %r, using 00:00", value)
        return 0

    if period:
        if not 1 <= h <= 12:
            logger.debug("12h hour out of range in %r, using 00:00", value)
            return 0
        if period == "AM":
            h = 0 if h == 12 else h
        else:
            h = 12 if h == 12 else h + 12
    elif h > 23:
        logger.debug("24h hour out of range in %r, using 00:00", value)
        return 0

    return h * 60 + mins

def format_minutes_to_24h(total_minutes: int) -> str:
    total_minutes %= MINUTES_PER_DAY
    h, m = divmod(total_minutes, 60)
    return f"{h:02d}:{m:02d}"

def format_minutes_to_12h(total_minutes: int) -> str:
    total_minutes %= MINUTES_PER_DAY
    h, m = divmod(total_minutes, 60)
    period = "PM" if h >= 12 else "AM"
    return f"{h % 12 or 12}:{m:02d} {period}"

def to_24h(value: Any) -> str:
    return format_minutes_to_24h(parse_time_to_minutes(value))

def to_12h(value: Any) -> str:
    return format_minutes_to_12h(parse_time_to_minutes(value))

def add_minutes(time_24h: str, delta_minutes: int) -> str:
    # clock arithmetic only; the day boundary is simply wrapped
    return format_minutes_to_24h(parse_time_to_minutes(time_24h) + delta_minutes)
