# app/services/normalize.py
import logging
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from app.core.config import DEFAULT_START_TIME
from app.schemas.models import (
    CustomFrequency,
    DEFAULT_CATEGORY,
    DoseOccurrence,
    DoseRecord,
    FixedFrequency,
    MedicationInstance,
    MedicationRecord,
    MedicationSchedule,
)
from app.services.projector import project
from app.utils.time_codec import to_24h

logger = logging.getLogger(__name__)

_FIXED_KINDS = {
    "once_daily", "twice_daily", "three_times_daily", "four_times_daily",
    "every_other_day", "weekly", "as_needed",
}

_CODES = {
    "OD": "once_daily", "QD": "once_daily", "DAILY": "once_daily",
    "BID": "twice_daily", "BD": "twice_daily",
    "TID": "three_times_daily",
    "QID": "four_times_daily",
    "QOD": "every_other_day", "EOD": "every_other_day",
    "WEEKLY": "weekly",
    "PRN": "as_needed",
    "CUSTOM": "custom",
}

_DURATION_RE = re.compile(r"^\s*(-?\d+)\s*(day|days|d)?\s*$", re.IGNORECASE)
_DURATION_WEEKS_RE = re.compile(r"^\s*(-?\d+)\s*(week|weeks|w)\s*$", re.IGNORECASE)

# "every 8 hours", "every 6h", "q8h", "q 12 hrs"
_EVERY_N_HOURS_RE = re.compile(r"^(?:every|q)\s*(\d+)\s*(?:h|hr|hrs|hour|hours)$")
# morning-noon-night dose patterns such as 1-0-1 or 1-1-1-1
_DOSE_PATTERN_RE = re.compile(r"^([01])-([01])-([01])(?:-([01]))?$")
_PATTERN_KINDS = {1: "once_daily", 2: "twice_daily", 3: "three_times_daily", 4: "four_times_daily"}

def parse_interval_hours(freq_raw: Optional[str]) -> Optional[int]:
    m = _EVERY_N_HOURS_RE.match((freq_raw or "").strip().lower())
    if not m:
        return None
    hours = int(m.group(1))
    return hours if hours > 0 else None

def normalize_frequency(freq_raw: Optional[str]) -> str:
    raw = (freq_raw or "").strip().lower()
    f = raw.replace("-", "_").replace(" ", "_")

    if f in _FIXED_KINDS or f == "custom":
        return f
    if f.upper() in _CODES:
        return _CODES[f.upper()]

    if parse_interval_hours(raw):
        return "custom"
    m = _DOSE_PATTERN_RE.match(raw.replace(" ", ""))
    if m:
        total = sum(int(x) for x in m.groups() if x is not None)
        if total in _PATTERN_KINDS:
            return _PATTERN_KINDS[total]

    words = f.replace("_", " ")
    if "other day" in words or "alternate" in words:
        return "every_other_day"
    if "week" in words:
        return "weekly"
    if "as needed" in words or "when required" in words:
        return "as_needed"
    if "four" in words or "4x" in words:
        return "four_times_daily"
    if "three" in words or "thrice" in words or "3x" in words:
        return "three_times_daily"
    if "twice" in words or "two times" in words or "2x" in words:
        return "twice_daily"
    if "once" in words or "1x" in words or "daily" in words:
        return "once_daily"

    if f:
        logger.warning("unknown frequency %r, scheduling once daily", freq_raw)
    return "once_daily"

def normalize_duration_days(v: Any) -> Optional[int]:
    """
    Days from an int or a period string ("7 days", "2 weeks").
    None means ongoing; zero or negative values come back as 0 (never due).
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        d = v
    else:
        s = str(v).strip()
        if not s or s.lower() in ("ongoing", "none", "indefinite"):
            return None

        m = _DURATION_RE.match(s)
        w = _DURATION_WEEKS_RE.match(s)
        if m:
            d = int(m.group(1))
        elif w:
            d = int(w.group(1)) * 7
        else:
            logger.warning("unrecognized duration %r, treating as ongoing", v)
            return None

    if d <= 0:
        logger.warning("non-positive duration %r, prescription is never due", v)
        return 0
    return d

def build_frequency(kind: str, custom_interval_hours: Optional[int]):
    if kind == "custom":
        if custom_interval_hours and custom_interval_hours > 0:
            return CustomFrequency(interval_hours=custom_interval_hours)
        return CustomFrequency()
    return FixedFrequency(kind=kind)

def to_schedule(record: MedicationRecord, today: date) -> Optional[MedicationSchedule]:
    """
    Lenient conversion of a stored medication into an immutable schedule.
    Returns None for a prescription that can never be due (zero-length, or
    an end date before its start date).
    """
    kind = normalize_frequency(record.frequency)
    start_date = record.start_date or today

    duration = normalize_duration_days(record.duration_days)
    if duration is None:
        duration = normalize_duration_days(record.time_period)
    if duration is None and record.end_date is not None:
        # end date is inclusive
        duration = (record.end_date - start_date).days + 1

    if duration is not None and duration <= 0:
        logger.warning(
            "medication %s has no valid days (start %s, end %s), skipping",
            record.medication_id, start_date, record.end_date,
        )
        return None

    interval = record.custom_interval_hours or parse_interval_hours(record.frequency)

    raw_start = record.start_time or record.time or DEFAULT_START_TIME

    mode = (record.next_day_mode or "").strip().lower()
    if mode not in ("restart", "continue"):
        logger.warning("unknown next_day_mode %r for %s, using restart", record.next_day_mode, record.medication_id)
        mode = "restart"

    return MedicationSchedule(
        frequency=build_frequency(kind, interval),
        start_time=raw_start,
        start_date=start_date,
        duration_days=duration,
        next_day_mode=mode,
    )

def merge_taken(
    occurrences: Iterable[DoseOccurrence],
    dose_records: Iterable[DoseRecord],
    taken_times: Iterable[str] = (),
) -> List[DoseOccurrence]:
    """Attach persisted taken flags to freshly projected occurrences, matched by time."""
    taken_at: Dict[str, bool] = {to_24h(d.time): d.taken for d in dose_records}
    for t in taken_times:
        taken_at[to_24h(t)] = True
    return [
        occ.model_copy(update={"taken": taken_at.get(occ.time, False)})
        for occ in occurrences
    ]

def to_instance(
    record: MedicationRecord,
    today: date,
    taken_times: Iterable[str] = (),
) -> Optional[MedicationInstance]:
    """Today's view of one record, or None when it has nothing due today."""
    if not record.is_active:
        return None

    taken_times = [to_24h(t) for t in taken_times]
    base = dict(
        medication_id=record.medication_id,
        name=record.name,
        dosage=record.dosage,
        category=record_category(record),
    )

    if record.frequency is None:
        t = to_24h(record.time or record.start_time or DEFAULT_START_TIME)
        return MedicationInstance(**base, time=t, taken=record.taken or t in taken_times)

    schedule = to_schedule(record, today)
    occurrences = project(schedule, today) if schedule is not None else []
    if not occurrences:
        return None

    return MedicationInstance(
        **base,
        schedule=schedule,
        doses=merge_taken(occurrences, record.doses, taken_times),
    )

def record_category(record: MedicationRecord) -> str:
    return (record.category or "").strip().lower() or DEFAULT_CATEGORY

def active_schedules(records: Iterable[MedicationRecord], today: date) -> List[tuple]:
    """(record, schedule) pairs for every active record that can ever be due."""
    pairs = []
    for r in records:
        if not r.is_active:
            continue
        schedule = to_schedule(r, today)
        if schedule is not None:
            pairs.append((r, schedule))
    return pairs
