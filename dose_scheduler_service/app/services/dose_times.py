from typing import List, Optional
from app.schemas.models import (
    CustomFrequency,
    DEFAULT_CUSTOM_INTERVAL_HOURS,
    DoseOccurrence,
    Frequency,
    MAX_DOSES_PER_DAY,
)
from app.utils.time_codec import MINUTES_PER_DAY, format_minutes_to_24h, parse_time_to_minutes

_ORDINAL_LABELS = ("Morning", "Midday", "Afternoon", "Evening")

# hours between doses within one day; absent kinds take a single daily dose
_INTERVAL_HOURS = {
    "twice_daily": 12,
    "three_times_daily": 8,
    "four_times_daily": 6,
}

def label_for_ordinal(ordinal: int) -> str:
    if 1 <= ordinal <= len(_ORDINAL_LABELS):
        return _ORDINAL_LABELS[ordinal - 1]
    return "Dose"

def dose_interval_hours(frequency: Frequency) -> Optional[int]:
    """Hours between same-day doses, or None for single-dose frequencies."""
    if isinstance(frequency, CustomFrequency):
        hours = frequency.interval_hours
        return hours if hours and hours > 0 else DEFAULT_CUSTOM_INTERVAL_HOURS
    return _INTERVAL_HOURS.get(frequency.kind)

def interval_minutes(frequency: Frequency) -> int:
    """Rollover step for continue mode: the dose interval, or a full day."""
    hours = dose_interval_hours(frequency)
    return hours * 60 if hours else MINUTES_PER_DAY

def calculate_dose_times(start_time: str, frequency: Frequency) -> List[DoseOccurrence]:
    """
    Dose occurrences for a single day, anchored at start_time.

    Doses step forward by the frequency interval on the clock-hour, keeping the
    start minute, and stop before the hour reaches 24 or after four doses.
    Single-dose frequencies (once_daily, as_needed, every_other_day, weekly)
    yield one "Daily" occurrence. Never raises: an unparseable start_time
    anchors the day at 00:00.
    """
    start = parse_time_to_minutes(start_time)
    hours = dose_interval_hours(frequency)

    if hours is None:
        return [DoseOccurrence(time=format_minutes_to_24h(start), label="Daily", ordinal=1)]

    start_hour, start_minute = divmod(start, 60)
    doses: List[DoseOccurrence] = []
    clock_hour = start_hour

    while clock_hour < 24 and len(doses) < MAX_DOSES_PER_DAY:
        ordinal = len(doses) + 1
        doses.append(DoseOccurrence(
            time=format_minutes_to_24h(clock_hour * 60 + start_minute),
            label=label_for_ordinal(ordinal),
            ordinal=ordinal,
        ))
        clock_hour += hours

    return doses
