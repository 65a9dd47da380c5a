import logging
from datetime import date, timedelta
from functools import reduce
from typing import Iterator, List, Optional, Tuple

from app.schemas.models import DoseOccurrence, MedicationSchedule
from app.services.dose_times import calculate_dose_times, interval_minutes
from app.utils.time_codec import add_minutes, to_24h

logger = logging.getLogger(__name__)

def days_between(start: date, target: date) -> int:
    return (target - start).days

def is_scheduled_on(schedule: MedicationSchedule, days_diff: int) -> bool:
    """Whether the prescription has doses `days_diff` days after its start date."""
    if days_diff < 0:
        return False
    if schedule.duration_days is not None and days_diff >= schedule.duration_days:
        return False

    kind = schedule.frequency.kind
    if kind == "weekly":
        return days_diff % 7 == 0
    if kind == "every_other_day":
        return days_diff % 2 == 0
    if kind == "as_needed":
        # never auto-scheduled past the first day
        return days_diff == 0
    return True

def roll_anchor(schedule: MedicationSchedule, last_time: str) -> str:
    """Continue mode step: the next day starts one interval after the last dose."""
    return add_minutes(to_24h(last_time), interval_minutes(schedule.frequency))

def _next_anchor(schedule: MedicationSchedule, anchor: str) -> str:
    doses = calculate_dose_times(anchor, schedule.frequency)
    return roll_anchor(schedule, doses[-1].time)

def _eligible_days(schedule: MedicationSchedule, until: int) -> Iterator[int]:
    return (d for d in range(until) if is_scheduled_on(schedule, d))

def anchor_for(schedule: MedicationSchedule, target_date: date) -> str:
    """
    First dose time on target_date, before gating.

    Restart mode always starts at the schedule's start time. Continue mode is
    a fold over every eligible day from the start date up to (not including)
    the target date.
    """
    if schedule.next_day_mode == "restart":
        return schedule.start_time

    days_diff = days_between(schedule.start_date, target_date)
    return reduce(
        lambda anchor, _day: _next_anchor(schedule, anchor),
        _eligible_days(schedule, days_diff),
        schedule.start_time,
    )

def project(
    schedule: MedicationSchedule,
    target_date: date,
    previous_day_last_occurrence_time: Optional[str] = None,
) -> List[DoseOccurrence]:
    """
    Dose occurrences for one calendar date; empty when nothing is due.

    In continue mode, previous_day_last_occurrence_time is the last dose time of
    the previous *eligible* day as the caller last projected it. When given it
    skips the fold from the start date; the caller owns its consistency.
    """
    days_diff = days_between(schedule.start_date, target_date)
    if not is_scheduled_on(schedule, days_diff):
        return []

    if schedule.next_day_mode == "continue" and days_diff > 0 and previous_day_last_occurrence_time:
        anchor = roll_anchor(schedule, previous_day_last_occurrence_time)
    else:
        anchor = anchor_for(schedule, target_date)

    doses = calculate_dose_times(anchor, schedule.frequency)
    logger.debug("projected %d dose(s) for %s (day %d, anchor %s)", len(doses), target_date, days_diff, anchor)
    return doses

def project_range(
    schedule: MedicationSchedule,
    first_date: date,
    days: int,
) -> List[Tuple[date, List[DoseOccurrence]]]:
    """
    Projection for `days` consecutive dates starting at first_date.

    The continue-mode anchor is folded once up to first_date and then carried
    from day to day, so a multi-week view stays linear in its length.
    """
    out: List[Tuple[date, List[DoseOccurrence]]] = []
    if days <= 0:
        return out

    anchor = anchor_for(schedule, first_date)
    start_diff = days_between(schedule.start_date, first_date)

    for offset in range(days):
        target = first_date + timedelta(days=offset)
        days_diff = start_diff + offset

        if not is_scheduled_on(schedule, days_diff):
            out.append((target, []))
            continue

        doses = calculate_dose_times(anchor, schedule.frequency)
        out.append((target, doses))

        if schedule.next_day_mode == "continue":
            anchor = roll_anchor(schedule, doses[-1].time)

    return out
