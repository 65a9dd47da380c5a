# app/services/briefing.py
from typing import List, Optional

from app.schemas.models import DoseSummary, MedicationSchedule
from app.services.aggregator import next_after, overdue
from app.services.dose_times import calculate_dose_times
from app.utils.time_codec import parse_time_to_minutes, to_12h

def format_schedule_summary(schedule: MedicationSchedule) -> str:
    kind = schedule.frequency.kind
    if kind == "as_needed":
        return "Take as needed"

    doses = calculate_dose_times(schedule.start_time, schedule.frequency)
    times = ", ".join(to_12h(d.time) for d in doses)

    if kind == "every_other_day":
        return f"Every other day at {times}"
    if kind == "weekly":
        return f"Once weekly at {times}"
    return f"{len(doses)}x daily: {times}"

def format_time_until(minutes: int) -> str:
    if minutes < 1:
        return "now"
    if minutes < 60:
        return f"in {minutes} min"

    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f"in {hours} hr{'s' if hours > 1 else ''}"
    return f"in {hours}hr {rest}min"

def minutes_until(time_24h: str, now: str) -> int:
    return max(0, parse_time_to_minutes(time_24h) - parse_time_to_minutes(now))

def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"

def build_briefing(summary: DoseSummary, now: Optional[str] = None) -> List[str]:
    """
    Deterministic status lines for display and assistant context.
    Distinguishes "nothing scheduled" from "everything taken".
    """
    totals = summary.totals
    if summary.status == "NO_MEDICATIONS":
        return ["You have no medicines scheduled today."]

    if summary.status == "ALL_TAKEN":
        return [f"All {_plural(totals.total_doses, 'dose')} taken today. Great job!"]

    meds_left = len({p.medication_id for p in summary.pending})
    lines = [
        f"{_plural(meds_left, 'medicine')} left today.",
        f"{totals.taken_doses} of {_plural(totals.total_doses, 'dose')} taken so far.",
    ]

    nxt = summary.next
    if now is not None:
        late = overdue(summary.pending, now)
        if late:
            names = ", ".join(dict.fromkeys(p.name for p in late))
            lines.append(f"Overdue: {names}.")
        nxt = next_after(summary.pending, now)

    if nxt is not None:
        line = f"Next up: {nxt.name} at {to_12h(nxt.time)}"
        if now is not None:
            line += f" ({format_time_until(minutes_until(nxt.time, now))})"
        lines.append(line + ".")

    return lines
