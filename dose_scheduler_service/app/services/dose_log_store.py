from collections import Counter
from datetime import date, timedelta
from typing import Iterable, List, Optional
from app.schemas.models import AdherenceSummary, DoseEvent

DOSE_LOG: List[DoseEvent] = []

def append_event(ev: DoseEvent) -> None:
    DOSE_LOG.append(ev)

def list_events(medication_id: Optional[str] = None) -> List[DoseEvent]:
    if medication_id is None:
        return DOSE_LOG
    return [e for e in DOSE_LOG if e.medication_id == medication_id]

def events_since(since: date, medication_id: Optional[str] = None) -> List[DoseEvent]:
    return [e for e in list_events(medication_id) if e.date >= since]

def missed_count(medication_id: str) -> int:
    return sum(1 for e in list_events(medication_id) if e.status == "MISSED")

def taken_times(medication_id: str, on: date) -> List[str]:
    return [
        e.scheduled_time
        for e in DOSE_LOG
        if e.medication_id == medication_id and e.date == on and e.status == "TAKEN"
    ]

def summarize(
    events: Iterable[DoseEvent],
    days: int,
    medication_id: Optional[str] = None,
) -> AdherenceSummary:
    """Adherence over logged dose events; delay is averaged over TAKEN doses only."""
    events = list(events)
    by_status = Counter(e.status for e in events)
    delays = [e.delay_minutes for e in events if e.status == "TAKEN" and e.delay_minutes is not None]

    return AdherenceSummary(
        medication_id=medication_id,
        days=days,
        total_events=len(events),
        taken=by_status["TAKEN"],
        missed=by_status["MISSED"],
        skipped=by_status["SKIPPED"],
        snoozed=by_status["SNOOZED"],
        adherence_rate=round(by_status["TAKEN"] / len(events), 3) if events else 0.0,
        avg_delay_minutes=round(sum(delays) / len(delays), 1) if delays else None,
    )

def summarize_recent(days: int, medication_id: Optional[str] = None, today: Optional[date] = None) -> AdherenceSummary:
    since = (today or date.today()) - timedelta(days=days)
    return summarize(events_since(since, medication_id), days, medication_id)

def clear() -> None:
    DOSE_LOG.clear()
