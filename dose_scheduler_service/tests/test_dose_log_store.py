from datetime import timedelta

from app.schemas.models import DoseEvent
from app.services import dose_log_store
from conftest import START

def _event(status, day=START, med="m1", delay=None):
    return DoseEvent(medication_id=med, date=day, scheduled_time="08:00", status=status, delay_minutes=delay)

def test_summarize_counts_statuses_and_taken_delay():
    events = [
        _event("TAKEN", delay=10),
        _event("TAKEN", delay=-4),
        _event("SNOOZED", delay=30),
        _event("MISSED"),
    ]
    s = dose_log_store.summarize(events, days=7, medication_id="m1")
    assert (s.total_events, s.taken, s.missed, s.skipped, s.snoozed) == (4, 2, 1, 0, 1)
    assert s.adherence_rate == 0.5
    assert s.avg_delay_minutes == 3.0

def test_summarize_empty():
    s = dose_log_store.summarize([], days=7)
    assert s.total_events == 0
    assert s.adherence_rate == 0.0
    assert s.avg_delay_minutes is None

def test_summarize_recent_window_and_filter():
    dose_log_store.append_event(_event("TAKEN", day=START))
    dose_log_store.append_event(_event("MISSED", day=START - timedelta(days=10)))
    dose_log_store.append_event(_event("TAKEN", day=START, med="m2"))

    s = dose_log_store.summarize_recent(7, "m1", today=START)
    assert s.total_events == 1
    assert s.adherence_rate == 1.0
    assert dose_log_store.summarize_recent(7, today=START).total_events == 2

def test_missed_count_per_medication():
    for med in ("m1", "m1", "m2"):
        dose_log_store.append_event(_event("MISSED", med=med))
    assert dose_log_store.missed_count("m1") == 2
    assert dose_log_store.missed_count("m3") == 0
