from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.models import CustomFrequency, FixedFrequency, MedicationSchedule
from app.services import dose_log_store

START = date(2026, 1, 5)

@pytest.fixture(autouse=True)
def _clean_dose_log():
    dose_log_store.clear()
    yield
    dose_log_store.clear()

@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("INTERNAL_SERVICE_SECRET", "test-secret")
    return TestClient(app)

@pytest.fixture
def make_schedule():
    def _make(kind="once_daily", start_time="08:00", interval_hours=None, **kw):
        if kind == "custom":
            freq = CustomFrequency(interval_hours=interval_hours) if interval_hours else CustomFrequency()
        else:
            freq = FixedFrequency(kind=kind)
        kw.setdefault("start_date", START)
        return MedicationSchedule(frequency=freq, start_time=start_time, **kw)
    return _make
