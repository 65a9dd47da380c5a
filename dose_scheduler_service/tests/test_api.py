from datetime import date, timedelta

from conftest import START

HEADERS = {"X-Internal-Key": "test-secret"}

def _med(**kw):
    base = {
        "medication_id": "m1",
        "name": "Metformin",
        "dosage": "500mg",
        "frequency": "twice_daily",
        "start_time": "8:00 AM",
        "start_date": START.isoformat(),
    }
    base.update(kw)
    return base

def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/").json()["ok"] is True

def test_project_endpoint(client):
    r = client.post("/schedule/project", json={
        "medication": _med(),
        "target_date": (START + timedelta(days=1)).isoformat(),
    })
    assert r.status_code == 200
    body = r.json()
    assert [d["time"] for d in body["doses"]] == ["08:00", "20:00"]
    assert body["schedule_summary"] == "2x daily: 8:00 AM, 8:00 PM"

def test_project_before_start_is_empty(client):
    r = client.post("/schedule/project", json={
        "medication": _med(),
        "target_date": (START - timedelta(days=1)).isoformat(),
    })
    assert r.status_code == 200
    assert r.json()["doses"] == []

def test_project_zero_duration_is_not_scheduled(client):
    r = client.post("/schedule/project", json={
        "medication": _med(duration_days=0),
        "target_date": START.isoformat(),
    })
    assert r.status_code == 200
    assert r.json()["doses"] == []
    assert r.json()["schedule_summary"] == "Not scheduled"

def test_project_continue_fast_path(client):
    r = client.post("/schedule/project", json={
        "medication": _med(frequency="custom", custom_interval_hours=5, next_day_mode="continue",
                           start_time="08:00"),
        "target_date": (START + timedelta(days=1)).isoformat(),
        "previous_day_last_time": "23:00",
    })
    assert [d["time"] for d in r.json()["doses"]] == ["04:00", "09:00", "14:00", "19:00"]

def test_today_summary(client):
    meds = [
        _med(doses=[{"time": "08:00", "taken": True}]),
        _med(medication_id="m2", name="Losartan", frequency="once_daily", start_time="8:00 PM"),
    ]
    r = client.post("/schedule/today", json={"medications": meds, "today": START.isoformat(), "now": "18:00"})
    assert r.status_code == 200
    body = r.json()
    summary = body["summary"]
    assert summary["totals"] == {"total_doses": 3, "taken_doses": 1}
    assert summary["status"] == "PENDING"
    assert [(p["medication_id"], p["time"]) for p in summary["pending"]] == [("m2", "20:00"), ("m1", "20:00")]
    assert summary["next"]["name"] == "Losartan"
    assert body["briefing"][0] == "2 medicines left today."

def test_today_without_medications(client):
    body = client.post("/schedule/today", json={"medications": []}).json()
    assert body["summary"]["status"] == "NO_MEDICATIONS"
    assert body["summary"]["next"] is None

def test_mark_requires_internal_key(client):
    payload = {"medication_id": "m1", "date": START.isoformat(), "time": "08:00", "status": "TAKEN"}
    assert client.post("/doses/mark", json=payload).status_code == 422
    assert client.post("/doses/mark", json=payload, headers={"X-Internal-Key": "nope"}).status_code == 401

def test_mark_secret_not_configured(client, monkeypatch):
    monkeypatch.delenv("INTERNAL_SERVICE_SECRET")
    payload = {"medication_id": "m1", "date": START.isoformat(), "time": "08:00", "status": "TAKEN"}
    assert client.post("/doses/mark", json=payload, headers=HEADERS).status_code == 500

def test_mark_rejects_wrong_key(client):
    payload = {"medication_id": "m1", "date": START.isoformat(), "time": "08:00", "status": "TAKEN"}
    r = client.post("/doses/mark", json=payload, headers={"X-Internal-Key": "nope"})
    assert r.status_code == 401
    assert client.get("/doses/summary").json()["total_events"] == 0

def test_marked_dose_shows_as_taken(client):
    r = client.post("/doses/mark", headers=HEADERS, json={
        "medication_id": "m1",
        "date": START.isoformat(),
        "time": "8:00 PM",
        "status": "TAKEN",
        "action_time_iso": f"{START.isoformat()}T20:15:00+00:00",
    })
    assert r.status_code == 200
    assert r.json()["scheduled_time"] == "20:00"
    assert r.json()["delay_minutes"] == 15

    body = client.post("/schedule/today", json={
        "medications": [_med(doses=[{"time": "08:00", "taken": True}])],
        "today": START.isoformat(),
    }).json()
    assert body["summary"]["status"] == "ALL_TAKEN"
    assert body["briefing"] == ["All 2 doses taken today. Great job!"]

def test_adherence_summary(client):
    today = date.today().isoformat()
    for status in ("TAKEN", "MISSED", "MISSED", "SKIPPED"):
        client.post("/doses/mark", headers=HEADERS, json={
            "medication_id": "m1", "date": today, "time": "08:00", "status": status,
        })
    body = client.get("/doses/summary", params={"medication_id": "m1", "days": 7}).json()
    assert body["total_events"] == 4
    assert body["taken"] == 1
    assert body["missed"] == 2
    assert body["adherence_rate"] == 0.25
    assert body["avg_delay_minutes"] is None

def test_planner_endpoint(client):
    r = client.post("/schedule/planner", json={
        "medications": [_med(), _med(medication_id="v", name="Vitamin D", category="vitamin",
                                     frequency="weekly", start_time="09:00")],
        "start_date": START.isoformat(),
        "days": 7,
    })
    assert r.status_code == 200
    days = r.json()["days"]
    assert len(days) == 7
    assert days[0]["dose_count"] == 3
    assert list(days[0]["categories"]) == ["medicine", "vitamin"]
    assert days[1]["dose_count"] == 2

def test_planner_horizon_is_capped(client):
    r = client.post("/schedule/planner", json={"medications": [], "days": 29})
    assert r.status_code == 422
