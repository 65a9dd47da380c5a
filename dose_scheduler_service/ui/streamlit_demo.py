import os
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import streamlit as st
from dotenv import load_dotenv

load_dotenv()

st.set_page_config(page_title="Dose Scheduler Demo", layout="wide")

# ---------------------------
# Config
# ---------------------------
DEFAULT_API_BASE = "http://127.0.0.1:8000"
API_BASE = st.sidebar.text_input("API Base URL", value=DEFAULT_API_BASE)
INTERNAL_KEY = st.sidebar.text_input(
    "X-Internal-Key", value=os.getenv("INTERNAL_SERVICE_SECRET", ""), type="password"
)

# ---------------------------
# Helpers (API)
# ---------------------------
def api_post(path: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    url = f"{API_BASE}{path}"
    r = requests.post(url, json=payload, headers=headers or {}, timeout=20)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

def api_get(path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    url = f"{API_BASE}{path}"
    r = requests.get(url, params=params or {}, timeout=20)
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code} {r.text}")
    return r.json()

def meds_payload(df: pd.DataFrame) -> List[Dict[str, Any]]:
    meds = []
    for row in df.fillna("").to_dict(orient="records"):
        if not str(row.get("medication_id", "")).strip():
            continue
        interval = row.get("custom_interval_hours")
        duration = row.get("duration_days")
        meds.append({
            "medication_id": str(row["medication_id"]),
            "name": str(row.get("name", "")),
            "dosage": str(row.get("dosage", "")),
            "category": str(row.get("category") or "medicine"),
            "frequency": str(row.get("frequency") or "once_daily"),
            "custom_interval_hours": int(interval) if interval not in ("", None) else None,
            "start_time": str(row.get("start_time") or ""),
            "start_date": str(row.get("start_date") or "") or None,
            "duration_days": int(duration) if duration not in ("", None) else None,
            "next_day_mode": str(row.get("next_day_mode") or "restart"),
            "is_active": bool(row.get("is_active", True)),
        })
    return meds

# ---------------------------
# Medications table
# ---------------------------
st.title("💊 Dose Scheduler Demo (Streamlit)")

if "meds_df" not in st.session_state:
    today_iso = date.today().isoformat()
    st.session_state["meds_df"] = pd.DataFrame(
        [
            {"medication_id": "m1", "name": "Metformin", "dosage": "500mg", "category": "medicine",
             "frequency": "twice_daily", "custom_interval_hours": None, "start_time": "8:00 AM",
             "start_date": today_iso, "duration_days": 30, "next_day_mode": "restart", "is_active": True},
            {"medication_id": "m2", "name": "Losartan", "dosage": "50mg", "category": "medicine",
             "frequency": "once_daily", "custom_interval_hours": None, "start_time": "8:00 PM",
             "start_date": today_iso, "duration_days": None, "next_day_mode": "restart", "is_active": True},
            {"medication_id": "m3", "name": "Vitamin D", "dosage": "1000 IU", "category": "vitamin",
             "frequency": "weekly", "custom_interval_hours": None, "start_time": "09:00",
             "start_date": today_iso, "duration_days": None, "next_day_mode": "restart", "is_active": True},
        ]
    )

st.subheader("1) Medications (editable)")
meds_df = st.data_editor(
    st.session_state["meds_df"],
    num_rows="dynamic",
    use_container_width=True,
    key="meds_editor",
)

tab_today, tab_planner, tab_log = st.tabs(["Today", "Planner", "Dose log"])

# ---------------------------
# Today
# ---------------------------
with tab_today:
    now = st.text_input("Current time", value=datetime.now().strftime("%H:%M"))
    if st.button("📋 Today's status (/schedule/today)"):
        try:
            resp = api_post("/schedule/today", {"medications": meds_payload(meds_df), "now": now})
            summary = resp["summary"]
            totals = summary["totals"]

            if summary["status"] == "NO_MEDICATIONS":
                st.info("No medications scheduled today.")
            elif summary["status"] == "ALL_TAKEN":
                st.balloons()
                st.success("All doses taken today 🎉")
            else:
                st.progress(totals["taken_doses"] / max(1, totals["total_doses"]))

            for line in resp["briefing"]:
                st.write(f"- {line}")

            if summary["pending"]:
                st.dataframe(pd.DataFrame(summary["pending"]), use_container_width=True)
        except Exception as e:
            st.error(str(e))

# ---------------------------
# Planner
# ---------------------------
with tab_planner:
    start = st.date_input("Start date", value=date.today())
    days = st.slider("Days", min_value=1, max_value=28, value=7)
    if st.button("🗓️ Upcoming schedule (/schedule/planner)"):
        try:
            resp = api_post("/schedule/planner", {
                "medications": meds_payload(meds_df),
                "start_date": start.isoformat(),
                "days": days,
            })
            for day in resp["days"]:
                st.write(f"### {day['date']}: {day['dose_count']} dose(s)")
                if not day["dose_count"]:
                    st.caption("No medications scheduled for this day")
                for category, doses in day["categories"].items():
                    st.write(f"**{category.capitalize()}**")
                    st.dataframe(
                        pd.DataFrame(doses)[["display_time", "name", "dosage", "label"]],
                        use_container_width=True,
                    )
        except Exception as e:
            st.error(str(e))

# ---------------------------
# Dose log
# ---------------------------
with tab_log:
    med_ids = [m["medication_id"] for m in meds_payload(meds_df)]
    medication_id = st.selectbox("Medication", med_ids) if med_ids else st.text_input("medication_id")
    dose_time = st.text_input("Scheduled time", value="08:00")
    status = st.selectbox("status", ["TAKEN", "SNOOZED", "SKIPPED", "MISSED"])
    action_time_iso = st.text_input(
        "action_time_iso",
        value=datetime.now().astimezone().isoformat(timespec="seconds"),
    )

    colx, coly = st.columns(2)
    with colx:
        if st.button("📝 Log dose (/doses/mark)"):
            payload = {
                "medication_id": medication_id,
                "date": date.today().isoformat(),
                "time": dose_time,
                "status": status,
                "action_time_iso": action_time_iso,
            }
            try:
                resp = api_post("/doses/mark", payload, headers={"X-Internal-Key": INTERNAL_KEY})
                st.success("Logged.")
                st.json(resp)
            except Exception as e:
                st.error(str(e))

    with coly:
        if st.button("📊 Summary (/doses/summary)"):
            try:
                st.json(api_get("/doses/summary", {"medication_id": medication_id, "days": 7}))
            except Exception as e:
                st.error(str(e))
