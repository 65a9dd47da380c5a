# app/api/routes_schedule.py
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter

from app.schemas.models import (
    MedicationInstance,
    MedicationRecord,
    PlannerRequest, PlannerResponse,
    ProjectRequest, ProjectResponse,
    TodayRequest, TodayResponse,
)
from app.services import dose_log_store
from app.services.aggregator import aggregate, upcoming
from app.services.briefing import build_briefing, format_schedule_summary
from app.services.normalize import to_instance, to_schedule
from app.services.planner import build_planner
from app.services.projector import project

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["schedule"])

def _today(d: Optional[date]) -> date:
    return d or date.today()

def _instances(records: List[MedicationRecord], today: date) -> List[MedicationInstance]:
    out: List[MedicationInstance] = []
    for r in records:
        inst = to_instance(r, today, dose_log_store.taken_times(r.medication_id, today))
        if inst is not None:
            out.append(inst)
    return out

@router.post("/project", response_model=ProjectResponse)
def schedule_project(req: ProjectRequest):
    schedule = to_schedule(req.medication, _today(req.today))
    if schedule is None:
        return ProjectResponse(
            medication_id=req.medication.medication_id,
            target_date=req.target_date,
            schedule_summary="Not scheduled",
            doses=[],
        )

    doses = project(schedule, req.target_date, req.previous_day_last_time)

    return ProjectResponse(
        medication_id=req.medication.medication_id,
        target_date=req.target_date,
        schedule_summary=format_schedule_summary(schedule),
        doses=doses,
    )

@router.post("/today", response_model=TodayResponse)
def schedule_today(req: TodayRequest):
    today = _today(req.today)
    instances = _instances(req.medications, today)
    summary = aggregate(instances)

    logger.info(
        "today %s: %d/%d doses taken across %d medication(s)",
        today, summary.totals.taken_doses, summary.totals.total_doses, len(instances),
    )

    return TodayResponse(
        date=today,
        summary=summary,
        upcoming=upcoming(summary.pending, req.now) if req.now else summary.pending,
        briefing=build_briefing(summary, req.now),
    )

@router.post("/planner", response_model=PlannerResponse)
def schedule_planner(req: PlannerRequest):
    today = date.today()
    start = req.start_date or today
    days = build_planner(req.medications, start, req.days, today=today)
    return PlannerResponse(start_date=start, days=days)
