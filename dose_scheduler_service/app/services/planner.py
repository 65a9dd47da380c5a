from datetime import date, timedelta
from typing import Dict, List, Optional

from app.schemas.models import CATEGORY_ORDER, MedicationRecord, PlannerDay, PlannerDose
from app.services.normalize import active_schedules, record_category
from app.services.projector import project_range
from app.utils.time_codec import parse_time_to_minutes, to_12h

def _category_rank(category: str) -> int:
    return CATEGORY_ORDER.index(category) if category in CATEGORY_ORDER else len(CATEGORY_ORDER)

def build_planner(
    records: List[MedicationRecord],
    start_date: date,
    days: int,
    today: Optional[date] = None,
) -> List[PlannerDay]:
    """Future schedule view: every active medication's doses per date, grouped by category."""
    per_day: Dict[date, List[PlannerDose]] = {
        start_date + timedelta(days=i): [] for i in range(days)
    }

    # project_range carries the continue-mode anchor across the whole window
    for record, schedule in active_schedules(records, today or start_date):
        category = record_category(record)
        for day, doses in project_range(schedule, start_date, days):
            for d in doses:
                per_day[day].append(PlannerDose(
                    medication_id=record.medication_id,
                    name=record.name,
                    dosage=record.dosage,
                    category=category,
                    time=d.time,
                    display_time=to_12h(d.time),
                    label=d.label,
                ))

    out: List[PlannerDay] = []
    for day, doses in per_day.items():
        doses.sort(key=lambda d: (parse_time_to_minutes(d.time), d.name.casefold()))

        grouped: Dict[str, List[PlannerDose]] = {}
        for cat in sorted({d.category for d in doses}, key=lambda c: (_category_rank(c), c)):
            grouped[cat] = [d for d in doses if d.category == cat]

        out.append(PlannerDay(date=day, dose_count=len(doses), categories=grouped))

    return out
