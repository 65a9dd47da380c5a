from datetime import date
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.config import PLANNER_DEFAULT_DAYS, PLANNER_MAX_DAYS
from app.utils.time_codec import to_24h

FixedKind = Literal[
    "once_daily",
    "twice_daily",
    "three_times_daily",
    "four_times_daily",
    "every_other_day",
    "weekly",
    "as_needed",
]
NextDayMode = Literal["restart", "continue"]
DoseLabel = Literal["Daily", "Morning", "Midday", "Afternoon", "Evening", "Dose"]
Category = Literal["medicine", "vitamin", "supplement", "herbal", "other"]
DayStatus = Literal["NO_MEDICATIONS", "ALL_TAKEN", "PENDING"]
DoseStatus = Literal["TAKEN", "SNOOZED", "SKIPPED", "MISSED"]

CATEGORY_ORDER: List[str] = ["medicine", "vitamin", "supplement", "herbal", "other"]
DEFAULT_CATEGORY = "medicine"

DEFAULT_CUSTOM_INTERVAL_HOURS = 8
MAX_DOSES_PER_DAY = 4

# ---------------------------
# Engine types
# ---------------------------
class FixedFrequency(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FixedKind

class CustomFrequency(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    interval_hours: int = Field(default=DEFAULT_CUSTOM_INTERVAL_HOURS, ge=1)

Frequency = Annotated[Union[FixedFrequency, CustomFrequency], Field(discriminator="kind")]

class MedicationSchedule(BaseModel):
    """Immutable prescription definition. start_time is stored as 24h "HH:MM"."""
    model_config = ConfigDict(frozen=True)

    frequency: Frequency
    start_time: str = "00:00"
    start_date: date
    duration_days: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of days the prescription runs. Null means ongoing.",
    )
    next_day_mode: NextDayMode = "restart"

    @field_validator("start_time", mode="before")
    @classmethod
    def _canonical_start_time(cls, v):
        return to_24h(v)

class DoseOccurrence(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str  # "HH:MM" 24h
    label: DoseLabel
    ordinal: int = Field(..., ge=1)
    taken: bool = False

class MedicationInstance(BaseModel):
    medication_id: str
    name: str
    dosage: str = ""
    category: str = DEFAULT_CATEGORY
    schedule: Optional[MedicationSchedule] = None
    doses: List[DoseOccurrence] = Field(default_factory=list)

    # legacy single-dose records: used only when doses is empty
    time: Optional[str] = None
    taken: bool = False

class DoseTotals(BaseModel):
    total_doses: int = 0
    taken_doses: int = 0

class PendingDose(BaseModel):
    medication_id: str
    name: str
    dosage: str = ""
    category: str = DEFAULT_CATEGORY
    time: str
    label: DoseLabel
    ordinal: int

class DoseSummary(BaseModel):
    totals: DoseTotals
    pending: List[PendingDose] = Field(default_factory=list)
    next: Optional[PendingDose] = None
    status: DayStatus
    adherence_pct: Optional[float] = None

# ---------------------------
# Persistence collaborator shapes
# ---------------------------
class DoseRecord(BaseModel):
    time: str
    taken: bool = False

class MedicationRecord(BaseModel):
    medication_id: str
    name: str
    dosage: str = ""
    category: str = DEFAULT_CATEGORY
    frequency: Optional[str] = Field(
        default="once_daily",
        description="once_daily, twice_daily, ..., custom. Null marks a legacy single-dose record.",
    )
    custom_interval_hours: Optional[int] = None
    start_time: Optional[str] = None  # "8:00 AM" or "08:00"
    time: Optional[str] = None        # legacy display time
    start_date: Optional[date] = None
    duration_days: Optional[int] = None
    time_period: Optional[str] = None  # "7 days", "30", "ongoing"
    end_date: Optional[date] = None
    next_day_mode: str = "restart"
    is_active: bool = True
    taken: bool = False
    doses: List[DoseRecord] = Field(default_factory=list)

# ---------------------------
# API requests / responses
# ---------------------------
class ProjectRequest(BaseModel):
    medication: MedicationRecord
    target_date: date
    previous_day_last_time: Optional[str] = None
    today: Optional[date] = None

class ProjectResponse(BaseModel):
    medication_id: str
    target_date: date
    schedule_summary: str
    doses: List[DoseOccurrence]

class TodayRequest(BaseModel):
    medications: List[MedicationRecord] = Field(default_factory=list)
    today: Optional[date] = None
    now: Optional[str] = None  # "HH:MM" or "H:MM AM/PM"

class TodayResponse(BaseModel):
    date: date
    summary: DoseSummary
    upcoming: List[PendingDose]
    briefing: List[str]

class PlannerRequest(BaseModel):
    medications: List[MedicationRecord] = Field(default_factory=list)
    start_date: Optional[date] = None
    days: int = Field(default=PLANNER_DEFAULT_DAYS, ge=1, le=PLANNER_MAX_DAYS)

class PlannerDose(BaseModel):
    medication_id: str
    name: str
    dosage: str = ""
    category: str
    time: str          # "HH:MM" 24h
    display_time: str  # "H:MM AM/PM"
    label: DoseLabel

class PlannerDay(BaseModel):
    date: date
    dose_count: int
    categories: Dict[str, List[PlannerDose]] = Field(default_factory=dict)

class PlannerResponse(BaseModel):
    start_date: date
    days: List[PlannerDay]

class DoseMarkRequest(BaseModel):
    medication_id: str
    date: date
    time: str  # scheduled time, 12h or 24h
    status: DoseStatus
    action_time_iso: Optional[str] = None  # ISO8601, used for delay

class DoseEvent(BaseModel):
    medication_id: str
    date: date
    scheduled_time: str  # "HH:MM" 24h
    status: DoseStatus
    action_time_iso: Optional[str] = None
    delay_minutes: Optional[int] = None

class AdherenceSummary(BaseModel):
    medication_id: Optional[str] = None
    days: int
    total_events: int
    taken: int
    missed: int
    skipped: int
    snoozed: int
    adherence_rate: float
    avg_delay_minutes: Optional[float] = None
