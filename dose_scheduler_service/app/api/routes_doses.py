import hmac
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from app.core.config import MISS_ALERT_THRESHOLD, dose_log_write_key
from app.schemas.models import AdherenceSummary, DoseEvent, DoseMarkRequest
from app.services import dose_log_store
from app.utils.time_codec import parse_time_to_minutes, to_24h

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doses", tags=["doses"])

def require_write_key(x_internal_key: str = Header(...)) -> None:
    """Only trusted callers (the persistence collaborator) may append dose events."""
    key = dose_log_write_key()
    if key is None:
        raise HTTPException(status_code=500, detail="Dose log writes are disabled: INTERNAL_SERVICE_SECRET is not set.")
    if not hmac.compare_digest(x_internal_key.encode(), key.encode()):
        raise HTTPException(status_code=401, detail="Invalid X-Internal-Key for dose log writes.")

def _delay_minutes(action_time_iso: Optional[str], scheduled_24h: str) -> Optional[int]:
    """Minutes between the scheduled clock time and the action, on the action's own day."""
    if not action_time_iso:
        return None
    try:
        acted = datetime.fromisoformat(action_time_iso.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("unparseable action time %r", action_time_iso)
        return None
    acted_minutes = acted.hour * 60 + acted.minute
    return acted_minutes - parse_time_to_minutes(scheduled_24h)

@router.post("/mark", response_model=DoseEvent)
def mark(req: DoseMarkRequest, _=Depends(require_write_key)):
    scheduled = to_24h(req.time)
    ev = DoseEvent(
        medication_id=req.medication_id,
        date=req.date,
        scheduled_time=scheduled,
        status=req.status,
        action_time_iso=req.action_time_iso,
        delay_minutes=_delay_minutes(req.action_time_iso, scheduled),
    )
    dose_log_store.append_event(ev)

    if ev.status == "MISSED":
        missed = dose_log_store.missed_count(ev.medication_id)
        if missed >= MISS_ALERT_THRESHOLD:
            logger.warning(
                "medication %s has %d missed dose(s), threshold %d reached",
                ev.medication_id, missed, MISS_ALERT_THRESHOLD,
            )

    return ev

@router.get("/summary", response_model=AdherenceSummary)
def summary(medication_id: Optional[str] = None, days: int = 7):
    return dose_log_store.summarize_recent(days, medication_id)
