from typing import Iterable, List, Optional, Tuple
from app.schemas.models import (
    DoseOccurrence,
    DoseSummary,
    DoseTotals,
    MedicationInstance,
    PendingDose,
)
from app.utils.time_codec import parse_time_to_minutes, to_24h

def day_occurrences(inst: MedicationInstance) -> List[DoseOccurrence]:
    """Today's occurrences, or the single implicit one of a legacy record."""
    if inst.doses:
        return list(inst.doses)
    t = inst.time or (inst.schedule.start_time if inst.schedule else None)
    return [DoseOccurrence(time=to_24h(t), label="Daily", ordinal=1, taken=inst.taken)]

def _pending_key(item: Tuple[int, PendingDose]):
    idx, p = item
    # time of day, then name, then input order, then position within the day
    return (parse_time_to_minutes(p.time), p.name.casefold(), idx, p.ordinal)

def aggregate(instances: Iterable[MedicationInstance]) -> DoseSummary:
    total = 0
    taken = 0
    pending: List[Tuple[int, PendingDose]] = []

    for idx, inst in enumerate(instances):
        for occ in day_occurrences(inst):
            total += 1
            if occ.taken:
                taken += 1
                continue
            pending.append((idx, PendingDose(
                medication_id=inst.medication_id,
                name=inst.name,
                dosage=inst.dosage,
                category=inst.category,
                time=to_24h(occ.time),
                label=occ.label,
                ordinal=occ.ordinal,
            )))

    ordered = [p for _, p in sorted(pending, key=_pending_key)]

    if total == 0:
        status = "NO_MEDICATIONS"
    elif not ordered:
        status = "ALL_TAKEN"
    else:
        status = "PENDING"

    return DoseSummary(
        totals=DoseTotals(total_doses=total, taken_doses=taken),
        pending=ordered,
        next=ordered[0] if ordered else None,
        status=status,
        adherence_pct=round(taken / total * 100, 1) if total else None,
    )

def upcoming(pending: List[PendingDose], now: str) -> List[PendingDose]:
    """Pending doses strictly later than the clock time `now`."""
    now_min = parse_time_to_minutes(now)
    return [p for p in pending if parse_time_to_minutes(p.time) > now_min]

def overdue(pending: List[PendingDose], now: str) -> List[PendingDose]:
    now_min = parse_time_to_minutes(now)
    return [p for p in pending if parse_time_to_minutes(p.time) <= now_min]

def next_after(pending: List[PendingDose], now: str) -> Optional[PendingDose]:
    later = upcoming(pending, now)
    return later[0] if later else None
