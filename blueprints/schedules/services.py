# blueprints/schedules/services.py
from __future__ import annotations
import logging
from datetime import time
from typing import Any, Optional

from pydantic import ValidationError

from models import Weekday
from .errors import CheckError, InvalidSlotError, SlotNotFoundError, TimeOverlapError
from .schemas import ScheduleSlotIn, ScheduleSlotOut, format_hhmm

log = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Schedule conflict detected"


def overlaps(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Half-open [start, end) intersection; touching endpoints do not overlap."""
    return a_start < b_end and a_end > b_start


def _field_errors(ve: ValidationError) -> list[CheckError]:
    out = []
    for e in ve.errors():
        loc = ".".join(str(x) for x in e.get("loc", ())) or None
        out.append(CheckError(code="INVALID_FIELD", details={"field": loc, "msg": e.get("msg")}))
    return out


def validate_slot(payload: dict[str, Any]) -> ScheduleSlotIn:
    try:
        return ScheduleSlotIn.model_validate(payload)
    except ValidationError as ve:
        raise InvalidSlotError("Invalid schedule slot", _field_errors(ve)) from ve


def _ensure_slot(payload) -> ScheduleSlotIn:
    if isinstance(payload, ScheduleSlotIn):
        return payload
    return validate_slot(payload or {})


def find_conflicts(slot: ScheduleSlotIn, store, for_update: bool = False) -> list[CheckError]:
    """Existing slots of the same teacher or class on the same day that overlap `slot`."""
    errors: list[CheckError] = []
    for c in store.candidates(slot.day.value, slot.teacher_id, slot.class_id, for_update=for_update):
        if not overlaps(slot.start, slot.end, c.start_time, c.end_time):
            continue
        details = {
            "schedule_id": c.id,
            "day": c.day,
            "start_time": format_hhmm(c.start_time),
            "end_time": format_hhmm(c.end_time),
        }
        if c.teacher_id == slot.teacher_id:
            errors.append(CheckError(code="TEACHER_BUSY", details={**details, "teacher_id": c.teacher_id}))
        if c.class_id == slot.class_id:
            errors.append(CheckError(code="CLASS_BUSY", details={**details, "class_id": c.class_id}))
    return errors


def check_slot(payload, store) -> tuple[bool, list[CheckError]]:
    """Dry run: validate and look for conflicts, nothing is written."""
    slot = _ensure_slot(payload)
    errors = find_conflicts(slot, store)
    return len(errors) == 0, errors


def check_and_insert(payload, store, user_id: Optional[str] = None) -> str:
    """Insert the slot unless it double-books its teacher or its class.

    Validation happens before any query. The lock, the conflict read and the
    insert share one transaction, and the conflict read is a locking read so a
    request that waited on the lock sees the rows committed meanwhile. Any
    failure rolls the transaction back and propagates.
    """
    slot = _ensure_slot(payload)
    try:
        store.lock(slot.day.value, slot.teacher_id, slot.class_id)
        conflicts = find_conflicts(slot, store, for_update=True)
        if conflicts:
            log.info("schedule conflict day=%s teacher=%s class=%s %s-%s with %s",
                     slot.day.value, slot.teacher_id, slot.class_id,
                     slot.start_time, slot.end_time,
                     sorted({e.details["schedule_id"] for e in conflicts}))
            raise TimeOverlapError(CONFLICT_MESSAGE, conflicts)
        slot_id = store.insert(slot)
        store.audit("CREATE", slot_id, slot.model_dump(mode="json"), user_id=user_id)
        store.commit()
    except Exception:
        store.rollback()
        raise
    log.info("schedule slot %s created day=%s %s-%s", slot_id, slot.day.value,
             slot.start_time, slot.end_time)
    return slot_id


def delete_slot(slot_id: str, store, user_id: Optional[str] = None) -> None:
    try:
        if not store.delete(slot_id):
            raise SlotNotFoundError("Schedule slot not found",
                                    [CheckError(code="NOT_FOUND", details={"schedule_id": slot_id})])
        store.audit("DELETE", slot_id, {"id": slot_id}, user_id=user_id)
        store.commit()
    except Exception:
        store.rollback()
        raise
    log.info("schedule slot %s deleted", slot_id)


def _parse_day_filter(day: Optional[str]) -> Optional[str]:
    if not day:
        return None
    try:
        return Weekday(day).value
    except ValueError:
        raise InvalidSlotError("Invalid day filter",
                               [CheckError(code="INVALID_FIELD", details={"field": "day", "value": day})])


def _serialize(slot, teacher, school_class) -> dict:
    return ScheduleSlotOut(
        id=slot.id,
        day=slot.day,
        start_time=format_hhmm(slot.start_time),
        end_time=format_hhmm(slot.end_time),
        subject=slot.subject,
        teacher_id=slot.teacher_id,
        class_id=slot.class_id,
        room=slot.room,
        teacher_name=(teacher.full_name if teacher else None),
        class_name=(school_class.name if school_class else None),
    ).to_wire()


def list_slots(store, class_id: Optional[str] = None, teacher_id: Optional[str] = None,
               day: Optional[str] = None) -> list[dict]:
    rows = store.list_slots(class_id=class_id, teacher_id=teacher_id, day=_parse_day_filter(day))
    return [_serialize(*row) for row in rows]


def teacher_week(teacher_id: str, store) -> dict[str, list[dict]]:
    """Teacher's slots grouped by day, Monday first; days without slots are omitted."""
    week: dict[str, list[dict]] = {}
    for item in list_slots(store, teacher_id=teacher_id):
        week.setdefault(item["day"], []).append({
            "id": item["id"],
            "startTime": item["startTime"],
            "endTime": item["endTime"],
            "subject": item["subject"],
            "className": item["className"],
            "classId": item["classId"],
            "room": item["room"],
        })
    return week
