# blueprints/schedules/errors.py
from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class CheckError:
    code: str
    details: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"code": self.code, "details": self.details}


class ScheduleError(Exception):
    """Base for errors the schedule service reports to the caller."""
    code = "SCHEDULE_ERROR"
    status = 400

    def __init__(self, message: str, errors: list[CheckError] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    def to_payload(self) -> dict:
        return {
            "ok": False,
            "error": self.message,
            "code": self.code,
            "errors": [e.as_dict() for e in self.errors],
        }


class InvalidSlotError(ScheduleError):
    code = "INVALID_FIELD"
    status = 400


class TimeOverlapError(ScheduleError):
    code = "TIME_OVERLAP"
    status = 409

    @property
    def conflicting_ids(self) -> list[str]:
        return [e.details.get("schedule_id") for e in self.errors]


class SlotNotFoundError(ScheduleError):
    code = "NOT_FOUND"
    status = 404
