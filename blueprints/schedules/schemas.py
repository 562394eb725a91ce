from __future__ import annotations
from datetime import time
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models import Weekday

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


def parse_hhmm(value: str) -> time:
    h, m = value.split(":")
    return time(int(h), int(m))


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


class ScheduleSlotIn(BaseModel):
    """Incoming slot; accepts camelCase (wire) and snake_case names."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    day: Weekday
    start_time: str = Field(alias="startTime", pattern=TIME_PATTERN)
    end_time: str = Field(alias="endTime", pattern=TIME_PATTERN)
    subject: str = Field(min_length=1, max_length=255)
    teacher_id: str = Field(alias="teacherId", min_length=1, max_length=36)
    class_id: str = Field(alias="classId", min_length=1, max_length=36)
    room: Optional[str] = Field(None, max_length=50)

    @field_validator("room")
    @classmethod
    def blank_room_is_none(cls, v):
        return v or None

    @model_validator(mode="after")
    def check_range(self):
        if parse_hhmm(self.end_time) <= parse_hhmm(self.start_time):
            raise ValueError("end_time must be > start_time")
        return self

    @property
    def start(self) -> time:
        return parse_hhmm(self.start_time)

    @property
    def end(self) -> time:
        return parse_hhmm(self.end_time)


class ScheduleSlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    day: str
    start_time: str
    end_time: str
    subject: str
    teacher_id: str
    class_id: str
    room: Optional[str] = None
    teacher_name: Optional[str] = None
    class_name: Optional[str] = None

    def to_wire(self) -> dict:
        return {
            "id": self.id,
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "subject": self.subject,
            "teacherId": self.teacher_id,
            "classId": self.class_id,
            "room": self.room,
            "teacherName": self.teacher_name,
            "className": self.class_name,
        }
