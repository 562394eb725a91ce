from __future__ import annotations
import uuid
from datetime import datetime, time
from enum import Enum

from sqlalchemy import ForeignKey, Index, String, Time, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db

class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

# Monday=0 .. Sunday=6, used for ordering listings
WEEKDAY_ORDER = {d.value: i for i, d in enumerate(Weekday)}


class ScheduleSlot(db.Model):
    """One recurring weekly teaching period."""
    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    day: Mapped[str] = mapped_column(String(16), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    class_id: Mapped[str] = mapped_column(ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    room: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("User")
    school_class = relationship("SchoolClass")

    __table_args__ = (
        Index("ix_schedules_teacher_day", "teacher_id", "day"),
        Index("ix_schedules_class_day", "class_id", "day"),
    )

    def __repr__(self):
        return f"<ScheduleSlot {self.day} {self.start_time}-{self.end_time}>"


class ScheduleLock(db.Model):
    """Row lock per (day, scope, ref_id); bumped inside the insert transaction."""
    __tablename__ = "schedule_locks"

    id: Mapped[int] = mapped_column(primary_key=True)
    day: Mapped[str] = mapped_column(String(16), nullable=False)
    scope: Mapped[str] = mapped_column(String(16), nullable=False)  # teacher | class
    ref_id: Mapped[str] = mapped_column(String(36), nullable=False)
    version: Mapped[int] = mapped_column(default=0, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("day", "scope", "ref_id", name="uq_schedule_locks_key"),
    )


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str | None] = mapped_column(String(36))
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    entity: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(36))
    payload: Mapped[dict | None] = mapped_column(db.JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
