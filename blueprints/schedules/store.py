# blueprints/schedules/store.py
from __future__ import annotations
import uuid
from typing import Optional

from sqlalchemy import and_, case, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import (
    AuditLog, SchoolClass, ScheduleLock, ScheduleSlot, User, WEEKDAY_ORDER,
)


class SqlSlotStore:
    """Data access for schedule slots on top of one SQLAlchemy session.

    The conflict checker only talks to this interface (lock, candidates,
    insert, delete, audit, commit, rollback, listing), so tests can pass any
    object with the same methods.
    """

    def __init__(self, session: Session):
        self.session = session

    # ---------- locking ----------
    def lock(self, day: str, teacher_id: str, class_id: str) -> None:
        # фиксированный порядок ключей, чтобы два запроса не ждали друг друга по кругу
        keys = sorted([(day, "class", class_id), (day, "teacher", teacher_id)])
        for d, scope, ref_id in keys:
            self._bump_lock(d, scope, ref_id)

    def _bump_lock(self, day: str, scope: str, ref_id: str) -> None:
        stmt = (
            update(ScheduleLock)
            .where(and_(ScheduleLock.day == day,
                        ScheduleLock.scope == scope,
                        ScheduleLock.ref_id == ref_id))
            .values(version=ScheduleLock.version + 1)
            .execution_options(synchronize_session=False)
        )
        if self.session.execute(stmt).rowcount:
            return
        try:
            with self.session.begin_nested():
                self.session.add(ScheduleLock(day=day, scope=scope, ref_id=ref_id, version=1))
        except IntegrityError:
            # строку успел создать параллельный запрос: берём блокировку через UPDATE
            self.session.execute(stmt)

    # ---------- reads ----------
    def candidates(self, day: str, teacher_id: str, class_id: str,
                   for_update: bool = False) -> list[ScheduleSlot]:
        """Slots on `day` that share the teacher or the class.

        With `for_update` the read is a locking read (SELECT ... FOR UPDATE):
        it sees rows committed after the transaction's snapshot was taken,
        which a plain read under REPEATABLE READ does not.
        """
        stmt = select(ScheduleSlot).where(
            ScheduleSlot.day == day,
            or_(ScheduleSlot.teacher_id == teacher_id, ScheduleSlot.class_id == class_id),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return list(self.session.scalars(stmt))

    def list_slots(self, *, class_id: Optional[str] = None, teacher_id: Optional[str] = None,
             day: Optional[str] = None) -> list[tuple[ScheduleSlot, Optional[User], Optional[SchoolClass]]]:
        q = (select(ScheduleSlot, User, SchoolClass)
             .outerjoin(User, User.id == ScheduleSlot.teacher_id)
             .outerjoin(SchoolClass, SchoolClass.id == ScheduleSlot.class_id))
        if class_id:
            q = q.where(ScheduleSlot.class_id == class_id)
        if teacher_id:
            q = q.where(ScheduleSlot.teacher_id == teacher_id)
        if day:
            q = q.where(ScheduleSlot.day == day)
        q = q.order_by(case(WEEKDAY_ORDER, value=ScheduleSlot.day, else_=len(WEEKDAY_ORDER)),
                       ScheduleSlot.start_time)
        return [tuple(row) for row in self.session.execute(q).all()]

    # ---------- writes ----------
    def insert(self, slot) -> str:
        row = ScheduleSlot(
            id=str(uuid.uuid4()),
            day=slot.day.value,
            start_time=slot.start,
            end_time=slot.end,
            subject=slot.subject,
            teacher_id=slot.teacher_id,
            class_id=slot.class_id,
            room=slot.room,
        )
        self.session.add(row)
        self.session.flush()
        return row.id

    def delete(self, slot_id: str) -> bool:
        row = self.session.get(ScheduleSlot, slot_id)
        if row is None:
            return False
        self.session.delete(row)
        return True

    def audit(self, action: str, entity_id: str, payload: dict | None = None,
              user_id: Optional[str] = None) -> None:
        self.session.add(AuditLog(
            user_id=user_id, action=action, entity="schedule",
            entity_id=entity_id, payload=payload or {},
        ))

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
