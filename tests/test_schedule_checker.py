from __future__ import annotations
from datetime import time
from types import SimpleNamespace
import pytest

from blueprints.schedules import services as svc
from blueprints.schedules.errors import InvalidSlotError, SlotNotFoundError, TimeOverlapError


class MemoryStore:
    """Slot store double: writes stay pending until commit()."""

    def __init__(self):
        self.rows: dict[str, SimpleNamespace] = {}
        self._pending: dict[str, SimpleNamespace] = {}
        self._pending_deletes: set[str] = set()
        self.calls: list[str] = []
        self.locked_reads: list[bool] = []
        self.audits: list[tuple] = []
        self.commits = 0
        self.rollbacks = 0
        self._seq = 0

    def lock(self, day, teacher_id, class_id):
        self.calls.append("lock")

    def candidates(self, day, teacher_id, class_id, for_update=False):
        self.calls.append("candidates")
        self.locked_reads.append(for_update)
        return [r for r in self.rows.values()
                if r.day == day and (r.teacher_id == teacher_id or r.class_id == class_id)]

    def insert(self, slot):
        self.calls.append("insert")
        self._seq += 1
        sid = f"slot-{self._seq}"
        self._pending[sid] = SimpleNamespace(
            id=sid, day=slot.day.value, start_time=slot.start, end_time=slot.end,
            teacher_id=slot.teacher_id, class_id=slot.class_id,
        )
        return sid

    def delete(self, slot_id):
        if slot_id not in self.rows:
            return False
        self._pending_deletes.add(slot_id)
        return True

    def audit(self, action, entity_id, payload=None, user_id=None):
        self.audits.append((action, entity_id, user_id))

    def commit(self):
        self.commits += 1
        self.rows.update(self._pending)
        for sid in self._pending_deletes:
            self.rows.pop(sid, None)
        self._pending.clear()
        self._pending_deletes.clear()

    def rollback(self):
        self.rollbacks += 1
        self._pending.clear()
        self._pending_deletes.clear()


def _slot(teacher, klass, day="Monday", start="09:00", end="10:00", **kw):
    body = {"day": day, "startTime": start, "endTime": end, "subject": "Maths",
            "teacherId": teacher, "classId": klass}
    body.update(kw)
    return body


@pytest.fixture()
def store():
    return MemoryStore()


# ---------- overlap predicate ----------
@pytest.mark.parametrize("a,b,expected", [
    ((time(9), time(10)), (time(9, 30), time(10, 30)), True),
    ((time(9), time(10)), (time(10), time(11)), False),     # общий конец/начало
    ((time(9), time(10)), (time(9, 15), time(9, 45)), True),  # вложенный
    ((time(9), time(10)), (time(8), time(12)), True),         # охватывающий
    ((time(9), time(10)), (time(11), time(12)), False),
    ((time(9), time(10)), (time(9), time(10)), True),
])
def test_overlaps_is_symmetric(a, b, expected):
    assert svc.overlaps(*a, *b) is expected
    assert svc.overlaps(*b, *a) is expected


# ---------- walkthrough ----------
def test_monday_walkthrough(store):
    # 1) T1/C1 Monday 09:00-10:00
    first = svc.check_and_insert(_slot("T1", "C1"), store)
    assert first in store.rows

    # 2) T1 already teaching 09:00-10:00
    with pytest.raises(TimeOverlapError) as ei:
        svc.check_and_insert(_slot("T1", "C2", start="09:30", end="10:30"), store)
    assert ei.value.code == "TIME_OVERLAP"
    assert [e.code for e in ei.value.errors] == ["TEACHER_BUSY"]
    assert ei.value.conflicting_ids == [first]

    # 3) C1 ends at 10:00, back-to-back is fine
    third = svc.check_and_insert(_slot("T2", "C1", start="10:00", end="11:00"), store)
    assert third in store.rows

    # 4) another day, same teacher and hours
    svc.check_and_insert(_slot("T1", "C3", day="Tuesday"), store)

    # 5) inside C1's 09:00-10:00
    with pytest.raises(TimeOverlapError) as ei:
        svc.check_and_insert(_slot("T3", "C1", start="09:15", end="09:45"), store)
    assert [e.code for e in ei.value.errors] == ["CLASS_BUSY"]

    # 6) drop the blocking slot and retry step 2
    svc.delete_slot(first, store)
    assert first not in store.rows
    retried = svc.check_and_insert(_slot("T1", "C2", start="09:30", end="10:30"), store)
    assert retried in store.rows
    assert len(store.rows) == 3


def test_conflict_on_both_teacher_and_class(store):
    sid = svc.check_and_insert(_slot("T1", "C1"), store)
    with pytest.raises(TimeOverlapError) as ei:
        svc.check_and_insert(_slot("T1", "C1", start="09:59", end="10:30"), store)
    codes = sorted(e.code for e in ei.value.errors)
    assert codes == ["CLASS_BUSY", "TEACHER_BUSY"]
    assert set(ei.value.conflicting_ids) == {sid}


def test_rejection_is_repeatable_and_writes_nothing(store):
    svc.check_and_insert(_slot("T1", "C1"), store)
    commits = store.commits
    for _ in range(3):
        with pytest.raises(TimeOverlapError):
            svc.check_and_insert(_slot("T1", "C9", start="08:30", end="09:30"), store)
    assert len(store.rows) == 1
    assert store.commits == commits
    assert store.rollbacks == 3
    assert [a[0] for a in store.audits] == ["CREATE"]


def test_success_writes_audit_with_user(store):
    sid = svc.check_and_insert(_slot("T1", "C1", room="101"), store, user_id="admin-1")
    assert store.audits == [("CREATE", sid, "admin-1")]
    assert store.calls == ["lock", "candidates", "insert"]
    # внутри вставки кандидаты читаются с блокировкой
    assert store.locked_reads == [True]


# ---------- validation ----------
@pytest.mark.parametrize("override", [
    {"day": "Funday"},
    {"day": "monday"},
    {"startTime": "24:00"},
    {"startTime": "9h00"},
    {"endTime": "10:60"},
    {"subject": ""},
    {"teacherId": ""},
    {"classId": None},
    {"startTime": "10:00", "endTime": "10:00"},  # нулевая длительность
    {"startTime": "11:00", "endTime": "10:00"},
])
def test_invalid_input_rejected_before_any_query(store, override):
    with pytest.raises(InvalidSlotError) as ei:
        svc.check_and_insert(_slot("T1", "C1", **override), store)
    assert ei.value.code == "INVALID_FIELD"
    assert ei.value.errors
    assert store.calls == []


def test_missing_fields_are_reported_by_name(store):
    with pytest.raises(InvalidSlotError) as ei:
        svc.check_and_insert({"day": "Monday"}, store)
    fields = {e.details["field"] for e in ei.value.errors}
    assert {"startTime", "endTime", "subject", "teacherId", "classId"} <= fields


def test_single_digit_hour_and_snake_case_accepted(store):
    sid = svc.check_and_insert({
        "day": "Friday", "start_time": "8:05", "end_time": "9:10", "subject": "Art",
        "teacher_id": "T1", "class_id": "C1",
    }, store)
    row = store.rows[sid]
    assert (row.start_time, row.end_time) == (time(8, 5), time(9, 10))


# ---------- failures ----------
def test_store_failure_rolls_back_and_propagates(store):
    def boom(*a, **kw):
        raise RuntimeError("db down")
    store.candidates = boom
    with pytest.raises(RuntimeError):
        svc.check_and_insert(_slot("T1", "C1"), store)
    assert store.rollbacks == 1
    assert store.rows == {}


def test_delete_unknown_slot(store):
    with pytest.raises(SlotNotFoundError):
        svc.delete_slot("nope", store)
    assert store.rollbacks == 1


def test_dry_run_check(store):
    svc.check_and_insert(_slot("T1", "C1"), store)
    ok, errors = svc.check_slot(_slot("T2", "C1", start="09:30", end="10:30"), store)
    assert ok is False and errors[0].code == "CLASS_BUSY"
    ok, errors = svc.check_slot(_slot("T2", "C2", start="09:30", end="10:30"), store)
    assert ok is True and errors == []
    assert store.calls[-2:] == ["candidates", "candidates"]
    assert store.locked_reads[-2:] == [False, False]


def test_sql_store_conflict_read_locks_rows():
    from sqlalchemy.dialects import mysql
    from blueprints.schedules.store import SqlSlotStore

    class CapturingSession:
        def __init__(self):
            self.statements = []

        def scalars(self, stmt):
            self.statements.append(stmt)
            return []

    session = CapturingSession()
    store = SqlSlotStore(session)
    store.candidates("Monday", "T1", "C1")
    store.candidates("Monday", "T1", "C1", for_update=True)
    plain, locking = (str(s.compile(dialect=mysql.dialect())) for s in session.statements)
    assert "FOR UPDATE" not in plain
    assert locking.rstrip().endswith("FOR UPDATE")
