# scripts/dev_db_init.py
"""Create tables and a small demo timetable.

Run: python -m scripts.dev_db_init
"""
import logging

from app import create_app
from extensions import db
from models import Role, SchoolClass, User
from blueprints.schedules import services as svc
from blueprints.schedules.errors import TimeOverlapError
from blueprints.schedules.store import SqlSlotStore

log = logging.getLogger(__name__)


def _user(email, first, last, role, password="pass"):
    u = User.query.filter_by(email=email).first()
    if not u:
        u = User(email=email, first_name=first, last_name=last, role=role)
        u.set_password(password)
        db.session.add(u)
    return u


def _class(name, level):
    c = SchoolClass.query.filter_by(name=name).first()
    if not c:
        c = SchoolClass(name=name, level=level, academic_year="2026-2027")
        db.session.add(c)
    return c


def seed_minimal():
    _user("admin@example.com", "Admin", "School", Role.ADMIN.value)
    t1 = _user("t.martin@example.com", "Claire", "Martin", Role.TEACHER.value)
    t2 = _user("t.bernard@example.com", "Luc", "Bernard", Role.TEACHER.value)
    c1 = _class("6A", "6e")
    c2 = _class("5B", "5e")
    db.session.commit()

    store = SqlSlotStore(db.session)
    demo = [
        {"day": "Monday", "startTime": "08:00", "endTime": "09:00", "subject": "Maths",
         "teacherId": t1.id, "classId": c1.id, "room": "101"},
        {"day": "Monday", "startTime": "09:00", "endTime": "10:00", "subject": "French",
         "teacherId": t2.id, "classId": c1.id, "room": "102"},
        {"day": "Monday", "startTime": "09:00", "endTime": "10:00", "subject": "Maths",
         "teacherId": t1.id, "classId": c2.id, "room": "101"},
        {"day": "Tuesday", "startTime": "10:00", "endTime": "11:30", "subject": "History",
         "teacherId": t2.id, "classId": c2.id},
    ]
    for slot in demo:
        try:
            svc.check_and_insert(slot, store)
        except TimeOverlapError:
            # уже засеяно в прошлый запуск
            log.info("slot %s %s-%s already present", slot["day"], slot["startTime"], slot["endTime"])


if __name__ == "__main__":
    app = create_app("dev")
    with app.app_context():
        db.create_all()
        seed_minimal()
        print("DB initialized and seeded ✅")
