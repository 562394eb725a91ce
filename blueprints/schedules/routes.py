# blueprints/schedules/routes.py
from __future__ import annotations
from flask import jsonify, request
from flask_login import current_user, login_required

from extensions import db
from blueprints.auth.routes import admin_required
from . import api_bp
from . import services as svc
from .errors import ScheduleError, TimeOverlapError
from .store import SqlSlotStore


def _store() -> SqlSlotStore:
    return SqlSlotStore(db.session)


def _arg(*names: str) -> str | None:
    for n in names:
        v = request.args.get(n)
        if v:
            return v
    return None


@api_bp.errorhandler(ScheduleError)
def _schedule_error(err: ScheduleError):
    return jsonify(err.to_payload()), err.status


@api_bp.get("/schedules")
@login_required
def list_schedules():
    items = svc.list_slots(
        _store(),
        class_id=_arg("classId", "class_id"),
        teacher_id=_arg("teacherId", "teacher_id"),
        day=_arg("day"),
    )
    return jsonify(items)


@api_bp.post("/schedules")
@admin_required
def create_schedule():
    js = request.get_json(silent=True) or {}
    slot_id = svc.check_and_insert(js, _store(), user_id=current_user.id)
    return jsonify({"ok": True, "id": slot_id, "message": "Schedule slot created"}), 201


@api_bp.post("/schedules/check")
@admin_required
def check_schedule():
    js = request.get_json(silent=True) or {}
    ok, errors = svc.check_slot(js, _store())
    if ok:
        return jsonify({"ok": True, "errors": []}), 200
    err = TimeOverlapError(svc.CONFLICT_MESSAGE, errors)
    return jsonify(err.to_payload()), err.status


@api_bp.delete("/schedules/<slot_id>")
@admin_required
def delete_schedule(slot_id: str):
    svc.delete_slot(slot_id, _store(), user_id=current_user.id)
    return jsonify({"ok": True, "message": "Schedule slot deleted"})


@api_bp.get("/schedules/teacher/<teacher_id>/week")
@login_required
def teacher_week(teacher_id: str):
    return jsonify(svc.teacher_week(teacher_id, _store()))
