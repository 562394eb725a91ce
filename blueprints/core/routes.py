from __future__ import annotations
import json, logging
from datetime import datetime, timezone
from uuid import uuid4

from flask import g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

from extensions import db
from . import bp

log = logging.getLogger(__name__)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": _utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in ("event", "path", "method", "status", "duration_ms", "request_id"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _setup_structured_logging(app):
    # root, чтобы логгеры модулей (logging.getLogger(__name__)) писали тем же форматом
    root = logging.getLogger()
    has_json = any(isinstance(getattr(h, "formatter", None), JSONFormatter) for h in root.handlers)
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    level = app.config.get("LOG_LEVEL", "INFO")
    root.setLevel(level)
    app.logger.setLevel(level)

@bp.before_app_request
def _start_timer():
    g._req_start = _utcnow()
    g.request_id = request.headers.get("X-Request-ID") or uuid4().hex

@bp.after_app_request
def _log_request(response: Response):
    try:
        duration_ms = int((_utcnow() - g._req_start).total_seconds() * 1000)
    except AttributeError:
        duration_ms = None
    response.headers["X-Request-ID"] = getattr(g, "request_id", "")
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "request_id": getattr(g, "request_id", None),
    }
    logging.getLogger("http").info("request handled", extra=extra)
    return response

@bp.app_errorhandler(404)
def _not_found(e):
    return jsonify({"error": "not_found"}), 404

@bp.app_errorhandler(SQLAlchemyError)
def _db_error(e: SQLAlchemyError):
    db.session.rollback()
    log.exception("database error on %s %s", request.method, request.path)
    return jsonify({"error": "server_error"}), 500

@bp.app_errorhandler(Exception)
def _unhandled(e: Exception):
    if isinstance(e, HTTPException):
        return e
    log.exception("unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "server_error"}), 500

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": _utcnow().isoformat(timespec="seconds").replace("+00:00", "Z"),
    })
