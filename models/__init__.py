from extensions import db
from .user import Role, User
from .school_class import SchoolClass
from .schedule import Weekday, WEEKDAY_ORDER, ScheduleSlot, ScheduleLock, AuditLog

__all__ = [
    "db",
    "Role", "User",
    "SchoolClass",
    "Weekday", "WEEKDAY_ORDER", "ScheduleSlot", "ScheduleLock", "AuditLog",
]
