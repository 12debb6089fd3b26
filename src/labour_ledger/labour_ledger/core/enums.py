from __future__ import annotations

from enum import Enum


class WorkerStatus(str, Enum):
    """Employment status of a worker on the roster."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class AttendanceStatus(str, Enum):
    """Attendance status stored on a ledger record."""

    PRESENT = "present"
    HALF_DAY = "half-day"
    ABSENT = "absent"
    VOIDED = "voided"

    @classmethod
    def active_statuses(cls) -> tuple["AttendanceStatus", ...]:
        return (cls.PRESENT, cls.HALF_DAY, cls.ABSENT)


class ChangeKind(str, Enum):
    """Kind of mutation reported by the record store."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
