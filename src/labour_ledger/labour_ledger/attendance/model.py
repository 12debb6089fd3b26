from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from ..core.enums import AttendanceStatus
from ..core.exceptions import DomainError


@dataclass(frozen=True)
class Active:
    """State of a record that counts towards attendance and payroll."""

    status: AttendanceStatus


@dataclass(frozen=True)
class Voided:
    """Terminal state: the record is kept for audit but no longer counts."""

    previous_status: AttendanceStatus
    voided_at: datetime
    voided_by: str


RecordState = Union[Active, Voided]


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one ledger entry for (worker, date)."""

    record_id: str
    worker_id: str
    work_date: date
    state: RecordState
    wage_calculated: Decimal
    created_at: Optional[datetime] = None

    __json_extra__ = ("status", "voided_at", "voided_by", "previous_status")

    @property
    def is_voided(self) -> bool:
        return isinstance(self.state, Voided)

    @property
    def status(self) -> AttendanceStatus:
        if isinstance(self.state, Voided):
            return AttendanceStatus.VOIDED
        return self.state.status

    @property
    def previous_status(self) -> Optional[AttendanceStatus]:
        return self.state.previous_status if isinstance(self.state, Voided) else None

    @property
    def voided_at(self) -> Optional[datetime]:
        return self.state.voided_at if isinstance(self.state, Voided) else None

    @property
    def voided_by(self) -> Optional[str]:
        return self.state.voided_by if isinstance(self.state, Voided) else None


@dataclass(frozen=True)
class BulkEntry:
    worker_id: str
    status: str


@dataclass(frozen=True)
class EntryFailure:
    entry: BulkEntry
    error: DomainError

    __json_extra__ = ("kind", "message")

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class BulkMarkResult:
    """Per-entry outcome of a bulk mark.

    ``skipped`` holds valid entries that were not written because the batch
    was aborted by a failure elsewhere.
    """

    work_date: date
    created: list[AttendanceRecord] = field(default_factory=list)
    unchanged: list[AttendanceRecord] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)
    skipped: list[BulkEntry] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
