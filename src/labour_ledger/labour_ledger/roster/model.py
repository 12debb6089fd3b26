from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import WorkerStatus


@dataclass(frozen=True)
class Category:
    """Free-form grouping label for workers."""

    category_id: str
    name: str


@dataclass(frozen=True)
class Worker:
    """Domain entity: a labourer tracked for attendance and wages.

    Note: Plain data object, no storage access here.
    """

    worker_id: str
    name: str
    national_id: str
    daily_wage: Decimal
    status: WorkerStatus
    joining_date: date
    category_id: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == WorkerStatus.ACTIVE and self.archived_at is None


@dataclass(frozen=True)
class NewWorker:
    """Input for registering a worker; validated by the roster service."""

    name: str
    national_id: str
    daily_wage: Decimal
    joining_date: date
    status: WorkerStatus = WorkerStatus.ACTIVE
    category_id: Optional[str] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    photo_url: Optional[str] = None
