from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any, Optional, Sequence, Union

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import coerce_date, now_local, today_local
from ..common.validators import (
    check_name,
    check_national_id,
    check_not_future,
    check_phone,
    check_wage,
    normalize_national_id,
    normalize_phone,
    parse_wage,
    require_non_empty,
)
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import WorkerStatus
from ..core.exceptions import DuplicateNationalIdError, NotFoundError, ValidationError
from ..store.base import ChangeListener, Unsubscribe
from .model import Category, NewWorker, Worker
from .repository import CategoryRepository, RosterProvider, WorkerRepository

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "name",
    "national_id",
    "daily_wage",
    "status",
    "joining_date",
    "category_id",
    "phone",
    "designation",
    "photo_url",
)


def _coerce_worker_status(value: Union[WorkerStatus, str]) -> WorkerStatus:
    try:
        return WorkerStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid worker status: {value!r}", errors={"status": "Status must be active or inactive"})


class RosterService(RosterProvider):
    """Use case: manage the worker roster (admin)."""

    def __init__(
        self,
        workers: WorkerRepository,
        categories: CategoryRepository,
        attendance: AttendanceRepository,
        *,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._workers = workers
        self._categories = categories
        self._attendance = attendance
        self._tz = timezone

    async def list_workers(
        self,
        *,
        status: Optional[Union[WorkerStatus, str]] = None,
        category_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Worker]:
        status = _coerce_worker_status(status) if status is not None else None
        workers = await self._workers.list(status=status, category_id=category_id)
        term = (search or "").strip().lower()
        if not term:
            return list(workers)
        return [w for w in workers if term in w.name.lower() or term in w.national_id]

    async def get_worker(self, worker_id: str) -> Worker:
        worker = await self._workers.get_by_id(worker_id)
        if worker is None or worker.archived_at is not None:
            raise NotFoundError(f"Worker {worker_id} not found")
        return worker

    async def _validate(self, data: dict[str, Any], *, today: date, current_id: Optional[str] = None) -> dict[str, Any]:
        """Validate worker fields, collecting every error before raising."""
        errors: dict[str, str] = {}
        cleaned: dict[str, Any] = {}

        if "name" in data:
            msg = check_name(data["name"])
            if msg:
                errors["name"] = msg
            else:
                cleaned["name"] = data["name"].strip()

        if "national_id" in data:
            msg = check_national_id(data["national_id"])
            if msg:
                errors["national_id"] = msg
            else:
                cleaned["national_id"] = normalize_national_id(data["national_id"])

        if "phone" in data:
            msg = check_phone(data["phone"])
            if msg:
                errors["phone"] = msg
            else:
                cleaned["phone"] = normalize_phone(data["phone"]) or None

        if "daily_wage" in data:
            try:
                wage = parse_wage(data["daily_wage"])
            except ValidationError as exc:
                errors.update(exc.errors)
            else:
                msg = check_wage(wage)
                if msg:
                    errors["daily_wage"] = msg
                else:
                    cleaned["daily_wage"] = wage

        if "joining_date" in data:
            try:
                joining = coerce_date(data["joining_date"]) if data["joining_date"] else None
            except ValidationError:
                joining = None
                errors["joining_date"] = "Joining date must be a valid date"
            if joining is None:
                errors.setdefault("joining_date", "Joining date is required")
            else:
                msg = check_not_future(joining, today, "Joining date")
                if msg:
                    errors["joining_date"] = msg
                else:
                    cleaned["joining_date"] = joining

        if "status" in data:
            try:
                cleaned["status"] = _coerce_worker_status(data["status"])
            except ValidationError as exc:
                errors.update(exc.errors)

        if data.get("category_id"):
            if await self._categories.get_by_id(data["category_id"]) is None:
                errors["category_id"] = "Category not found"
            else:
                cleaned["category_id"] = data["category_id"]
        elif "category_id" in data:
            cleaned["category_id"] = None

        for optional in ("designation", "photo_url"):
            if optional in data:
                cleaned[optional] = (data[optional] or "").strip() or None

        if "national_id" in cleaned and "national_id" not in errors:
            other = await self._workers.get_by_national_id(cleaned["national_id"])
            if other is not None and other.worker_id != current_id:
                errors["national_id"] = "National id is already registered"
                raise DuplicateNationalIdError("A worker with this national id already exists", errors=errors)

        if errors:
            raise ValidationError("Invalid worker data", errors=errors)
        return cleaned

    async def create_worker(self, new: NewWorker, *, today: Optional[date] = None) -> Worker:
        data = {name: getattr(new, name) for name in _EDITABLE_FIELDS}
        cleaned = await self._validate(data, today=today or today_local(self._tz))
        worker = Worker(
            worker_id=str(uuid.uuid4()),
            created_at=now_local(self._tz),
            **cleaned,
        )
        saved = await self._workers.add(worker)
        logger.info("Registered worker %s (%s)", saved.worker_id, saved.name)
        return saved

    async def update_worker(self, worker_id: str, changes: dict[str, Any], *, today: Optional[date] = None) -> Worker:
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown worker field(s): {', '.join(sorted(unknown))}")
        await self.get_worker(worker_id)

        cleaned = await self._validate(changes, today=today or today_local(self._tz), current_id=worker_id)
        if not cleaned:
            return await self.get_worker(worker_id)
        updated = await self._workers.update(worker_id, cleaned)
        if updated is None:
            raise NotFoundError(f"Worker {worker_id} not found")
        # Wage changes apply to attendance marked from now on; saved records keep their wage.
        logger.info("Updated worker %s: %s", worker_id, ", ".join(sorted(cleaned)))
        return updated

    async def set_status(self, worker_id: str, status: Union[WorkerStatus, str]) -> Worker:
        return await self.update_worker(worker_id, {"status": status})

    async def remove_worker(self, worker_id: str, actor_id: str, *, now: Optional[datetime] = None) -> int:
        """Archive a worker and void its active attendance history.

        Records are voided, not deleted, so the audit trail stays complete.
        Returns the number of records voided.
        """

        require_non_empty(actor_id or "", "actor_id")
        await self.get_worker(worker_id)
        now = now or now_local(self._tz)

        voided = 0
        for record in await self._attendance.list_active_for_worker(worker_id):
            result = await self._attendance.mark_voided(
                record.record_id,
                previous_status=record.status,
                voided_at=now,
                voided_by=actor_id,
            )
            if result is not None:
                voided += 1

        await self._workers.update(worker_id, {"status": WorkerStatus.INACTIVE, "archived_at": now})
        logger.info("Removed worker %s by %s; voided %d record(s)", worker_id, actor_id, voided)
        return voided

    async def create_category(self, name: str) -> Category:
        name = require_non_empty(name, "name")
        category = await self._categories.add(Category(category_id=str(uuid.uuid4()), name=name))
        logger.info("Created category %s", category.name)
        return category

    async def list_categories(self) -> Sequence[Category]:
        return await self._categories.list()

    def subscribe(self, on_change: ChangeListener) -> Unsubscribe:
        return self._workers.subscribe(on_change)
