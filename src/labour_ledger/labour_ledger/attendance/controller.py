from __future__ import annotations

from flask import Flask, request

from ..common.http import actor_id, json_body, json_response, require_arg
from ..core.exceptions import ValidationError
from ..container import Container
from .model import BulkEntry


def register(app: Flask, container: Container) -> None:
    ledger = container.ledger

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_for_date")
    async def attendance_for_date():
        audit = request.args.get("audit", "").lower() in {"1", "true", "yes"}
        records = await ledger.get_records_for_date(require_arg("date"), audit=audit)
        return json_response({"records": records})

    @app.route("/api/attendance/range", methods=["GET"], endpoint="attendance_range")
    async def attendance_range():
        records = await ledger.get_records_in_range(require_arg("start"), require_arg("end"))
        return json_response({"records": records})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    async def attendance_mark():
        data = json_body()
        record = await ledger.mark_attendance(
            str(data.get("worker_id") or ""),
            data.get("date") or "",
            data.get("status") or "",
        )
        return json_response({"record": record}, 201)

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    async def attendance_bulk():
        data = json_body()
        raw_entries = data.get("entries")
        if not isinstance(raw_entries, list):
            raise ValidationError("entries must be a list", errors={"entries": "entries must be a list"})
        malformed = {
            f"entries[{i}]": "Entry must be an object with worker_id and status"
            for i, e in enumerate(raw_entries)
            if not isinstance(e, dict)
        }
        if malformed:
            raise ValidationError(f"{len(malformed)} malformed bulk entry(ies)", errors=malformed)
        entries = [
            BulkEntry(worker_id=str(e.get("worker_id") or ""), status=str(e.get("status") or ""))
            for e in raw_entries
        ]
        result = await ledger.bulk_mark_attendance(data.get("date") or "", entries)
        return json_response({"result": result}, 201)

    @app.route("/api/attendance/<record_id>/void", methods=["POST"], endpoint="attendance_void")
    async def attendance_void(record_id: str):
        data = request.get_json(silent=True) or {}
        record = await ledger.void_record(record_id, actor_id(data))
        return json_response({"record": record})

    @app.route("/api/attendance/<record_id>/edit", methods=["POST"], endpoint="attendance_edit")
    async def attendance_edit(record_id: str):
        data = json_body()
        record = await ledger.edit_attendance(record_id, data.get("status") or "", actor_id(data))
        return json_response({"record": record})
