from __future__ import annotations

from flask import Flask, request

from ..common.http import actor_id, json_body, json_response
from ..core.exceptions import ValidationError
from ..container import Container
from .model import NewWorker

_REQUIRED = ("name", "national_id", "daily_wage", "joining_date")


def register(app: Flask, container: Container) -> None:
    roster = container.roster_service

    @app.route("/api/workers", methods=["GET"], endpoint="workers_list")
    async def workers_list():
        workers = await roster.list_workers(
            status=request.args.get("status") or None,
            category_id=request.args.get("category_id") or None,
            search=request.args.get("search") or None,
        )
        return json_response({"workers": workers})

    @app.route("/api/workers", methods=["POST"], endpoint="workers_create")
    async def workers_create():
        data = json_body()
        missing = {name: f"{name} is required" for name in _REQUIRED if data.get(name) in (None, "")}
        if missing:
            raise ValidationError("Invalid worker data", errors=missing)
        worker = await roster.create_worker(
            NewWorker(
                name=data["name"],
                national_id=str(data["national_id"]),
                daily_wage=str(data["daily_wage"]),
                joining_date=data["joining_date"],
                status=data.get("status") or "active",
                category_id=data.get("category_id"),
                phone=data.get("phone"),
                designation=data.get("designation"),
                photo_url=data.get("photo_url"),
            )
        )
        return json_response({"worker": worker}, 201)

    @app.route("/api/workers/<worker_id>", methods=["GET"], endpoint="workers_detail")
    async def workers_detail(worker_id: str):
        return json_response({"worker": await roster.get_worker(worker_id)})

    @app.route("/api/workers/<worker_id>", methods=["PATCH"], endpoint="workers_update")
    async def workers_update(worker_id: str):
        data = json_body()
        if "daily_wage" in data and data["daily_wage"] is not None:
            data["daily_wage"] = str(data["daily_wage"])
        worker = await roster.update_worker(worker_id, data)
        return json_response({"worker": worker})

    @app.route("/api/workers/<worker_id>/status", methods=["POST"], endpoint="workers_status")
    async def workers_status(worker_id: str):
        data = json_body()
        worker = await roster.set_status(worker_id, data.get("status") or "")
        return json_response({"worker": worker})

    @app.route("/api/workers/<worker_id>", methods=["DELETE"], endpoint="workers_remove")
    async def workers_remove(worker_id: str):
        data = request.get_json(silent=True) or {}
        voided = await roster.remove_worker(worker_id, actor_id(data))
        return json_response({"worker_id": worker_id, "voided_records": voided})

    @app.route("/api/categories", methods=["GET"], endpoint="categories_list")
    async def categories_list():
        return json_response({"categories": await roster.list_categories()})

    @app.route("/api/categories", methods=["POST"], endpoint="categories_create")
    async def categories_create():
        data = json_body()
        category = await roster.create_category(data.get("name") or "")
        return json_response({"category": category}, 201)
