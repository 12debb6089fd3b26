from __future__ import annotations

from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import ValidationError
from .serialization import to_jsonable


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def json_response(payload: Any, status: int = 200):
    return jsonify(to_jsonable(payload)), status


def query_int(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", errors={name: "Must be an integer"})


def require_arg(name: str) -> str:
    value = (request.args.get(name) or "").strip()
    if not value:
        raise ValidationError(f"{name} is required", errors={name: f"{name} is required"})
    return value


def actor_id(data: Optional[dict] = None) -> str:
    """Acting user for audit stamps: JSON ``actor_id`` or the X-Actor-Id header."""
    value = (data or {}).get("actor_id") or request.headers.get("X-Actor-Id", "")
    value = str(value).strip()
    if not value:
        raise ValidationError("Actor is required", errors={"actor_id": "Actor is required"})
    return value
