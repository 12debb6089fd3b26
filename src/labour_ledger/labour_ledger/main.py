from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.serialization import to_jsonable
from .container import Container, build_container
from .core.exceptions import (
    AlreadyVoidedError,
    BulkMarkError,
    DomainError,
    DuplicateActiveRecordError,
    NotFoundError,
    StoreError,
    StoreUnavailable,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .roster.controller import register as register_roster

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateActiveRecordError, 409),
    (AlreadyVoidedError, 409),
    (BulkMarkError, 409),
)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 422)
        payload = {"error": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, ValidationError) and exc.errors:
            payload["errors"] = exc.errors
        if isinstance(exc, BulkMarkError):
            payload["result"] = to_jsonable(exc.result)
        return jsonify(payload), status

    @app.errorhandler(StoreError)
    def handle_store_error(exc: StoreError):
        logger.error("Record store failure: %s", exc)
        status = 503 if isinstance(exc, StoreUnavailable) else 409
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), status


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    db_config = getattr(settings, "DB_CONFIG", None)
    backend = getattr(settings, "STORE_BACKEND", "mysql")

    if container is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(
            db_config=db_config,
            backend=backend,
            tenant_id=str(getattr(settings, "TENANT_ID", "default")),
            timezone=str(getattr(settings, "TIMEZONE", "Asia/Kolkata")),
        )

    logger.info(
        "labour-ledger settings=%s backend=%s tenant=%s tz=%s",
        settings_module, backend, container.tenant_id, container.timezone,
    )
    app.extensions["labour_ledger"] = container

    _register_error_handlers(app)
    register_roster(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app
