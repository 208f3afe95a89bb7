from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .adjustments.controller import register as register_adjustments
from .container import build_container
from .core.exceptions import ConfigurationError, NotFoundError, SafetyLimitExceeded, StepFailedError, ValidationError
from .cycles.controller import register as register_cycles
from .database.bootstrap import apply_schema, list_tables
from .logging_config import configure_logging, get_logger
from .punches.controller import register as register_punches
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .summary.controller import register as register_summary

logger = get_logger("main")

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConfigurationError, 409),
    (SafetyLimitExceeded, 500),
    (StepFailedError, 500),
)


def _register_error_handlers(app: Flask) -> None:
    for error_type, status in _STATUS_BY_ERROR:

        def handler(exc, status=status):
            if status >= 500:
                logger.error("request_failed", exc_info=exc)
            return jsonify({"error": str(exc)}), status

        app.register_error_handler(error_type, handler)

    @app.errorhandler(ValueError)
    def bad_request(exc):
        return jsonify({"error": f"invalid request: {exc}"}), 400


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "app_starting",
        extra={
            "settings": settings_module,
            "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        },
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema_ready", extra={"tables": len(list_tables(db_config))})

    container = build_container(db_config=db_config, settings=settings)
    app.extensions["timebank"] = container

    _register_error_handlers(app)
    register_punches(app, container)
    register_schedules(app, container)
    register_summary(app, container)
    register_adjustments(app, container)
    register_cycles(app, container)
    register_reports(app, container)

    return app
