from __future__ import annotations

import importlib
from functools import partial
from pathlib import Path
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .accounting.controller import register as register_accounting
from .clock.controller import register as register_clock
from .common.datetime_utils import now_local
from .container import Container, build_container
from .core.constants import DEFAULT_GPS_ACCURACY_RISK_M, DEFAULT_LOCAL_TIMEZONE, DEFAULT_LOCK_TIMEOUT_SECONDS
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .eligibility.controller import register as register_eligibility
from .logging import setup_logging

logger = structlog.get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["LOCAL_TIMEZONE"] = getattr(settings, "LOCAL_TIMEZONE", DEFAULT_LOCAL_TIMEZONE)

    store_backend = getattr(settings, "STORE_BACKEND", "memory")
    db_config = getattr(settings, "DB_CONFIG", {})

    if container is None and store_backend == "mysql":
        database_dir = Path(__file__).resolve().parents[3] / "database"
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=database_dir / "schema.sql")
            logger.info("database.schema_ready", tables=len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
            logger.info("database.seed_ready")

    if container is None:
        container = build_container(
            store_backend=store_backend,
            db_config=db_config,
            catalog_seed_path=getattr(settings, "CATALOG_SEED_PATH", None),
            lock_timeout_seconds=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", DEFAULT_LOCK_TIMEOUT_SECONDS)),
            gps_accuracy_risk_m=float(getattr(settings, "GPS_ACCURACY_RISK_M", DEFAULT_GPS_ACCURACY_RISK_M)),
            now=partial(now_local, app.config["LOCAL_TIMEZONE"]),
        )
    app.extensions["clinical_attendance"] = container

    register_clock(app, container)
    register_accounting(app, container)
    register_eligibility(app, container)

    logger.info("app.ready", settings=settings_module, store_backend=store_backend)
    return app
