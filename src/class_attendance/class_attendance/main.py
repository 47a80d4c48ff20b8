from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_staff, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .reports.controller import register as register_reports
from .schedules.controller import register as register_schedules

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run over pre-built repositories (tests); otherwise
    a MySQL-backed container is built from the active settings module.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["API_PREFIX"] = getattr(settings, "API_PREFIX", "/api").rstrip("/")

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_staff(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config,
            global_pin=str(getattr(settings, "GLOBAL_PIN")),
            offset_minutes=int(getattr(settings, "UTC_OFFSET_MINUTES")),
            sweep_cooldown_seconds=float(getattr(settings, "SWEEP_COOLDOWN_SECONDS")),
        )

    register_attendance(app, container)
    register_schedules(app, container)
    register_reports(app, container)

    return app
