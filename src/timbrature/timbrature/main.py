from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .anomalies.controller import register as register_anomalies
from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.settings import TimbratureSettings
from .corrections.controller import register as register_corrections
from .database.bootstrap import apply_schema, list_tables
from .wellbeing.controller import register as register_wellbeing

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s", settings_module)

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            settings=TimbratureSettings.from_mapping(getattr(settings, "TIMBRATURE", {})),
        )

    register_attendance(app, container)
    register_anomalies(app, container)
    register_corrections(app, container)
    register_wellbeing(app, container)

    return app
