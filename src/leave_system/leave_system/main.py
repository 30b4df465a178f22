from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig, DatabaseConnection
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", fmt: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": fmt}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": level.upper(), "handlers": ["console"]},
        }
    )


def create_app(container: Container | None = None) -> Flask:
    """Application factory; pass a ready `container` to skip MySQL wiring (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    timezone = getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)

    configure_logging(
        getattr(settings, "LOG_LEVEL", "INFO"),
        getattr(settings, "LOG_FORMAT", "%(asctime)s %(levelname)s [%(name)s] %(message)s"),
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            config = DBConfig.from_dict(db_config)
            conn = DatabaseConnection.get_instance(config)
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(conn, config.database, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(conn)))
        container = build_container(db_config=db_config, timezone=timezone)

    register_employees(app, container)
    register_leaves(app, container)

    return app
