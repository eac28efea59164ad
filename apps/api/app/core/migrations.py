from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config


logger = logging.getLogger("app.lifecycle")

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"


def build_alembic_config(database_url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def run_migrations(database_url: str, revision: str = "head") -> None:
    logger.info("migrations.started", extra={"operation": f"upgrade:{revision}"})
    command.upgrade(build_alembic_config(database_url), revision)
    logger.info("migrations.applied", extra={"operation": f"upgrade:{revision}"})
