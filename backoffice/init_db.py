from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from backoffice.db.core import get_engine
from backoffice.db.tables import metadata

logger = logging.getLogger(__name__)


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Create every table the back office uses.

    - CREATE TABLE IF NOT EXISTS semantics: safe to run against an existing
      database, only missing tables are created
    - no DROP / destructive change is ever made
    """
    engine = engine or get_engine()
    logger.info("=== INIT_DB START === url=%s", engine.url.render_as_string(hide_password=True))
    metadata.create_all(engine)
    logger.info("=== INIT_DB END === tables=%d", len(metadata.tables))


if __name__ == "__main__":
    from backoffice.common.logging_config import configure_logging

    configure_logging()
    init_db()
