"""Process-wide logging setup (stderr, text or JSON lines)."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from backoffice.common import settings

# LogRecord attributes forwarded when passed through `extra=`
_EXTRA_FIELDS = ("entity", "parent_id", "order_id", "environment", "request_path")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                data[name] = getattr(record, name)
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, default=str)


def configure_logging() -> None:
    """
    Install the back-office handler on the root logger (replaces a previous one).

    - LOG_LEVEL : DEBUG / INFO / WARNING ... (default INFO)
    - LOG_FORMAT: "json" for one JSON object per line, anything else for text
    """
    level = getattr(logging, settings.log_level(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if settings.log_format() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_backoffice", False):
            root.removeHandler(existing)
    handler._backoffice = True
    root.addHandler(handler)
    root.setLevel(level)

    # SQL echo stays off unless explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
