from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Optional

from career_data_api.settings import get_settings

# SDK and HTTP client loggers echo request details at INFO; keep them to warnings.
QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "openai")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with the structured ``context`` extra when present."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure root logging; arguments override the settings values."""
    settings = get_settings()
    level = (level or settings.log_level).upper()
    use_json = settings.log_json if json_output is None else json_output

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                },
                "json": {
                    "()": "career_data_api.utils.logging.JsonFormatter",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if use_json else "standard",
                }
            },
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
            "root": {
                "handlers": ["console"],
                "level": level,
            },
        }
    )
