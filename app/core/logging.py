import json
import logging
import sys
from datetime import datetime, timezone

APP_LOGGER_NAME = "app"

# Поля из extra=..., которые попадают в запись лога
_EXTRA_FIELDS = (
    "siren",
    "siret",
    "document_type",
    "source",
    "url",
    "http_status",
    "error_kind",
    "duration_ms",
    "path",
    "size_bytes",
)


class StructuredFormatter(logging.Formatter):
    """JSON-форматтер: стандартные поля плюс контекст из extra"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", json_format: bool = True) -> logging.Logger:
    """Настройка логгера приложения (идемпотентно)"""
    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if json_format:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)

    return logger
