import json
import logging
import os
import sys
from datetime import datetime, timezone


_RESERVED_ATTRS = frozenset((
    "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno",
    "funcName", "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "name", "taskName",
))


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key.startswith("_") or key in _RESERVED_ATTRS:
                continue
            payload[key] = value

        return json.dumps(payload, ensure_ascii=False, default=str)


class EventLogger(logging.LoggerAdapter):
    """Accepts arbitrary keyword fields: logger.info("user_registered", user_id=1)."""

    def process(self, msg, kwargs):
        passthrough = {"exc_info", "stack_info", "stacklevel", "extra"}
        extra = dict(kwargs.get("extra", {}))
        extra.update({key: value for key, value in kwargs.items() if key not in passthrough})

        clean_kwargs = {key: value for key, value in kwargs.items() if key in passthrough}
        clean_kwargs["extra"] = extra
        return msg, clean_kwargs


ROOT_LOGGER = "school_directory"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach the JSON handler to the package logger; safe to call repeatedly."""
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.propagate = False
    return root


def get_logger(name: str) -> EventLogger:
    # Module loggers carry no handlers of their own and propagate to the package logger.
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        configure_logging()
    return EventLogger(logging.getLogger(name), {})
