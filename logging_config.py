"""
Logging setup for the TaskHub API.

Every record carries the request id, user id and role of the request that
emitted it (see middleware.request_lifecycle). Production and the log file
get one JSON object per line; local development gets colored text.
"""

import logging
import logging.handlers
import json
import os
from datetime import datetime, timezone
from contextvars import ContextVar

# --- Per-request context (set by RequestLifecycleMiddleware and routes.deps) ---
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
user_id_var: ContextVar[str] = ContextVar("user_id", default="-")
role_var: ContextVar[str] = ContextVar("role", default="-")

LOGGER_NAMESPACE = "taskhub"

# Third-party loggers and the level they are capped at
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "motor": logging.WARNING,
    "pymongo": logging.WARNING,
    "httpx": logging.WARNING,
}


class RequestContextFilter(logging.Filter):
    """Copies the request context vars onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        record.user_id = user_id_var.get()
        record.role = role_var.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "user_id": getattr(record, "user_id", "-"),
            "role": getattr(record, "role", "-"),
            "message": record.getMessage(),
        }
        # logger.info("msg", extra={"data": {...}})
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """Colored single-line output for a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        context = "[req={} user={} role={}]".format(
            getattr(record, "request_id", "-"),
            getattr(record, "user_id", "-"),
            getattr(record, "role", "-"),
        )
        line = f"{color}{record.levelname:<7}{self.RESET} {record.name} {context} {record.getMessage()}"

        data = getattr(record, "data", None)
        if data:
            line += f"  | data={data}"
        if record.exc_info and record.exc_info[0] is not None:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def _file_handler(log_dir: str) -> logging.Handler:
    os.makedirs(log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, "taskhub.log"),
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging():
    """Configure the root logger from ENV, LOG_LEVEL and LOG_DIR. Safe to call twice."""
    env = os.getenv("ENV", "development").lower()
    level = os.getenv("LOG_LEVEL", "DEBUG" if env == "development" else "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    context_filter = RequestContextFilter()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(JSONFormatter() if env == "production" else DevFormatter())
    console.addFilter(context_filter)
    root.addHandler(console)

    # No log file under tests
    log_dir = None
    if env != "testing":
        log_dir = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "logs"))
        file_handler = _file_handler(log_dir)
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)

    for name, cap in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(cap)

    get_logger("logging").info(
        "Logging initialized",
        extra={"data": {"env": env, "level": level, "log_dir": log_dir}},
    )


def get_logger(name: str) -> logging.Logger:
    """Named logger under the taskhub namespace, e.g. get_logger("tasks") -> taskhub.tasks"""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
