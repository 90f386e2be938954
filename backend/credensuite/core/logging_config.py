"""
CredenSuite - Logging

One ``credensuite`` logger tree. Production writes one JSON object per line;
every other environment writes a readable line tagged with the request id and
the acting admin. Both come from context variables bound by the request
middleware, so service code never passes them around.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from credensuite.core.config import settings

ROOT_LOGGER_NAME = "credensuite"

_request_id: ContextVar[str] = ContextVar("request_id", default="")
_actor: ContextVar[str] = ContextVar("actor", default="")

# Attributes every LogRecord has; anything else on a record came from ``extra``
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName", "ctx"}


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request_context(request_id: Optional[str] = None, actor: Optional[str] = None) -> None:
    """Attach the request id and/or actor email to everything logged from here on"""
    if request_id is not None:
        _request_id.set(request_id)
    if actor is not None:
        _actor.set(actor.strip().lower())


def clear_request_context() -> None:
    _request_id.set("")
    _actor.set("")


def current_context() -> Dict[str, str]:
    """Bound request id and actor, leaving out whichever is unset"""
    context = {"request_id": _request_id.get(), "actor": _actor.get()}
    return {key: value for key, value in context.items() if value}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """Single-line JSON records for log shippers"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.utcfromtimestamp(record.created).isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "src": f"{record.module}:{record.lineno}",
        }
        entry.update(current_context())
        entry.update(record_extras(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exc_type"] = record.exc_info[0].__name__
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Plain text with ``[request_id actor]`` after the level"""

    def __init__(self, verbose: bool = False):
        location = " %(name)s:%(lineno)d" if verbose else ""
        super().__init__(
            "%(asctime)s %(levelname)-7s [%(ctx)s]" + location + " %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        context = current_context()
        record.ctx = " ".join([context.get("request_id", "-"), context.get("actor", "-")])
        return super().format(record)


class CredenSuiteLogger(logging.Logger):
    """Logger with structured helpers for the events this service cares about"""

    def log_request(self, method: str, path: str, status_code: int, duration_ms: float, **fields) -> None:
        """One line per finished request; 4xx is a warning, 5xx an error"""
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.log(
            level,
            f"{method} {path} -> {status_code} in {duration_ms:.1f}ms",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **fields,
            },
        )

    def log_error_with_context(self, error: BaseException, context: str, **fields) -> None:
        """Error with traceback, tagged with where it happened"""
        self.error(
            f"{context} failed: {type(error).__name__}: {error}",
            exc_info=error,
            extra={"event_type": "error", "error_type": type(error).__name__, "error_context": context, **fields},
        )

    def log_performance(self, operation: str, duration_ms: float, threshold_ms: float, **fields) -> None:
        """Debug line for a timed operation, promoted to a warning past ``threshold_ms``"""
        slow = duration_ms > threshold_ms
        self.log(
            logging.WARNING if slow else logging.DEBUG,
            f"{operation} took {duration_ms:.1f}ms" + (f" (over {threshold_ms:.0f}ms)" if slow else ""),
            extra={"event_type": "performance", "operation": operation, "duration_ms": round(duration_ms, 2),
                   "slow": slow, **fields},
        )


def _build_handlers(production: bool) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(JSONFormatter() if production else ConsoleFormatter())
    handlers: List[logging.Handler] = [console]

    if settings.LOG_FILE:
        path = Path(settings.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=settings.LOG_FILE_MAX_BYTES,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(JSONFormatter() if production else ConsoleFormatter(verbose=True))
        handlers.append(file_handler)
    return handlers


def setup_logging() -> CredenSuiteLogger:
    """Configure the ``credensuite`` logger tree from settings"""
    logging.setLoggerClass(CredenSuiteLogger)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not isinstance(root, CredenSuiteLogger):
        root.__class__ = CredenSuiteLogger
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    production = settings.ENVIRONMENT == "production"
    for handler in _build_handlers(production):
        root.addHandler(handler)

    for noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root.debug("Logging configured", extra={"environment": settings.ENVIRONMENT, "json": production})
    return root


logger: CredenSuiteLogger = setup_logging()


def get_logger(name: str) -> CredenSuiteLogger:
    """Module logger under the ``credensuite`` tree"""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)  # type: ignore[return-value]


__all__ = [
    "logger",
    "get_logger",
    "setup_logging",
    "bind_request_context",
    "clear_request_context",
    "current_context",
    "generate_request_id",
    "CredenSuiteLogger",
    "JSONFormatter",
    "ConsoleFormatter",
]
