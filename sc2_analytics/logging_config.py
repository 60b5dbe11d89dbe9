"""
Logging for the analysis engine.

Colored console lines or JSON lines, an optional JSON log file, and a
per-batch correlation id carried in a ContextVar so worker threads of one
replay log under the same id.
"""

import logging
import sys
import json
import uuid
from datetime import datetime, timezone
from typing import Optional, Any
from contextvars import ContextVar


correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_STANDARD_RECORD_KEYS = frozenset((
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
))


class JsonFormatter(logging.Formatter):
    """One JSON object per line; extras such as player_id become fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        corr_id = correlation_id.get()
        if corr_id:
            log_data["correlation_id"] = corr_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_KEYS or key in log_data:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data)


class ColoredFormatter(logging.Formatter):
    """Level colors plus a short correlation id prefix"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers see the untouched record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname:8}{self.RESET}"

        corr_id = correlation_id.get()
        if corr_id:
            record.msg = f"[{corr_id[:8]}] {record.msg}"

        return super().format(record)


class ContextualAdapter(logging.LoggerAdapter):
    """Copies the current correlation id into each record's extra"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = dict(kwargs.get("extra") or {})

        corr_id = correlation_id.get()
        if corr_id:
            extra["correlation_id"] = corr_id

        kwargs["extra"] = extra
        return msg, kwargs


_logging_initialized = False


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
    force: bool = False
) -> None:
    """
    Install root handlers once per process; later calls are ignored unless
    force is set. A log file always gets JSON lines.
    """
    global _logging_initialized

    if _logging_initialized and not force:
        return

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(
        JsonFormatter() if json_format
        else ColoredFormatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S")
    )
    root.addHandler(console)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root.warning(f"Could not create log file {log_file}: {e}")
        else:
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)

    # The thread pool is chatty at debug level
    logging.getLogger("concurrent.futures").setLevel(logging.WARNING)

    _logging_initialized = True

    root.debug(f"Logging initialized: level={level}, json={json_format}")


def get_logger(name: str) -> ContextualAdapter:
    """Module logger that tags records with the current correlation id"""
    return ContextualAdapter(logging.getLogger(name), {})


def get_correlation_id() -> Optional[str]:
    return correlation_id.get()


def generate_correlation_id() -> str:
    """New id, made current in the calling context"""
    corr_id = str(uuid.uuid4())
    correlation_id.set(corr_id)
    return corr_id


class LogContext:
    """Scopes a correlation id to a with block; other keywords are kept as extra"""

    def __init__(self, **kwargs: Any):
        self.extra = kwargs
        self._token = None

    def __enter__(self) -> "LogContext":
        if "correlation_id" in self.extra:
            self._token = correlation_id.set(self.extra["correlation_id"])
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            correlation_id.reset(self._token)
            self._token = None
