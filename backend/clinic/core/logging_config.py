"""
Structured logging for the clinic backend.

Call sites attach a ``context`` dict through ``extra=``; the JSON formatter
emits it as a nested object and the console formatter appends it as
``key=value`` pairs. Files under ``logs/`` always receive JSON.

Usage:
    from clinic.core.logging_config import setup_logging, get_logger

    # In create_app()
    setup_logging(app, log_level="INFO")

    # In any module
    logger = get_logger(__name__)
    logger.info("Doctor admitted", extra={"context": {"doctor_id": 7}})
"""

import json
import logging
import logging.handlers
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from flask import Flask, g, has_request_context, request
from sqlalchemy import event
from sqlalchemy.engine import Engine

DEFAULT_LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
ROTATE_BYTES = 10 * 1024 * 1024
ROTATE_BACKUPS = 5
SLOW_QUERY_MS = 250.0

_sql_listeners_installed = False


def _request_id() -> Optional[str]:
    if has_request_context():
        return g.get("request_id")
    return None


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the caller's context and request id."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        request_id = _request_id()
        if request_id:
            payload["request_id"] = request_id
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Coloured level names plus inline context for local development."""

    LEVEL_COLOURS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy; other handlers format the same record
        shown = logging.makeLogRecord(record.__dict__)
        colour = self.LEVEL_COLOURS.get(record.levelno, "")
        shown.levelname = f"{colour}{record.levelname:<8}{self.RESET}"
        line = super().format(shown)
        context = getattr(record, "context", None)
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def _resolve_level(log_level: Union[int, str]) -> int:
    if isinstance(log_level, int):
        return log_level
    resolved = logging.getLevelName(str(log_level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _rotating_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=ROTATE_BYTES, backupCount=ROTATE_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Replace the root handlers with the clinic's console (and file) handlers.

    Args:
        app: Flask application; when given, every request and response is logged
        log_level: Level name ("INFO") or number (logging.INFO)
        enable_sql_echo: Time every SQL statement and flag slow ones
        log_to_file: Also write ``clinic.log`` and ``clinic_errors.log``
        use_json_format: JSON on the console too, for log shippers
        log_dir: Where the log files go (defaults to ``backend/logs``)
    """
    level = _resolve_level(log_level)
    log_dir = log_dir or DEFAULT_LOG_DIR

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        JSONFormatter()
        if use_json_format
        else ConsoleFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%H:%M:%S")
    )
    root.addHandler(console)

    file_error = None
    if log_to_file:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            root.addHandler(_rotating_handler(log_dir / "clinic.log", level))
            root.addHandler(_rotating_handler(log_dir / "clinic_errors.log", logging.ERROR))
        except OSError as e:
            file_error = e

    if enable_sql_echo:
        _install_sql_timing()
    if app is not None:
        _install_request_logging(app)

    for noisy in ("werkzeug", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("clinic").setLevel(level)

    setup_logger = logging.getLogger("clinic.logging")
    if file_error is not None:
        setup_logger.warning(
            "File logging disabled; writing to console only",
            extra={"context": {"log_dir": str(log_dir), "error": str(file_error)}},
        )
    setup_logger.info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "sql_echo": enable_sql_echo,
                "log_to_file": log_to_file and file_error is None,
                "json": use_json_format,
            }
        },
    )


def _install_sql_timing() -> None:
    global _sql_listeners_installed
    if _sql_listeners_installed:
        return

    sql_logger = logging.getLogger("clinic.sql")

    @event.listens_for(Engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("clinic_query_started", []).append(time.perf_counter())

    @event.listens_for(Engine, "after_cursor_execute")
    def _stop_timer(conn, cursor, statement, parameters, context, executemany):
        elapsed_ms = (time.perf_counter() - conn.info["clinic_query_started"].pop()) * 1000
        sql_logger.log(
            logging.WARNING if elapsed_ms >= SLOW_QUERY_MS else logging.DEBUG,
            "SQL %.1fms",
            elapsed_ms,
            extra={"context": {"statement": statement[:300], "ms": round(elapsed_ms, 2)}},
        )

    _sql_listeners_installed = True


def _install_request_logging(app: Flask) -> None:
    http_logger = logging.getLogger("clinic.http")

    @app.before_request
    def _begin_request():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.request_started = time.perf_counter()
        http_logger.debug(
            "-> %s %s",
            request.method,
            request.path,
            extra={"context": {"remote_addr": request.remote_addr}},
        )

    @app.after_request
    def _end_request(response):
        started = g.get("request_started")
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            http_logger.info(
                "<- %s %s %s",
                request.method,
                request.path,
                response.status_code,
                extra={"context": {"status": response.status_code, "ms": round(elapsed_ms, 2)}},
            )
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response


def get_logger(name: str) -> logging.Logger:
    """Module logger under the clinic hierarchy's handlers."""
    return logging.getLogger(name)


def log_performance(func_name: str, duration_ms: float, **kwargs) -> None:
    """
    Record how long a named operation took.

    Args:
        func_name: Operation name, used as the message subject
        duration_ms: Elapsed wall time in milliseconds
        **kwargs: Extra context (specialty, week_start, totals, ...)
    """
    context = {"function": func_name, "duration_ms": round(duration_ms, 2), **kwargs}
    get_logger("clinic.performance").info(
        "%s took %.2fms", func_name, duration_ms, extra={"context": context}
    )
