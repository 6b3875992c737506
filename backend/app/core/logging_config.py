"""
Academia Pro - Centralized Logging Configuration

Every record carries the request context (request id, acting user and the
school the request runs inside) so that one tenant's traffic can be followed
through the logs. Production writes JSON lines; development writes readable
text.
"""

import logging
import sys
import json
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional
from contextvars import ContextVar

from app.core.config import settings


CONTEXT_FIELDS = ("request_id", "user_id", "school_id")

_context_vars: Dict[str, ContextVar] = {
    name: ContextVar(name, default='') for name in CONTEXT_FIELDS
}


def bind_context(**values: Optional[str]) -> None:
    """Attach request_id / user_id / school_id to all subsequent log records"""
    for name, value in values.items():
        _context_vars[name].set(str(value) if value else '')


def clear_context() -> None:
    for var in _context_vars.values():
        var.set('')


def get_context() -> Dict[str, str]:
    return {name: var.get() for name, var in _context_vars.items()}


def generate_request_id() -> str:
    """Short id for correlating the log lines of one request"""
    return uuid.uuid4().hex[:8]


_STANDARD_RECORD_KEYS = set(logging.makeLogRecord({}).__dict__) | {'message', 'asctime', *CONTEXT_FIELDS}


class ContextFilter(logging.Filter):
    """Copies the request context onto each record"""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in get_context().items():
            setattr(record, name, value or '-')
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log aggregation"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, '-')
            if value != '-':
                log_data[name] = value

        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        # Anything passed through `extra=`
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_KEYS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class AcademiaLogger(logging.Logger):
    """Logger with helpers for the events the platform reports on"""

    def log_auth_event(self, event: str, success: bool, user_email: str = None,
                       reason: str = None, **kwargs) -> None:
        level = logging.INFO if success else logging.WARNING
        self.log(
            level,
            f"Auth {event}: {'success' if success else 'failed'}" +
            (f" - {user_email}" if user_email else "") +
            (f" - {reason}" if reason else ""),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_access_denied(self, user_id: str, resource: str, resource_id: str, reason: str) -> None:
        """A user reached for a record outside their school or relationship"""
        self.warning(
            f"Access denied: user {user_id} -> {resource} {resource_id} ({reason})",
            extra={
                "event_type": "access_denied",
                "denied_resource": resource,
                "denied_resource_id": resource_id,
                "denied_reason": reason,
            }
        )

    def log_audit_event(self, action: str, resource: str, resource_id: str = None,
                        severity: str = "low", **kwargs) -> None:
        """Mirror of an audit trail row; high and critical entries log as warnings"""
        level = logging.WARNING if severity in ("high", "critical") else logging.INFO
        self.log(
            level,
            f"Audit {action} {resource}" + (f" {resource_id}" if resource_id else ""),
            extra={
                "event_type": "audit",
                "audit_action": action,
                "audit_resource": resource,
                "audit_resource_id": resource_id,
                "audit_severity": severity,
                **kwargs
            }
        )

    def log_performance(self, operation: str, duration_ms: float,
                        threshold_ms: float = 1000, **kwargs) -> None:
        exceeded = duration_ms > threshold_ms
        self.log(
            logging.WARNING if exceeded else logging.DEBUG,
            f"Performance: {operation} took {duration_ms:.2f}ms" +
            (f" (threshold: {threshold_ms}ms)" if exceeded else ""),
            extra={
                "event_type": "performance",
                "operation": operation,
                "duration_ms": duration_ms,
                "threshold_ms": threshold_ms,
                "exceeded_threshold": exceeded,
                **kwargs
            }
        )


def _handler(stream_or_file, formatter: logging.Formatter, level: int, backup_count: int = 5) -> logging.Handler:
    if isinstance(stream_or_file, Path):
        stream_or_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(stream_or_file, maxBytes=10485760, backupCount=backup_count)  # 10MB
    else:
        handler = logging.StreamHandler(stream_or_file)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def setup_logging() -> AcademiaLogger:
    """Configure the "academia" logger for the current environment"""
    logging.setLoggerClass(AcademiaLogger)

    logger = logging.getLogger("academia")
    logger.__class__ = AcademiaLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.handlers.clear()

    is_production = settings.ENVIRONMENT == "production"
    if is_production:
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = logging.Formatter("%(levelname)-8s | [%(school_id)s] %(message)s")
        file_formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] [%(school_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )

    logger.addHandler(_handler(sys.stdout, console_formatter, logging.INFO))
    if settings.LOG_FILE:
        logger.addHandler(_handler(
            Path(settings.LOG_FILE), file_formatter, logging.DEBUG, backup_count=10 if is_production else 5
        ))

    # Suppress noisy loggers
    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(f"Logging initialized ({settings.ENVIRONMENT}, json={is_production})")
    return logger


logger: AcademiaLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'bind_context',
    'clear_context',
    'get_context',
    'generate_request_id',
    'AcademiaLogger',
]
