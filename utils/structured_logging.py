"""
Structured Logging with Correlation IDs
Every log line is a JSON document so auth and quiz events can be filtered by category
"""

import json
import logging
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request, Response
from pydantic import BaseModel, Field

# Context variable for storing correlation ID
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class LogLevel(str, Enum):
    """Log severity levels"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    SECURITY = "SECURITY"  # Special level for security events


class LogCategory(str, Enum):
    """Log categories for filtering and analysis"""

    REQUEST = "request"
    RESPONSE = "response"
    DATABASE = "database"
    SECURITY = "security"
    AUTHENTICATION = "authentication"
    ERROR = "error"
    BUSINESS = "business"
    SYSTEM = "system"


# ============================================================================
# STRUCTURED LOG MODEL
# ============================================================================


class StructuredLogEntry(BaseModel):
    """Standard structured log entry format"""

    timestamp: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    level: str
    category: str
    message: str
    correlation_id: Optional[str] = None
    user_id: Optional[str] = None

    # Request context
    request_id: Optional[str] = None
    request_method: Optional[str] = None
    request_path: Optional[str] = None
    request_ip: Optional[str] = None

    # Response context
    response_status: Optional[int] = None
    response_time_ms: Optional[float] = None

    # Error context
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_stack: Optional[str] = None

    # Security context
    security_event: Optional[str] = None
    security_severity: Optional[str] = None
    security_details: Optional[Dict[str, Any]] = None

    duration_ms: Optional[float] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# STRUCTURED LOGGER CLASS
# ============================================================================


class StructuredLogger:
    """Logger wrapper that emits StructuredLogEntry documents"""

    def __init__(self, name: str, level: str = "INFO"):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        self.logger.handlers = []
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        self.logger.addHandler(handler)

        # Disable propagation to avoid duplicate logs
        self.logger.propagate = False

    def _emit(self, log_method, level: str, category: str, message: str, **kwargs):
        if "user_id" in kwargs and kwargs["user_id"] is not None:
            kwargs["user_id"] = str(kwargs["user_id"])
        entry = StructuredLogEntry(
            level=level,
            category=category,
            message=message,
            correlation_id=kwargs.pop("correlation_id", None) or correlation_id_var.get(),
            **kwargs,
        )
        log_method(entry.model_dump_json(exclude_none=True))

    def debug(self, message: str, category: str = LogCategory.SYSTEM, **kwargs):
        self._emit(self.logger.debug, LogLevel.DEBUG, category, message, **kwargs)

    def info(self, message: str, category: str = LogCategory.SYSTEM, **kwargs):
        self._emit(self.logger.info, LogLevel.INFO, category, message, **kwargs)

    def warning(self, message: str, category: str = LogCategory.SYSTEM, **kwargs):
        self._emit(self.logger.warning, LogLevel.WARNING, category, message, **kwargs)

    def error(self, message: str, category: str = LogCategory.ERROR, exception: Optional[Exception] = None, **kwargs):
        """Log error message with optional exception"""
        if exception:
            kwargs["error_type"] = type(exception).__name__
            kwargs["error_message"] = str(exception)
            kwargs["error_stack"] = traceback.format_exc()
        self._emit(self.logger.error, LogLevel.ERROR, category, message, **kwargs)

    def critical(
        self, message: str, category: str = LogCategory.ERROR, exception: Optional[Exception] = None, **kwargs
    ):
        if exception:
            kwargs["error_type"] = type(exception).__name__
            kwargs["error_message"] = str(exception)
            kwargs["error_stack"] = traceback.format_exc()
        self._emit(self.logger.critical, LogLevel.CRITICAL, category, message, **kwargs)

    def security(
        self, message: str, event_type: str, severity: str = "medium", details: Optional[Dict] = None, **kwargs
    ):
        """Log security event"""
        kwargs["security_event"] = event_type
        kwargs["security_severity"] = severity
        kwargs["security_details"] = details or {}
        # Use warning level for security events
        self._emit(self.logger.warning, LogLevel.SECURITY, LogCategory.SECURITY, message, **kwargs)

    def request(self, request: Request, **kwargs):
        """Log incoming request"""
        self._emit(
            self.logger.info,
            LogLevel.INFO,
            LogCategory.REQUEST,
            f"Incoming {request.method} {request.url.path}",
            request_method=request.method,
            request_path=request.url.path,
            request_ip=request.client.host if request.client else None,
            **kwargs,
        )

    def response(self, request: Request, response: Response, duration_ms: float, **kwargs):
        """Log outgoing response"""
        self._emit(
            self.logger.info,
            LogLevel.INFO,
            LogCategory.RESPONSE,
            f"Response {response.status_code} for {request.method} {request.url.path}",
            request_method=request.method,
            request_path=request.url.path,
            response_status=response.status_code,
            response_time_ms=duration_ms,
            **kwargs,
        )


# ============================================================================
# CUSTOM FORMATTER
# ============================================================================


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON output"""

    def format(self, record: logging.LogRecord) -> str:
        # If message is already JSON, return as-is
        if isinstance(record.msg, str) and record.msg.startswith("{"):
            return record.msg

        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id_var.get(),
        }
        if record.exc_info:
            entry["error_stack"] = self.formatException(record.exc_info)

        return json.dumps(entry)


# ============================================================================
# CORRELATION ID MANAGEMENT
# ============================================================================


def generate_correlation_id() -> str:
    return f"corr_{uuid.uuid4().hex[:16]}"


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    if not correlation_id:
        correlation_id = generate_correlation_id()
    correlation_id_var.set(correlation_id)
    return correlation_id


async def log_request_middleware(request: Request, call_next):
    """Middleware to log requests with correlation IDs"""
    correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

    request.state.correlation_id = correlation_id
    request.state.request_id = f"req_{uuid.uuid4().hex[:8]}"

    logger = get_logger("api.request")
    logger.request(request, request_id=request.state.request_id)

    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Request failed: {str(e)}",
            exception=e,
            request_id=request.state.request_id,
            request_method=request.method,
            request_path=request.url.path,
            response_time_ms=duration_ms,
        )
        raise

    duration_ms = (time.time() - start_time) * 1000
    response.headers["X-Correlation-ID"] = correlation_id
    response.headers["X-Request-ID"] = request.state.request_id

    logger.response(
        request,
        response,
        duration_ms,
        request_id=request.state.request_id,
        user_id=getattr(request.state, "user_id", None),
    )
    return response


# ============================================================================
# LOGGER FACTORY
# ============================================================================

_loggers: Dict[str, StructuredLogger] = {}
_default_level = "INFO"


def get_logger(name: str, level: Optional[str] = None) -> StructuredLogger:
    """Get or create a structured logger"""
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, level or _default_level)
    return _loggers[name]


def log_authentication_event(
    event_type: str,
    user_id: Optional[Any] = None,
    success: bool = True,
    method: str = "password",
    details: Optional[Dict] = None,
):
    """Log an authentication event. Never pass credentials in details."""
    logger = get_logger("auth")

    if success:
        logger.info(
            f"Authentication successful: {event_type}",
            category=LogCategory.AUTHENTICATION,
            user_id=user_id,
            extra={"method": method, "success": True, **(details or {})},
        )
    else:
        logger.warning(
            f"Authentication failed: {event_type}",
            category=LogCategory.AUTHENTICATION,
            user_id=user_id,
            extra={"method": method, "success": False, **(details or {})},
        )


def configure_logging(level: str = "INFO", json_output: bool = True):
    """Configure global logging settings"""
    global _default_level
    _default_level = level.upper()

    logging.getLogger().setLevel(getattr(logging, _default_level))
    for cached in _loggers.values():
        cached.logger.setLevel(getattr(logging, _default_level))

    if json_output:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(StructuredFormatter())

    get_logger("system").info(
        "Logging configured", category=LogCategory.SYSTEM, extra={"level": _default_level, "json_output": json_output}
    )
