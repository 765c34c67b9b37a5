"""
Logging configuration for the CollabNotes backend.
"""
import json
import logging
import logging.config
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..config import Settings, get_settings

# attributes every LogRecord has; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_entry['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value) if exc_value else None,
                'traceback': self.formatException(record.exc_info),
            }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            log_entry['extra'] = extra

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record: logging.LogRecord) -> str:
        # work on a copy so other handlers see the plain record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{self.BOLD}{record.levelname}{self.RESET}"
        record.name = f"\033[90m{record.name}{self.RESET}"
        return super().format(record)


def get_log_level(level_str: Optional[str] = None) -> int:
    """Get log level from string or settings."""
    level_str = level_str or get_settings().log_level
    level = logging.getLevelName(level_str.upper())
    return level if isinstance(level, int) else logging.INFO


def build_logging_config(settings: Settings) -> dict:
    """dictConfig for console plus rotating files under settings.log_dir."""
    log_dir = Path(settings.log_dir)

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {
                '()': JSONFormatter,
            },
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
            'file': {
                'format': '%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-20s:%(lineno)-4d | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'colored' if settings.debug else 'json',
                'stream': sys.stdout,
                'level': get_log_level(settings.log_level),
            },
            'file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': str(log_dir / 'collabnotes.log'),
                'maxBytes': 10_000_000,  # 10MB
                'backupCount': 5,
                'formatter': 'file',
                'level': 'DEBUG',
            },
            'error_file': {
                'class': 'logging.handlers.RotatingFileHandler',
                'filename': str(log_dir / 'error.log'),
                'maxBytes': 10_000_000,  # 10MB
                'backupCount': 5,
                'formatter': 'json',
                'level': 'ERROR',
            },
        },
        'loggers': {
            '': {
                'handlers': ['console', 'file'],
                'level': 'INFO',
            },
            'collabnotes': {
                'handlers': ['console', 'file', 'error_file'],
                'level': 'DEBUG',
                'propagate': False,
            },
            'uvicorn': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False,
            },
            'uvicorn.access': {
                'handlers': ['console'],
                'level': 'INFO',
                'propagate': False,
            },
            'sqlalchemy': {
                'handlers': ['file'],
                'level': 'WARNING',
                'propagate': False,
            },
        },
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Apply the logging configuration."""
    settings = settings or get_settings()
    Path(settings.log_dir).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(settings))

    logging.getLogger('collabnotes.logging').info("Logging system initialized", extra={
        'log_level': settings.log_level,
        'debug': settings.debug,
        'environment': settings.environment,
    })


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the collabnotes namespace."""
    return logging.getLogger(f"collabnotes.{name}")


class LoggingMiddleware:
    """ASGI middleware logging each HTTP request and its response."""

    def __init__(self, app, logger_name: str = "http"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        request_id = uuid.uuid4().hex[:12]
        client = scope.get("client")

        self.logger.info("HTTP Request", extra={
            'request_id': request_id,
            'method': scope['method'],
            'path': scope['path'],
            'query_string': scope.get('query_string', b'').decode(),
            'client_ip': client[0] if client else 'unknown',
        })

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message = {**message, "headers": headers}

                self.logger.info("HTTP Response", extra={
                    'request_id': request_id,
                    'status_code': message.get('status', 0),
                    'duration_ms': round((time.perf_counter() - started) * 1000, 2),
                    'method': scope['method'],
                    'path': scope['path'],
                })

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            self.logger.error("HTTP Request Failed", extra={
                'request_id': request_id,
                'method': scope['method'],
                'path': scope['path'],
                'duration_ms': round((time.perf_counter() - started) * 1000, 2),
                'exception_type': type(exc).__name__,
                'exception_message': str(exc),
            })
            raise
