"""
Logging configuration for structured JSON logging.

Sets up JSON or readable console logging for the chat session and provides a
logger adapter that stamps every record with session context.
"""

import logging
import os
import sys
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from constants import (
    LOG_FORMAT_JSON,
    LOG_LEVEL_DEVELOPMENT,
    LOG_LEVEL_PRODUCTION,
    LOG_SNIPPET_MAX_CHARS,
)


class ContextualJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter that guarantees timestamp, level and logger fields.

    Fields passed through ``extra`` (session id, event type, ...) are emitted
    as top-level keys by the base formatter.
    """

    def __init__(self, *args, rename_fields: Optional[dict] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.rename_fields = rename_fields or {}

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = self.formatTime(record, self.datefmt)
        if not log_record.get('level'):
            log_record['level'] = record.levelname
        if not log_record.get('logger'):
            log_record['logger'] = record.name

        if self.rename_fields:
            for old_name, new_name in self.rename_fields.items():
                if old_name in log_record:
                    log_record[new_name] = log_record.pop(old_name)


def setup_logging(use_json: Optional[bool] = None, log_level: Optional[str] = None) -> None:
    """
    Configure root logging with JSON or readable format.

    Args:
        use_json: If True, use JSON format. If None, reads LOG_FORMAT_JSON from
                  the environment and falls back to the constant.
        log_level: Logging level name. If None, reads LOG_LEVEL, then picks the
                   development or production default from ENV.
    """
    if use_json is None:
        use_json = os.getenv("LOG_FORMAT_JSON", str(LOG_FORMAT_JSON)).lower() in ("true", "1", "yes")

    if log_level is None:
        env = os.getenv("ENV", "production").lower()
        default_level = LOG_LEVEL_DEVELOPMENT if env in ("dev", "development") else LOG_LEVEL_PRODUCTION
        log_level = os.getenv("LOG_LEVEL", default_level)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if use_json:
        formatter = ContextualJsonFormatter(
            '%(timestamp)s %(level)s %(logger)s %(message)s',
            rename_fields={
                'timestamp': '@timestamp',
                'level': 'severity',
            }
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper()))


def snippet(text: str, limit: int = LOG_SNIPPET_MAX_CHARS) -> str:
    """Collapse whitespace and truncate message text for a single log field."""
    one_line = ' '.join((text or "").split())
    if len(one_line) <= limit:
        return one_line
    return one_line[:limit] + '...'


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds contextual information to all log messages.

    Usage:
        logger = StructuredLoggerAdapter(logging.getLogger(__name__), {
            'session_id': controller.session_id,
            'provider': 'groq',
        })
        logger.info_event("turn_completed", "Turn completed", latency_ms=412)
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs

    def log_event(
        self,
        level: int,
        event_type: str,
        message: str,
        **context: Any
    ) -> None:
        """
        Log a structured event with type and context.

        Args:
            level: Logging level (e.g., logging.INFO)
            event_type: Type of event (e.g., "turn_submitted", "greeting_failed")
            message: Human-readable message
            **context: Additional contextual key-value pairs
        """
        context['event_type'] = event_type
        self.log(level, message, extra=context)

    def info_event(self, event_type: str, message: str, **context: Any) -> None:
        self.log_event(logging.INFO, event_type, message, **context)

    def error_event(self, event_type: str, message: str, **context: Any) -> None:
        self.log_event(logging.ERROR, event_type, message, **context)

    def warning_event(self, event_type: str, message: str, **context: Any) -> None:
        self.log_event(logging.WARNING, event_type, message, **context)

    def debug_event(self, event_type: str, message: str, **context: Any) -> None:
        self.log_event(logging.DEBUG, event_type, message, **context)
