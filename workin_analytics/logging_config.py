"""
Structured logging configuration.

Called once from create_reports_service(). Text output is meant for people
running exports by hand; JSON output is one object per line for log
aggregators and carries the report context (university, collection) that
callers attach with `extra=`.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

# Keys callers may attach via `extra=` that are copied into JSON entries
CONTEXT_FIELDS = ('university', 'collection', 'source')

TEXT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s — %(message)s'
TEXT_DATEFMT = '%Y-%m-%d %H:%M:%S'


class JSONFormatter(logging.Formatter):
    """Single-line JSON formatter; non-ASCII (Spanish labels) is kept as is."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


# Client libraries that log every request at INFO
_NOISY_LOGGERS = [
    'urllib3',
    'requests',
    'google',
    'google.auth',
    'grpc',
    'firebase_admin',
]


def _resolve_level(name: Optional[str]) -> int:
    level = logging.getLevelName((name or 'INFO').upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None, stream=None):
    """
    Install a single stderr handler on the root logger.

    Arguments win over the environment:
        LOG_LEVEL  — Python log level name (default: INFO)
        LOG_FORMAT — "text" (default) or "json"
    Safe to call repeatedly; previous handlers are replaced.
    """
    resolved = _resolve_level(level or os.getenv('LOG_LEVEL', 'INFO'))
    log_format = (fmt or os.getenv('LOG_FORMAT', 'text')).lower()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT))

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
