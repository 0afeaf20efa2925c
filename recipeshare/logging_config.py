"""
Structured audit logging.

Account and content events are written as one JSON object per line to
the 'recipeshare.audit' logger: sign-up, sign-in, sign-out, recipe and
comment changes, review replacement, favorites, CSRF failures.

NEVER logs: passwords, session ids, or full request bodies.
"""

import json
import logging
import re
import time
from typing import Any, Dict

from flask import g, has_request_context, request

AUDIT_LOGGER = 'recipeshare.audit'

# Control characters that would let user input forge extra log lines.
_LOG_INJECTION_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

# Context fields copied from the record into the JSON entry when present.
_CONTEXT_FIELDS = (
    'ip', 'user_id', 'email', 'user_agent', 'request_id', 'reason',
    'recipe_id', 'comment_id', 'rating', 'count', 'mean',
)


def sanitize_log_value(value: str, max_length: int = 256) -> str:
    """Strip control characters and truncate a value for log output."""
    cleaned = _LOG_INJECTION_PATTERN.sub('', str(value))
    return cleaned[:max_length]


class AuditFormatter(logging.Formatter):
    """JSON formatter for audit events."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S%z', time.gmtime(record.created)),
            'level': record.levelname,
            'event': getattr(record, 'event', 'unknown'),
            'message': record.getMessage(),
        }

        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = sanitize_log_value(str(value))

        return json.dumps(log_entry)


def setup_audit_logging(app) -> logging.Logger:
    """
    Configure the audit logger.

    Returns the 'recipeshare.audit' logger writing JSON to stderr.
    Level follows the app: DEBUG in debug mode, INFO otherwise.
    """
    logger = logging.getLogger(AUDIT_LOGGER)
    logger.setLevel(logging.DEBUG if app.debug else logging.INFO)

    # create_app() runs once per test; keep a single handler.
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(AuditFormatter())
    logger.addHandler(handler)
    return logger


def request_context() -> Dict[str, Any]:
    """Client ip, user agent and request id of the current request, if any."""
    if not has_request_context():
        return {}
    return {
        'ip': request.remote_addr or 'unknown',
        'user_agent': sanitize_log_value(
            request.headers.get('User-Agent', 'unknown'),
            max_length=200,
        ),
        'request_id': g.get('request_id', 'unknown'),
    }


def audit_log(event: str, message: str, **context) -> None:
    """
    Log an audit event.

    Args:
        event: Event type (e.g. 'login_success', 'review_replaced')
        message: Human-readable description
        **context: Extra fields (user_id, recipe_id, comment_id, ...)
    """
    logger = logging.getLogger(AUDIT_LOGGER)
    extra = {'event': event}
    extra.update(request_context())
    extra.update(context)
    logger.info(sanitize_log_value(message), extra=extra)
