"""
Structured Logging Module
JSON-formatted log lines for log aggregation tools
"""

import json
import logging
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects

    Extra context can be attached with
    ``logger.info("msg", extra={"extra_fields": {"message_id": ...}})``.

    SECURITY STORY: MailHog API credentials travel through the client
    (basic auth, SMTP release passwords). Extra fields whose name looks
    like a credential are replaced with "[REDACTED]" so they never end
    up in a log file.
    """

    SENSITIVE_FIELDS = {
        'password', 'auth', 'token', 'secret', 'credential', 'username'
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update({
                key: self._redact(key, value)
                for key, value in extra_fields.items()
            })

        return json.dumps(log_data, default=str, ensure_ascii=False)

    def _redact(self, key: str, value: Any) -> Any:
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in self.SENSITIVE_FIELDS):
            return "[REDACTED]"
        return value
