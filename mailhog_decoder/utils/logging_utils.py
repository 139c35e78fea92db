"""
Logging Utilities Module
Logging setup and sanitization of untrusted values before they are logged
"""

import logging
import re
import sys
import unicodedata
from pathlib import Path

from .config import SystemConfig
from .structured_logging import JSONFormatter

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text: str, max_length: int = 255) -> str:
    """
    Make a mail-derived string safe to write into a log line

    SECURITY STORY: Header values and charset names come straight from
    captured mail. A value containing CR/LF could forge extra log lines
    (log injection) and ANSI sequences could tamper with a terminal, so
    both are neutralised and overly long values are truncated.

    Args:
        text: The untrusted string
        max_length: Maximum length kept before truncation

    Returns:
        Sanitized string safe for logging
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', str(text))
    text = text.replace('\n', '\\n').replace('\r', '\\r')
    text = ANSI_ESCAPE_PATTERN.sub('', text)
    text = "".join(ch for ch in text if ch == '\t' or ord(ch) >= 32)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def setup_logging(system: SystemConfig) -> None:
    """
    Configure root logging from the system configuration

    Logs always go to stdout; a file handler is added when ``log_file``
    is set. ``log_format == "json"`` switches every handler to JSON lines.

    Args:
        system: SystemConfig with log level, file and format
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if system.log_file:
        log_path = Path(system.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(system.log_file))

    if system.log_format == "json":
        formatter = JSONFormatter()
        for handler in handlers:
            handler.setFormatter(formatter)

    # Resolve log level with safe fallback
    level_name = str(system.log_level).upper()
    level = logging._nameToLevel.get(level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

    if level_name not in logging._nameToLevel:
        logging.getLogger(__name__).warning(
            "Invalid log level '%s'; defaulting to INFO", system.log_level
        )
