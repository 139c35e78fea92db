"""
Timestamp parsing helpers for MailHog dates and mail Date headers
"""

import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional

# MailHog reports nanosecond precision, datetime keeps microseconds
FRACTION_PATTERN = re.compile(r"(\.\d{1,6})\d*")


def parse_iso_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp such as ``2016-10-23T18:59:41.316236327Z``

    Returns:
        Timezone-aware datetime when an offset is given, None if the value
        is missing or not a valid timestamp
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = FRACTION_PATTERN.sub(lambda match: match.group(1).ljust(7, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_mail_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a mail Date header (RFC 2822), falling back to ISO-8601

    Example:
        >>> parse_mail_date("Sun, 23 Oct 2016 20:59:40 +0200").isoformat()
        '2016-10-23T20:59:40+02:00'
    """
    if not value:
        return None
    try:
        return parsedate_to_datetime(value.strip())
    except (TypeError, ValueError, IndexError):
        return parse_iso_timestamp(value)
