"""
Attachment Extraction Module
Finds the attachment parts of a multipart MailHog message

Attachment bodies are not decoded here. Each Attachment keeps its raw body
and transfer encoding so callers only pay for decoding what they use.
"""

import re
from typing import List

from .message_data import Attachment, RawMessage

ATTACHMENT_PATTERN = re.compile(r'attachment;\s*filename="?([^"]+)"?', re.IGNORECASE)


def extract_attachments(message: RawMessage) -> List[Attachment]:
    """
    List the attachments of a message in MIME part order

    A part counts as an attachment when its Content-Disposition reads
    ``attachment; filename="..."``. Everything else is skipped.

    Args:
        message: Message to inspect

    Returns:
        Attachments (empty for non-multipart messages)
    """
    attachments = []
    for part in message.mime_parts:
        disposition = part.first_header("Content-Disposition") or ""
        match = ATTACHMENT_PATTERN.match(disposition.strip())
        if not match:
            continue
        attachments.append(Attachment(
            name=match.group(1),
            mime_type=part.first_header("Content-Type") or "",
            transfer_encoding=part.first_header("Content-Transfer-Encoding") or "",
            raw_body=part.body
        ))
    return attachments
