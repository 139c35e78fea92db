"""
Content Part Selection Module
Finds the body part of a message matching a content type and decodes it
"""

import re
from typing import Callable, Optional, Union

from .message_data import DecodedContent, Part, RawMessage
from .transfer_encoding import DEFAULT_CODEC, TransferCodec

TEXT_PLAIN_PATTERN = re.compile(r"^text/plain($|;)", re.IGNORECASE)
TEXT_HTML_PATTERN = re.compile(r"^text/html($|;)", re.IGNORECASE)
CHARSET_PATTERN = re.compile(r"""\bcharset=["']?([\w_-]+)["']?\s*(?:;|$)""", re.IGNORECASE)

TypePredicate = Union[re.Pattern, Callable[[str], bool]]


def content_type_of(part: Part) -> str:
    """Raw Content-Type value of a part ("" when missing)"""
    return part.first_header("Content-Type") or ""


def charset_of(content_type: str) -> Optional[str]:
    """
    Charset parameter of a Content-Type value, None if not declared

    Example:
        >>> charset_of("text/plain; charset=ISO-8859-1")
        'ISO-8859-1'
    """
    match = CHARSET_PATTERN.search(content_type)
    return match.group(1) if match else None


def _matches(predicate: TypePredicate, content_type: str) -> bool:
    if hasattr(predicate, "search"):
        return predicate.search(content_type) is not None
    return bool(predicate(content_type))


class ContentPartSelector:
    """Selects and decodes body parts of MailHog messages"""

    def __init__(self, codec: Optional[TransferCodec] = None):
        self.codec = codec or DEFAULT_CODEC

    def select_part(
        self,
        message: RawMessage,
        predicate: TypePredicate
    ) -> Optional[DecodedContent]:
        """
        Decode the first part whose Content-Type satisfies the predicate

        The content part is checked first, then the multipart parts in
        their original order.

        Args:
            message: Message to search
            predicate: Compiled regex (searched in the Content-Type value)
                or a callable taking the Content-Type value

        Returns:
            DecodedContent of the first matching part, None if no part
            matches
        """
        for part in message.parts:
            content_type = content_type_of(part)
            if not _matches(predicate, content_type):
                continue
            text = self.codec.decode(
                part.body,
                part.first_header("Content-Transfer-Encoding") or "",
                charset_of(content_type)
            )
            return DecodedContent(mime_type=content_type, text=text)
        return None

    def get_text(self, message: RawMessage) -> Optional[DecodedContent]:
        """Decoded text/plain part, if any"""
        return self.select_part(message, TEXT_PLAIN_PATTERN)

    def get_html(self, message: RawMessage) -> Optional[DecodedContent]:
        """Decoded text/html part, if any"""
        return self.select_part(message, TEXT_HTML_PATTERN)
