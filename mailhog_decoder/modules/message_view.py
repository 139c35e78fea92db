"""
Message View Module
Lazy, memoized decoded fields over a raw MailHog message

PATTERN RECOGNITION: Every field is a property backed by a private cache
attribute that starts out as the _UNSET sentinel. The first read computes
the value (which may legitimately be None) and stores it, later reads return
the cached value. Nothing is shared between views, so wrapping the same
RawMessage twice derives everything twice.

MAINTENANCE WISDOM: The cache is not guarded by a lock. A view is meant to be
read from one thread; views over different messages can be processed in
parallel freely.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .attachments import extract_attachments
from .charset import CharsetTranscoder
from .content_parts import ContentPartSelector
from .header_decoder import HeaderDecoder
from .message_data import Attachment, DecodedContent, RawMessage
from .transfer_encoding import TransferCodec
from ..utils.timestamps import parse_iso_timestamp

_UNSET = object()

# Captured mail regularly declares charsets nobody has heard of. Views fall
# back to UTF-8 (with replacement characters) instead of failing the field.
LENIENT_CODEC = TransferCodec(CharsetTranscoder(fallback_charset="utf-8"))


class MessageView:
    """
    Read-only decoded projection of a RawMessage

    Args:
        raw: The message record to decode
        codec: Transfer codec used for bodies and headers. Pass a strict
            ``TransferCodec()`` to have UnsupportedCharsetError raised
            instead of the default UTF-8 fallback.
    """

    def __init__(self, raw: RawMessage, codec: Optional[TransferCodec] = None):
        self.raw = raw
        self.codec = codec or LENIENT_CODEC
        self._selector = ContentPartSelector(self.codec)
        self._headers = HeaderDecoder(self.codec)

        self._text = _UNSET
        self._html = _UNSET
        self._subject = _UNSET
        self._from = _UNSET
        self._to = _UNSET
        self._cc = _UNSET
        self._bcc = _UNSET
        self._reply_to = _UNSET
        self._date = _UNSET
        self._delivery_date = _UNSET
        self._attachments = _UNSET

    @classmethod
    def from_dict(cls, data: Dict[str, Any], codec: Optional[TransferCodec] = None) -> "MessageView":
        """Wrap a MailHog API message object"""
        return cls(RawMessage.from_dict(data), codec)

    def __repr__(self) -> str:
        return f"MessageView(id={self.raw.id!r})"

    def _memoized(self, attribute: str, compute: Callable[[], Any]) -> Any:
        value = getattr(self, attribute)
        if value is _UNSET:
            value = compute()
            setattr(self, attribute, value)
        return value

    @staticmethod
    def _content_text(content: Optional[DecodedContent]) -> Optional[str]:
        return content.text if content is not None else None

    @property
    def id(self) -> str:
        return self.raw.id

    @property
    def text(self) -> Optional[str]:
        """Decoded text/plain content, None if the message has none"""
        return self._memoized(
            "_text", lambda: self._content_text(self._selector.get_text(self.raw))
        )

    @property
    def html(self) -> Optional[str]:
        """Decoded text/html content, None if the message has none"""
        return self._memoized(
            "_html", lambda: self._content_text(self._selector.get_html(self.raw))
        )

    def _header(self, attribute: str, name: str) -> Optional[str]:
        return self._memoized(
            attribute, lambda: self._headers.get_header(self.raw.content, name)
        )

    @property
    def subject(self) -> Optional[str]:
        return self._header("_subject", "Subject")

    @property
    def from_(self) -> Optional[str]:
        return self._header("_from", "From")

    @property
    def to(self) -> Optional[str]:
        return self._header("_to", "To")

    @property
    def cc(self) -> Optional[str]:
        return self._header("_cc", "Cc")

    @property
    def bcc(self) -> Optional[str]:
        return self._header("_bcc", "Bcc")

    @property
    def reply_to(self) -> Optional[str]:
        return self._header("_reply_to", "Reply-To")

    @property
    def date(self) -> Optional[datetime]:
        """Date header as a datetime"""
        return self._memoized("_date", lambda: self._headers.get_date(self.raw.content))

    @property
    def delivery_date(self) -> Optional[datetime]:
        """
        When MailHog received the message

        MailHog does not set a Delivery-Date header; its ``Created``
        timestamp serves the same purpose.
        """
        return self._memoized(
            "_delivery_date", lambda: parse_iso_timestamp(self.raw.created_at)
        )

    @property
    def attachments(self) -> List[Attachment]:
        return self._memoized("_attachments", lambda: extract_attachments(self.raw))

    def to_dict(self) -> Dict[str, Any]:
        """Decoded fields as a JSON-friendly dict"""
        return {
            "ID": self.id,
            "text": self.text,
            "html": self.html,
            "subject": self.subject,
            "from": self.from_,
            "to": self.to,
            "cc": self.cc,
            "bcc": self.bcc,
            "replyTo": self.reply_to,
            "date": self.date.isoformat() if self.date else None,
            "deliveryDate": self.delivery_date.isoformat() if self.delivery_date else None,
            "attachments": [attachment.to_dict() for attachment in self.attachments],
        }
