"""
Message Data Model
Dataclasses for MailHog message records and the values decoded from them
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .transfer_encoding import decode_bytes


def _normalize_headers(raw_headers: Optional[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """MailHog sends header values as lists; tolerate bare strings too"""
    headers: Dict[str, List[str]] = {}
    for name, values in (raw_headers or {}).items():
        if values is None:
            headers[name] = []
        elif isinstance(values, str):
            headers[name] = [values]
        else:
            headers[name] = [str(value) for value in values]
    return headers


@dataclass(frozen=True)
class Part:
    """
    One MIME part as delivered by MailHog

    Header names keep the exact capitalization used by MailHog
    (``Content-Type``, ``Content-Transfer-Encoding``, ...), and lookups are
    case-sensitive.
    """
    headers: Dict[str, List[str]] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Part":
        """Build a Part from the MailHog ``{"Headers": ..., "Body": ...}`` shape"""
        data = data or {}
        return cls(
            headers=_normalize_headers(data.get("Headers")),
            body=data.get("Body") or ""
        )

    def first_header(self, name: str) -> Optional[str]:
        """Raw first value of a header, None if missing or empty"""
        values = self.headers.get(name)
        if not values:
            return None
        return values[0]


@dataclass(frozen=True)
class RawMessage:
    """
    Unprocessed record of one captured email

    ``content`` is the top-level part; ``mime_parts`` holds the parts of a
    multipart message in their original order (empty otherwise).
    """
    id: str
    created_at: str
    content: Part
    mime_parts: List[Part] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawMessage":
        """
        Build a RawMessage from a MailHog API message object

        Example:
            >>> RawMessage.from_dict({"ID": "1", "Created": "", "Content": {}}).mime_parts
            []
        """
        mime = data.get("MIME") or {}
        return cls(
            id=str(data.get("ID") or ""),
            created_at=data.get("Created") or "",
            content=Part.from_dict(data.get("Content")),
            mime_parts=[Part.from_dict(part) for part in mime.get("Parts") or []]
        )

    @property
    def parts(self) -> List[Part]:
        """Content part first, followed by the multipart parts"""
        return [self.content, *self.mime_parts]


@dataclass(frozen=True)
class DecodedContent:
    """Decoded body of the part that matched a content-type lookup"""
    mime_type: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.mime_type, "content": self.text}


@dataclass(frozen=True)
class Attachment:
    """
    Attachment found in a multipart message

    The body stays transfer-encoded; use ``decode_body`` to get the bytes.
    """
    name: str
    mime_type: str
    transfer_encoding: str
    raw_body: str

    def decode_body(self) -> bytes:
        """Payload bytes with the transfer encoding reversed"""
        return decode_bytes(self.raw_body, self.transfer_encoding)

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "type": self.mime_type,
            "encoding": self.transfer_encoding,
            "Body": self.raw_body,
        }
