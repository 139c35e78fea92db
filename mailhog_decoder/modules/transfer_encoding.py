"""
Transfer Encoding Module
Applies Content-Transfer-Encoding semantics on top of the quoted-printable
codec and the charset transcoder

Only ``base64`` and ``quoted-printable`` define a transformation. ``7bit``,
``8bit`` and ``binary`` bodies are not encoded, and ``x-`` tokens name
encodings we know nothing about, so those (and anything else) are passed
through unchanged.
"""

import base64
import binascii
import logging
import re
from typing import Optional

from . import quoted_printable
from .charset import DEFAULT_TRANSCODER, CharsetTranscoder

logger = logging.getLogger(__name__)

BASE64 = "base64"
QUOTED_PRINTABLE = "quoted-printable"

BASE64_NOISE_PATTERN = re.compile(r"[^A-Za-z0-9+/]")


def _normalize(transfer_encoding: Optional[str]) -> str:
    return (transfer_encoding or "").strip().lower()


def b64decode_lenient(text: str) -> bytes:
    """
    Decode base64 the forgiving way mail clients do

    Whitespace and other characters outside the alphabet are ignored, the
    URL-safe alphabet is accepted and missing padding is restored. A
    dangling final character that cannot form a byte is dropped.
    """
    cleaned = BASE64_NOISE_PATTERN.sub(
        "", (text or "").replace("-", "+").replace("_", "/")
    )
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned)
    except binascii.Error:  # pragma: no cover - input is normalized above
        logger.debug("Discarding undecodable base64 payload")
        return b""


def hard_wrap(text: str, line_length: int) -> str:
    """Split text into CRLF-separated lines of at most line_length chars"""
    return "\r\n".join(
        text[offset:offset + line_length]
        for offset in range(0, len(text), line_length)
    )


def decode_bytes(raw: str, transfer_encoding: Optional[str] = None) -> bytes:
    """
    Reverse the transfer encoding without any charset conversion

    Used for attachment payloads, which are usually binary.

    Args:
        raw: Encoded body
        transfer_encoding: Content-Transfer-Encoding value

    Returns:
        Payload bytes. Bodies without a known transfer encoding are
        returned as their latin-1 bytes (the MailHog API hands out 8bit
        content one character per byte).
    """
    encoding = _normalize(transfer_encoding)
    if encoding == BASE64:
        return b64decode_lenient(raw)
    if encoding == QUOTED_PRINTABLE:
        return quoted_printable.decode(raw)
    return (raw or "").encode("latin-1", errors="replace")


class TransferCodec:
    """
    Decodes and encodes MIME bodies according to their transfer encoding

    The codec owns a CharsetTranscoder, so the policy for unknown charsets
    (raise or fall back) is chosen by whoever builds the codec.
    """

    def __init__(self, transcoder: Optional[CharsetTranscoder] = None):
        self.transcoder = transcoder or DEFAULT_TRANSCODER

    def decode(
        self,
        raw: str,
        transfer_encoding: Optional[str] = None,
        charset: Optional[str] = None
    ) -> str:
        """
        Decode a body or encoded-word payload into text

        Args:
            raw: Encoded string
            transfer_encoding: base64 | quoted-printable (case-insensitive),
                anything else means "not encoded"
            charset: Charset of the decoded bytes (default: UTF-8)

        Returns:
            Decoded text

        Raises:
            UnsupportedCharsetError: If the transcoder rejects the charset

        Example:
            >>> TransferCodec().decode("=C3=BC=C3=A4=C3=B6", "quoted-printable")
            'üäö'
        """
        encoding = _normalize(transfer_encoding)
        if encoding in (BASE64, QUOTED_PRINTABLE):
            return self.transcoder.decode(decode_bytes(raw, encoding), charset)
        return raw

    def encode(
        self,
        text: str,
        transfer_encoding: Optional[str] = None,
        charset: Optional[str] = None,
        line_length: Optional[int] = quoted_printable.DEFAULT_LINE_LENGTH
    ) -> str:
        """
        Encode text into base64 or quoted-printable

        Args:
            text: Text to encode
            transfer_encoding: base64 | quoted-printable; anything else
                leaves the text as it is
            charset: Charset the text is converted to first (default: UTF-8)
            line_length: Maximum line length, 0 or None disables wrapping

        Returns:
            Encoded (and wrapped) string

        Example:
            >>> TransferCodec().encode("üäö", "base64")
            'w7zDpMO2'
        """
        encoding = _normalize(transfer_encoding)
        output = text
        if encoding in (BASE64, QUOTED_PRINTABLE):
            data = self.transcoder.encode(text, charset)
            if encoding == QUOTED_PRINTABLE:
                output = quoted_printable.encode(data)
                if line_length:
                    return quoted_printable.wrap(output, line_length)
                return output
            output = base64.b64encode(data).decode("ascii")
        if line_length:
            return hard_wrap(output, line_length)
        return output


DEFAULT_CODEC = TransferCodec()


def decode(
    raw: str,
    transfer_encoding: Optional[str] = None,
    charset: Optional[str] = None
) -> str:
    """Decode with the default (strict) codec, see TransferCodec.decode"""
    return DEFAULT_CODEC.decode(raw, transfer_encoding, charset)


def encode(
    text: str,
    transfer_encoding: Optional[str] = None,
    charset: Optional[str] = None,
    line_length: Optional[int] = quoted_printable.DEFAULT_LINE_LENGTH
) -> str:
    """Encode with the default (strict) codec, see TransferCodec.encode"""
    return DEFAULT_CODEC.encode(text, transfer_encoding, charset, line_length)
