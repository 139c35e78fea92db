"""
Charset Transcoding Module
Converts between named character sets and Python text

The actual conversion tables are provided by a *charset converter*. The
default one is backed by Python's codec registry; tests and callers with
special needs can inject their own.
"""

import logging
import re
from typing import Optional

from ..utils.logging_utils import sanitize_for_logging


logger = logging.getLogger(__name__)

UTF8_PATTERN = re.compile(r"utf-?8", re.IGNORECASE)


class UnsupportedCharsetError(LookupError):
    """Raised when no converter is known for a charset name"""

    def __init__(self, charset: str):
        super().__init__(f"Unsupported charset: {charset}")
        self.charset = charset


def is_utf8(charset: Optional[str]) -> bool:
    """True when the charset is empty or names UTF-8 (utf-8 / utf8)"""
    return not charset or UTF8_PATTERN.fullmatch(charset.strip()) is not None


class CodecRegistryConverter:
    """
    Charset converter backed by the Python codec registry

    Undecodable bytes become U+FFFD and unencodable characters become "?",
    so only an unknown charset name can make a conversion fail (with the
    LookupError raised by the codec registry).
    """

    def decode(self, data: bytes, charset: str) -> str:
        return data.decode(charset, errors="replace")

    def encode(self, text: str, charset: str) -> bytes:
        return text.encode(charset, errors="replace")


class CharsetTranscoder:
    """
    Decodes bytes into text and encodes text into bytes for a named charset

    MAINTENANCE WISDOM: Whether an unknown charset is fatal is a policy
    decision of the caller. A transcoder built without ``fallback_charset``
    raises UnsupportedCharsetError; with one, it logs a warning and converts
    using the fallback instead.
    """

    def __init__(self, converter=None, fallback_charset: Optional[str] = None):
        """
        Initialize transcoder

        Args:
            converter: Object with ``decode(data, charset)`` and
                ``encode(text, charset)`` methods raising LookupError for
                unknown charsets (default: CodecRegistryConverter)
            fallback_charset: Charset used when the requested one is unknown
        """
        self.converter = converter or CodecRegistryConverter()
        self.fallback_charset = fallback_charset

    def decode(self, data: bytes, charset: Optional[str] = None) -> str:
        """
        Convert bytes in the given charset to text

        Raises:
            UnsupportedCharsetError: If the charset is unknown and no
                fallback charset is configured
        """
        if is_utf8(charset):
            return data.decode("utf-8", errors="replace")
        try:
            return self.converter.decode(data, charset)
        except LookupError as e:
            return self._fallback(charset, e).decode(data, self.fallback_charset)

    def encode(self, text: str, charset: Optional[str] = None) -> bytes:
        """
        Convert text to bytes in the given charset (UTF-8 by default)

        Raises:
            UnsupportedCharsetError: If the charset is unknown and no
                fallback charset is configured
        """
        if is_utf8(charset):
            return text.encode("utf-8", errors="replace")
        try:
            return self.converter.encode(text, charset)
        except LookupError as e:
            return self._fallback(charset, e).encode(text, self.fallback_charset)

    def _fallback(self, charset: str, error: LookupError) -> "CharsetTranscoder":
        if not self.fallback_charset:
            raise UnsupportedCharsetError(charset) from error
        logger.warning(
            "Unsupported charset '%s', falling back to %s",
            sanitize_for_logging(charset, max_length=64),
            self.fallback_charset,
        )
        # The fallback itself must not recurse into another fallback
        return CharsetTranscoder(self.converter)


DEFAULT_TRANSCODER = CharsetTranscoder()
