"""
Header Decoder Module
Decodes RFC 2047 encoded words in MailHog header values

PATTERN RECOGNITION: An encoded word looks like ``=?charset?B?data?=`` or
``=?charset?Q?data?=``. Each one is decoded on its own with the transfer
codec and substituted in place; text between encoded words is kept as is.
"""

import logging
import re
from datetime import datetime
from typing import Optional

from .message_data import Part
from .transfer_encoding import BASE64, DEFAULT_CODEC, QUOTED_PRINTABLE, TransferCodec
from ..utils.logging_utils import sanitize_for_logging
from ..utils.timestamps import parse_mail_date

logger = logging.getLogger(__name__)

ENCODED_WORD_PATTERN = re.compile(r"=\?([^?]+)\?([BbQq])\?([^?]+)\?=")

WORD_ENCODINGS = {"B": BASE64, "Q": QUOTED_PRINTABLE}


class HeaderDecoder:
    """Decodes header values of MailHog message parts"""

    def __init__(self, codec: Optional[TransferCodec] = None):
        self.codec = codec or DEFAULT_CODEC

    def _decode_word(self, match: re.Match) -> str:
        charset, letter, data = match.groups()
        encoding = WORD_ENCODINGS[letter.upper()]
        if encoding == QUOTED_PRINTABLE:
            # RFC 2047 section 4.2: "_" stands for a space in Q-encoded words
            data = data.replace("_", "=20")
        return self.codec.decode(data, encoding, charset)

    def decode_header_value(self, raw: Optional[str]) -> str:
        """
        Decode every encoded word in a raw header value

        Args:
            raw: Raw header value

        Returns:
            Header value with all encoded words decoded

        Raises:
            UnsupportedCharsetError: If an encoded word names a charset the
                codec's transcoder rejects

        Example:
            >>> HeaderDecoder().decode_header_value("=?UTF-8?B?5pel5pys?= <cc@example.org>")
            '日本 <cc@example.org>'
        """
        if not raw:
            return ""
        return ENCODED_WORD_PATTERN.sub(self._decode_word, raw)

    def get_header(self, part: Part, name: str) -> Optional[str]:
        """
        Decoded first value of a header

        Returns:
            Decoded value, None if the header is missing or has no values
        """
        value = part.first_header(name)
        if value is None:
            return None
        return self.decode_header_value(value)

    def get_date(self, part: Part) -> Optional[datetime]:
        """
        Date header parsed as a timestamp

        Returns:
            Parsed datetime, None if the header is missing or unparseable
        """
        value = part.first_header("Date")
        if not value:
            return None
        parsed = parse_mail_date(value)
        if parsed is None:
            logger.debug("Unparseable Date header: %s", sanitize_for_logging(value))
        return parsed


DEFAULT_HEADER_DECODER = HeaderDecoder()


def decode_header_value(raw: Optional[str]) -> str:
    """Decode encoded words with the default (strict) header decoder"""
    return DEFAULT_HEADER_DECODER.decode_header_value(raw)
