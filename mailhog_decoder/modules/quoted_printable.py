"""
Quoted-Printable Codec Module
Byte-level encoding, decoding and soft line wrapping for quoted-printable text

PATTERN RECOGNITION: This is the same three-step shape the stdlib quopri
module has (encode, decode, wrap), but it works on MailHog bodies that were
already split out of the MIME tree, so it operates on plain strings instead
of file objects.

SECURITY STORY: Captured mail is untrusted input. Nothing in this module
raises on malformed data: broken escape sequences are kept as literal
characters and decoding continues.
"""

import re
from typing import Union

DEFAULT_LINE_LENGTH = 76

TAB = 0x09
LF = 0x0A
CR = 0x0D
SPACE = 0x20

# Trailing whitespace on a line is not significant in quoted-printable
TRAILING_WHITESPACE_PATTERN = re.compile(r"[\t ]+(?=\r|\n|\Z)")
SOFT_LINE_BREAK_PATTERN = re.compile(r"=(?:\r?\n|\Z)")
HEX_ESCAPE_PATTERN = re.compile(r"=([0-9A-Fa-f]{2})")

# Patterns used by wrap(), all anchored to the end of the candidate line
TAIL_NEWLINE_PATTERN = re.compile(r"\n[^\r\n]*\Z")
TAIL_BREAKABLE_PATTERN = re.compile(r"[ \t.,!?][^ \t.,!?]*\Z")
TAIL_ESCAPE_START_PATTERN = re.compile(r"=[0-9a-f]{0,2}\Z", re.IGNORECASE)
TAIL_PARTIAL_ESCAPE_PATTERN = re.compile(r"=[0-9a-f]?\Z", re.IGNORECASE)
TAIL_ESCAPE_PATTERN = re.compile(r"=([0-9a-f]{2})\Z", re.IGNORECASE)
ESCAPE_RUN_PATTERN = re.compile(r"(?:=[0-9a-f]{2}){1,4}", re.IGNORECASE)


def _is_literal(byte: int) -> bool:
    """Return True for bytes that RFC 2045 lets through unescaped"""
    return (
        byte in (TAB, LF, CR)
        or 0x20 <= byte <= 0x3C
        or 0x3E <= byte <= 0x7E
    )


def encode(data: Union[bytes, str]) -> str:
    """
    Encode bytes into a quoted-printable string (without line wrapping)

    A SPACE or TAB is escaped when it ends the input or sits right before
    a CR or LF, since trailing whitespace is stripped by decoders.

    Args:
        data: Bytes to encode. Strings are encoded as UTF-8 first.

    Returns:
        Quoted-printable encoded string

    Example:
        >>> encode("üäö")
        '=C3=BC=C3=A4=C3=B6'
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    last_index = len(data) - 1
    chunks = []
    for index, byte in enumerate(data):
        trailing_whitespace = byte in (SPACE, TAB) and (
            index == last_index or data[index + 1] in (LF, CR)
        )
        if _is_literal(byte) and not trailing_whitespace:
            chunks.append(chr(byte))
        else:
            chunks.append("=%02X" % byte)
    return "".join(chunks)


def _literal_bytes(text: str) -> bytes:
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError:
        # Characters outside the single-byte range keep their UTF-8 form
        return b"".join(
            char.encode("latin-1") if ord(char) < 0x100
            else char.encode("utf-8", errors="replace")
            for char in text
        )


def decode(text: str) -> bytes:
    """
    Decode a quoted-printable string into bytes

    Soft line breaks are removed, ``=XX`` escapes become the byte they name
    and every other character stands for itself. An ``=`` that is not
    followed by two hex digits is kept literally.

    Args:
        text: Quoted-printable encoded string

    Returns:
        Decoded bytes
    """
    text = TRAILING_WHITESPACE_PATTERN.sub("", text or "")
    text = SOFT_LINE_BREAK_PATTERN.sub("", text)

    decoded = bytearray()
    position = 0
    for match in HEX_ESCAPE_PATTERN.finditer(text):
        decoded += _literal_bytes(text[position:match.start()])
        decoded.append(int(match.group(1), 16))
        position = match.end()
    decoded += _literal_bytes(text[position:])
    return bytes(decoded)


def _back_off_escapes(line: str, remaining: int) -> str:
    """
    Move a trailing multi-byte escape run to the next line

    Walks back over ``=XX`` escapes of UTF-8 continuation bytes until the
    lead byte (>= 0xC0) has been pushed off too. Stops at the first ASCII
    escape, and never empties a line made only of a short escape run.
    """
    while (
        len(line) > 3
        and len(line) < remaining
        and not ESCAPE_RUN_PATTERN.fullmatch(line)
    ):
        match = TAIL_ESCAPE_PATTERN.search(line)
        if not match:
            break
        code = int(match.group(1), 16)
        if code < 0x80:
            break
        line = line[:-3]
        if code >= 0xC0:
            break
    return line


def wrap(text: str, line_length: int = DEFAULT_LINE_LENGTH) -> str:
    """
    Insert soft line breaks (``=\\r\\n``) into a quoted-printable string

    Lines are cut so that they never exceed ``line_length`` characters.
    Existing hard line breaks are kept, escape sequences are never cut in
    half and UTF-8 escape runs are kept together where possible. When the
    last third of a line holds whitespace or punctuation the break goes
    right after it.

    Args:
        text: Quoted-printable encoded string
        line_length: Maximum allowed length of an output line

    Returns:
        Soft-wrapped quoted-printable string
    """
    text = text or ""
    max_length = line_length or DEFAULT_LINE_LENGTH

    if len(text) <= max_length:
        return text

    line_margin = max_length // 3
    length = len(text)
    position = 0
    lines = []

    while position < length:
        line = text[position:position + max_length]

        crlf_index = line.find("\r\n")
        if crlf_index != -1:
            line = line[:crlf_index + 2]
            lines.append(line)
            position += len(line)
            continue

        if line.endswith("\n"):
            lines.append(line)
            position += len(line)
            continue

        tail = line[-line_margin:] if line_margin else line
        match = TAIL_NEWLINE_PATTERN.search(tail)
        if match:
            # Cut right after the last hard line break
            line = line[:len(line) - (len(match.group()) - 1)]
            lines.append(line)
            position += len(line)
            continue

        match = None
        if len(line) > max_length - line_margin:
            match = TAIL_BREAKABLE_PATTERN.search(tail)
        if match:
            line = line[:len(line) - (len(match.group()) - 1)]
        elif TAIL_ESCAPE_START_PATTERN.search(line):
            partial = TAIL_PARTIAL_ESCAPE_PATTERN.search(line)
            if partial:
                line = line[:partial.start()]
            line = _back_off_escapes(line, length - position)

        if position + len(line) < length and not line.endswith("\n"):
            if len(line) == max_length and TAIL_ESCAPE_PATTERN.search(line):
                line = line[:-3]
            elif len(line) == max_length:
                line = line[:-1]
            if not line:
                # Line lengths below one escape unit; keep moving forward
                line = text[position:position + max_length]
            position += len(line)
            line += "=\r\n"
        else:
            position += len(line)

        lines.append(line)

    return "".join(lines)
