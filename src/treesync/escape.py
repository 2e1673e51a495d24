"""Binary-safe escaping of file contents embedded in textual tree documents.

Four bytes carry meaning in the textual format and never appear raw in
escaped output: NUL, the escape byte itself (0x01), carriage return and
0xFE. Each is written as ``ESCAPE`` followed by the byte plus one.
"""

from __future__ import annotations

import re

ESCAPE = 0x01
UNSAFE_BYTES = frozenset({0x00, ESCAPE, 0x0D, 0xFE})

_UNSAFE_RE = re.compile(b"[\x00\x01\r\xfe]")
# A trailing escape byte has no partner and is left alone
_ESCAPED_RE = re.compile(b"\x01(.)", re.DOTALL)


def needs_escaping(byte: int) -> bool:
    """Check whether a single byte value must be escaped."""
    return byte in UNSAFE_BYTES


def encode_binary(data: bytes) -> bytes:
    """Escape every unsafe byte in *data*."""
    return _UNSAFE_RE.sub(lambda m: bytes((ESCAPE, m.group()[0] + 1)), data)


def decode_binary(data: bytes) -> bytes:
    """Reverse :func:`encode_binary`.

    Truncated input ending in a lone escape byte decodes to that byte.
    """
    return _ESCAPED_RE.sub(lambda m: bytes(((m.group(1)[0] - 1) & 0xFF,)), data)


def bytes_to_text(data: bytes) -> str:
    """Escape *data* and map each resulting byte to one code point."""
    return encode_binary(data).decode("latin-1")


def text_to_bytes(text: str) -> bytes:
    """Inverse of :func:`bytes_to_text`."""
    return decode_binary(text.encode("latin-1"))
