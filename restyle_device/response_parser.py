"""Parsing of the restyle service's HTTP response headers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

RESP_MAX_BODY = 2 * 1024 * 1024

_CONTENT_TYPE_MAX = 63
_REQUEST_ID_MAX = 63
_TEXT_MAX = 255
_LENGTH_FIELD_MAX = 31
_ULONG_MAX = (1 << 64) - 1
_U32_MASK = 0xFFFFFFFF

_STATUS_RE = re.compile(rb"HTTP/[+-]?\d+\.[+-]?\d+(?!\d)\s*([+-]?\d+)")
_ULONG_RE = re.compile(rb"\s*([+-]?)(\d+)")
_HEX_RE = re.compile(rb"\s*([+-]?)([0-9a-fA-F]*)")

Data = Union[str, bytes, bytearray, memoryview]


class HeaderParseError(ValueError):
    """Raised when a response header block cannot be accepted."""


@dataclass
class RespHeaders:
    """The response fields the device cares about."""

    status: int = 0
    content_type: str = ""
    content_length: int = 0
    x_transcript: str = ""
    x_restyled: str = ""
    x_request_id: str = ""


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _text(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _trimmed(value: bytes, limit: int) -> bytes:
    return value.strip(b" \t")[:limit]


def _parse_ulong(value: bytes) -> int:
    m = _ULONG_RE.match(value)
    if not m:
        return 0
    number = min(int(m.group(2)), _ULONG_MAX)
    if m.group(1) == b"-":
        number = -number % (1 << 64)
    return number & _U32_MASK


def _decode_bytes(data: bytes) -> bytes:
    data = data.split(b"\0", 1)[0]
    out = bytearray()
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == 0x25 and i + 2 < len(data):
            m = _HEX_RE.match(data[i + 1 : i + 3])
            value = int(m.group(2), 16) if m.group(2) else 0
            if m.group(1) == b"-":
                value = -value
            out.append(value & 0xFF)
            i += 3
        elif ch == 0x2B:
            out.append(0x20)
            i += 1
        else:
            out.append(ch)
            i += 1
    return bytes(out)


def url_decode(text: Data) -> str:
    """Decode ``%XX`` escapes and ``+`` as a space."""
    return _text(_decode_bytes(_as_bytes(text)))


def _decoded_field(value: bytes) -> str:
    return _text(_decode_bytes(_trimmed(value, _TEXT_MAX))[:_TEXT_MAX])


def parse_headers(raw: Data) -> RespHeaders:
    """Parse a status line and header block ending in an empty line.

    Raises HeaderParseError when the status line is unreadable, when
    Content-Length is missing, or when it exceeds RESP_MAX_BODY.
    """
    data = _as_bytes(raw)
    eol = data.find(b"\r\n")
    if eol < 0:
        raise HeaderParseError("no line terminator in response")
    m = _STATUS_RE.match(data)
    if not m:
        raise HeaderParseError("malformed status line")

    out = RespHeaders(status=int(m.group(1)))
    got_length = False
    pos = eol + 2
    while pos < len(data):
        end = data.find(b"\r\n", pos)
        if end < 0 or end == pos:
            break
        name, sep, value = data[pos:end].partition(b":")
        if sep:
            key = name.lower()
            if key == b"content-type":
                out.content_type = _text(_trimmed(value, _CONTENT_TYPE_MAX))
            elif key == b"content-length":
                out.content_length = _parse_ulong(_trimmed(value, _LENGTH_FIELD_MAX))
                got_length = True
            elif key == b"x-transcript":
                out.x_transcript = _decoded_field(value)
            elif key == b"x-restyled-text":
                out.x_restyled = _decoded_field(value)
            elif key == b"x-request-id":
                out.x_request_id = _text(_trimmed(value, _REQUEST_ID_MAX))
        pos = end + 2

    if not got_length:
        raise HeaderParseError("missing Content-Length")
    if out.content_length > RESP_MAX_BODY:
        raise HeaderParseError(f"Content-Length {out.content_length} exceeds {RESP_MAX_BODY}")
    return out


def is_wav(data: Union[bytes, bytearray, memoryview]) -> bool:
    """Whether the data starts with a RIFF/WAVE signature."""
    head = bytes(data[:12])
    return len(head) == 12 and head[:4] == b"RIFF" and head[8:12] == b"WAVE"