"""Client for the restyle endpoint: upload a recording, download the reply."""

from __future__ import annotations

import enum
import socket
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .log import LogLevel, log_line
from .response_parser import HeaderParseError, RespHeaders, parse_headers
from .wav_header import build_wav_header

RESTYLE_PATH = "/v1/restyle"
USER_AGENT = "xh-s3e-ai/0.1"

CONNECT_TIMEOUT_S = 5.0
UPLOAD_TIMEOUT_MS = 10_000
FIRST_BYTE_TIMEOUT_MS = 45_000
DOWNLOAD_STALL_MS = 10_000

_BOUNDARY_MAX = 47
_PROLOGUE_MAX = 1023
_EPILOGUE_MAX = 511
_REQUEST_HEAD_MAX = 511
_HEADER_MAX = 2047


class Milestone(enum.IntEnum):
    """Points in a request's lifecycle reported to the caller."""

    TCP_CONNECTED = 0
    UPLOAD_FLUSHED = 1
    FIRST_BYTE = 2
    DOWNLOAD_DONE = 3


MilestoneCallback = Callable[[Milestone], None]


class TransportError(Exception):
    """Raised when the exchange with the server fails."""


@dataclass
class RestyleRequest:
    """A recording to restyle."""

    style_id: str
    pcm: bytes
    request_id: str
    language: Optional[str] = "en"


@dataclass
class RestyleResult:
    """The server's reply and the elapsed time at each milestone."""

    headers: RespHeaders
    body: bytes
    t_connect_ms: int
    t_upload_ms: int
    t_first_byte_ms: int
    t_download_ms: int


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


def build_multipart(request: RestyleRequest) -> tuple[str, bytes]:
    """Return the boundary and the multipart body holding style, WAV audio and language."""
    boundary = f"XHS3E-{request.request_id}"[:_BOUNDARY_MAX]
    prologue = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="style_id"\r\n\r\n{request.style_id}\r\n'
        f"--{boundary}\r\n"
        'Content-Disposition: form-data; name="audio"; filename="utterance.wav"\r\n'
        "Content-Type: audio/wav\r\n\r\n"
    ).encode("utf-8")
    if len(prologue) > _PROLOGUE_MAX:
        log_line(LogLevel.ERROR, "net", "prologue_overflow", "pn=%d", len(prologue))
        raise ValueError(f"multipart prologue too long: {len(prologue)} bytes")
    epilogue = (
        f"\r\n--{boundary}\r\n"
        f'Content-Disposition: form-data; name="language"\r\n\r\n{request.language or "en"}\r\n'
        f"--{boundary}--\r\n"
    ).encode("utf-8")
    if len(epilogue) > _EPILOGUE_MAX:
        log_line(LogLevel.ERROR, "net", "epilogue_overflow", "en=%d", len(epilogue))
        raise ValueError(f"multipart epilogue too long: {len(epilogue)} bytes")
    pcm = bytes(request.pcm)
    return boundary, prologue + build_wav_header(len(pcm)) + pcm + epilogue


def _set_timeout(sock: socket.socket, remaining_ms: int) -> None:
    sock.settimeout(max(remaining_ms, 1) / 1000)


def _send_all(sock: socket.socket, data: bytes, deadline_ms: int) -> None:
    view = memoryview(data)
    sent = 0
    while sent < len(view):
        now = _now_ms()
        if now > deadline_ms:
            raise TransportError("upload timed out")
        _set_timeout(sock, deadline_ms - now)
        try:
            sent += sock.send(view[sent:])
        except TimeoutError:
            continue
        except OSError as exc:
            raise TransportError(f"upload failed: {exc}") from exc


def _read_headers(sock: socket.socket, deadline_ms: int) -> tuple[bytes, bytes]:
    buf = bytearray()
    while True:
        end = buf.find(b"\r\n\r\n")
        if end >= 0:
            return bytes(buf[: end + 4]), bytes(buf[end + 4 :])
        if len(buf) >= _HEADER_MAX:
            raise TransportError("response headers too large")
        now = _now_ms()
        if now > deadline_ms:
            raise TransportError("timed out waiting for response")
        _set_timeout(sock, deadline_ms - now)
        try:
            chunk = sock.recv(_HEADER_MAX - len(buf))
        except TimeoutError:
            continue
        except OSError as exc:
            raise TransportError(f"reading headers failed: {exc}") from exc
        if not chunk:
            raise TransportError("connection closed before response headers")
        buf += chunk


def _read_body(sock: socket.socket, length: int, initial: bytes) -> bytes:
    body = bytearray(initial[:length])
    last_byte_ms = _now_ms()
    while len(body) < length:
        now = _now_ms()
        if now - last_byte_ms > DOWNLOAD_STALL_MS:
            log_line(LogLevel.ERROR, "net", "dl_stall", "got=%u of=%u", len(body), length)
            raise TransportError(f"download stalled at {len(body)} of {length} bytes")
        _set_timeout(sock, last_byte_ms + DOWNLOAD_STALL_MS + 1 - now)
        try:
            chunk = sock.recv(length - len(body))
        except TimeoutError:
            continue
        except OSError:
            break
        if not chunk:
            break
        body += chunk
        last_byte_ms = _now_ms()
    return bytes(body)


class RestyleClient:
    """Posts recordings to the restyle endpoint of one server."""

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port

    def _request_head(self, boundary: str, body_len: int, request_id: str) -> bytes:
        head = (
            f"POST {RESTYLE_PATH} HTTP/1.1\r\n"
            f"Host: {self.host}:{self.port}\r\n"
            f"User-Agent: {USER_AGENT}\r\n"
            f"Content-Type: multipart/form-data; boundary={boundary}\r\n"
            f"Content-Length: {body_len}\r\n"
            f"X-Request-Id: {request_id}\r\n"
            "Connection: close\r\n"
            "\r\n"
        ).encode("utf-8")
        if len(head) > _REQUEST_HEAD_MAX:
            log_line(LogLevel.ERROR, "net", "req_line_overflow", "rn=%d", len(head))
            raise ValueError(f"request head too long: {len(head)} bytes")
        return head

    def restyle(
        self, request: RestyleRequest, on_milestone: Optional[MilestoneCallback] = None
    ) -> RestyleResult:
        """Upload ``request`` and return the complete reply.

        Raises TransportError when connecting, uploading, waiting for or
        downloading the reply fails, or the reply headers are unusable.
        """
        notify = on_milestone or (lambda milestone: None)
        t0 = _now_ms()
        try:
            sock = socket.create_connection((self.host, self.port), timeout=CONNECT_TIMEOUT_S)
        except OSError as exc:
            log_line(LogLevel.ERROR, "net", "connect_fail", "host=%s", self.host)
            raise TransportError(f"connect to {self.host}:{self.port} failed: {exc}") from exc

        with sock:
            t_connect = _now_ms() - t0
            notify(Milestone.TCP_CONNECTED)

            boundary, body = build_multipart(request)
            head = self._request_head(boundary, len(body), request.request_id)
            _send_all(sock, head + body, _now_ms() + UPLOAD_TIMEOUT_MS)
            t_upload = _now_ms() - t0
            notify(Milestone.UPLOAD_FLUSHED)

            raw_headers, leftover = _read_headers(sock, _now_ms() + FIRST_BYTE_TIMEOUT_MS)
            t_first_byte = _now_ms() - t0
            notify(Milestone.FIRST_BYTE)

            try:
                headers = parse_headers(raw_headers)
            except HeaderParseError as exc:
                raise TransportError(f"bad response headers: {exc}") from exc

            payload = _read_body(sock, headers.content_length, leftover)

        t_download = _now_ms() - t0
        notify(Milestone.DOWNLOAD_DONE)
        if len(payload) != headers.content_length:
            raise TransportError(
                f"incomplete body: {len(payload)} of {headers.content_length} bytes"
            )
        return RestyleResult(headers, payload, t_connect, t_upload, t_first_byte, t_download)