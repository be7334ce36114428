import socket
import threading

import pytest

from restyle_device.http_client import (
    Milestone,
    RestyleClient,
    RestyleRequest,
    TransportError,
    build_multipart,
)
from restyle_device.wav_header import build_wav_header


class _Server:
    """Accepts one connection, reads a full request, sends a canned reply."""

    def __init__(self, response: bytes) -> None:
        self._listener = socket.create_server(("127.0.0.1", 0))
        self.port = self._listener.getsockname()[1]
        self.response = response
        self.head = b""
        self.body = b""
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        conn, _ = self._listener.accept()
        with conn:
            data = b""
            while b"\r\n\r\n" not in data:
                chunk = conn.recv(65536)
                if not chunk:
                    return
                data += chunk
            head, _, body = data.partition(b"\r\n\r\n")
            length = 0
            for line in head.split(b"\r\n"):
                name, _, value = line.partition(b":")
                if name.lower() == b"content-length":
                    length = int(value)
            while len(body) < length:
                chunk = conn.recv(65536)
                if not chunk:
                    break
                body += chunk
            self.head, self.body = head, body
            conn.sendall(self.response)

    def close(self) -> None:
        self._thread.join(timeout=5)
        self._listener.close()


@pytest.fixture
def serve():
    servers = []

    def start(response: bytes) -> _Server:
        server = _Server(response)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


def _request(**overrides) -> RestyleRequest:
    fields = dict(
        style_id="pirate",
        pcm=bytes(range(200)),
        request_id="00000000-0000-4000-8000-000000000000",
    )
    fields.update(overrides)
    return RestyleRequest(**fields)


def _wav_response(payload: bytes, content_type: str = "audio/wav") -> bytes:
    return (
        f"HTTP/1.1 200 OK\r\nContent-Type: {content_type}\r\n"
        f"Content-Length: {len(payload)}\r\n\r\n"
    ).encode() + payload


def test_multipart_layout():
    req = _request()
    boundary, body = build_multipart(req)
    assert boundary == "XHS3E-" + req.request_id
    assert body.startswith(f"--{boundary}\r\n".encode())
    assert body.endswith(f"--{boundary}--\r\n".encode())
    assert b'name="style_id"\r\n\r\npirate\r\n' in body
    assert b'filename="utterance.wav"\r\nContent-Type: audio/wav\r\n\r\n' in body
    assert build_wav_header(len(req.pcm)) + req.pcm in body


def test_multipart_language_defaults_to_en():
    _, body = build_multipart(_request(language=None))
    assert b'name="language"\r\n\r\nen\r\n' in body


def test_multipart_boundary_is_capped():
    boundary, _ = build_multipart(_request(request_id="r" * 80))
    assert len(boundary) == 47
    assert boundary.startswith("XHS3E-rrr")


def test_multipart_rejects_oversize_style_id():
    with pytest.raises(ValueError):
        build_multipart(_request(style_id="s" * 2000))


def test_restyle_round_trip(serve):
    payload = build_wav_header(4) + b"\x01\x02\x03\x04"
    server = serve(_wav_response(payload))
    req = _request()
    milestones = []
    result = RestyleClient("127.0.0.1", server.port).restyle(req, milestones.append)

    assert milestones == list(Milestone)
    assert result.body == payload
    assert result.headers.status == 200
    assert result.headers.content_type == "audio/wav"
    assert result.t_connect_ms <= result.t_upload_ms <= result.t_first_byte_ms <= result.t_download_ms

    boundary, body = build_multipart(req)
    assert server.head.startswith(b"POST /v1/restyle HTTP/1.1\r\n")
    assert f"Content-Length: {len(body)}".encode() in server.head
    assert f"X-Request-Id: {req.request_id}".encode() in server.head
    assert f"boundary={boundary}".encode() in server.head
    assert b"Connection: close" in server.head
    assert server.body == body


def test_restyle_missing_content_length(serve):
    server = serve(b"HTTP/1.1 200 OK\r\nContent-Type: audio/wav\r\n\r\n")
    milestones = []
    with pytest.raises(TransportError):
        RestyleClient("127.0.0.1", server.port).restyle(_request(), milestones.append)
    assert milestones == [Milestone.TCP_CONNECTED, Milestone.UPLOAD_FLUSHED, Milestone.FIRST_BYTE]


def test_restyle_truncated_body(serve):
    full = _wav_response(b"abcdefgh")
    server = serve(full[:-3])
    milestones = []
    with pytest.raises(TransportError):
        RestyleClient("127.0.0.1", server.port).restyle(_request(), milestones.append)
    assert milestones[-1] is Milestone.DOWNLOAD_DONE


def test_restyle_closed_before_headers(serve):
    server = serve(b"")
    with pytest.raises(TransportError):
        RestyleClient("127.0.0.1", server.port).restyle(_request())


def test_restyle_connect_refused():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    milestones = []
    with pytest.raises(TransportError):
        RestyleClient("127.0.0.1", port).restyle(_request(), milestones.append)
    assert milestones == []