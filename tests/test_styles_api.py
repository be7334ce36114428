import json
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from restyle_device import log
from restyle_device.styles_api import (
    MAX_STYLES,
    HealthStatus,
    Style,
    StylesClient,
    StylesError,
    parse_health,
    parse_styles,
)


@pytest.fixture
def http_server():
    routes = {}

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            status, body = routes.get(self.path, (404, b"{}"))
            self.send_response(status)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, *args):
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server.server_address[1], routes
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


def test_parses_styles_list():
    body = (
        "["
        '{"id":"jesus","name":"Jesus of Nazareth"},'
        '{"id":"pirate","name":"Pirate"}'
        "]"
    )
    styles = parse_styles(body)
    assert len(styles) == 2
    assert styles[0] == Style("jesus", "Jesus of Nazareth")
    assert styles[1] == Style("pirate", "Pirate")


def test_parses_health():
    h = parse_health('{"stt":"ok","llm":"ok","tts":"down"}')
    assert h.stt_ok is True
    assert h.llm_ok is True
    assert h.tts_ok is False


def test_parses_empty_list_as_failure():
    with pytest.raises(StylesError):
        parse_styles("[]")


def test_rejects_malformed_json():
    with pytest.raises(StylesError):
        parse_styles("not json")


def test_rejects_non_array():
    with pytest.raises(StylesError):
        parse_styles('{"id":"pirate"}')


def test_skips_entries_without_id():
    body = json.dumps([{"name": "nameless"}, 7, {"id": 3}, {"id": "pirate"}])
    assert parse_styles(body) == [Style("pirate", "")]


def test_keeps_at_most_sixteen_styles():
    body = json.dumps([{"id": f"s{i}", "name": f"n{i}"} for i in range(20)])
    styles = parse_styles(body)
    assert len(styles) == MAX_STYLES
    assert styles[-1].id == f"s{MAX_STYLES - 1}"


def test_truncates_long_fields():
    body = json.dumps([{"id": "x" * 40, "name": "y" * 40}])
    style = parse_styles(body)[0]
    assert style == Style("x" * 32, "y" * 32)


def test_health_accepts_bytes_and_missing_keys():
    assert parse_health(b'{"llm":"ok"}') == HealthStatus(stt_ok=False, llm_ok=True, tts_ok=False)


def test_health_rejects_malformed_json():
    with pytest.raises(StylesError):
        parse_health("{")


def test_client_fetches_styles(http_server):
    port, routes = http_server
    routes["/v1/styles"] = (200, b'[{"id":"pirate","name":"Pirate"}]')
    client = StylesClient("127.0.0.1", port)
    assert client.fetch_styles() == [Style("pirate", "Pirate")]


def test_client_fetches_health(http_server):
    port, routes = http_server
    routes["/healthz"] = (200, b'{"stt":"ok","llm":"down","tts":"ok"}')
    client = StylesClient("127.0.0.1", port)
    assert client.fetch_health() == HealthStatus(stt_ok=True, llm_ok=False, tts_ok=True)


def test_client_non_200_raises_and_logs(http_server):
    port, _ = http_server
    lines = []
    log.set_sink(lines.append)
    try:
        with pytest.raises(StylesError):
            StylesClient("127.0.0.1", port).fetch_styles()
    finally:
        log.set_sink(None)
    assert any("http_get_fail" in line and "code=404" in line for line in lines)


def test_client_unreachable_raises():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]
    with pytest.raises(StylesError):
        StylesClient("127.0.0.1", port, timeout=1.0).fetch_health()