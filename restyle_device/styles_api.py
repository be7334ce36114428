"""Style catalogue and health checks of the restyle service."""

from __future__ import annotations

import http.client
import json
from dataclasses import dataclass
from typing import Any, Union

from .log import LogLevel, log_line

MAX_STYLES = 16
_FIELD_MAX = 32
_STYLES_BODY_MAX = 2047
_HEALTH_BODY_MAX = 255

Body = Union[str, bytes, bytearray]


class StylesError(Exception):
    """Raised when a styles or health response cannot be obtained or read."""


@dataclass(frozen=True)
class Style:
    """One selectable speaking style."""

    id: str
    name: str


@dataclass(frozen=True)
class HealthStatus:
    """Readiness of the service's speech, language and voice stages."""

    stt_ok: bool = False
    llm_ok: bool = False
    tts_ok: bool = False


def _load(body: Body) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise StylesError(f"malformed JSON: {exc}") from exc


def _str_field(obj: Any, key: str) -> str:
    value = obj.get(key) if isinstance(obj, dict) else None
    return value if isinstance(value, str) else ""


def parse_styles(body: Body) -> list[Style]:
    """Read a JSON array of ``{"id", "name"}`` objects, keeping at most 16.

    Entries without an id are skipped; an empty result is an error.
    """
    doc = _load(body)
    if not isinstance(doc, list):
        raise StylesError("styles body is not a JSON array")
    styles: list[Style] = []
    for item in doc:
        if len(styles) >= MAX_STYLES:
            break
        style_id = _str_field(item, "id")
        if not style_id:
            continue
        styles.append(Style(style_id[:_FIELD_MAX], _str_field(item, "name")[:_FIELD_MAX]))
    if not styles:
        raise StylesError("no styles in response")
    return styles


def parse_health(body: Body) -> HealthStatus:
    """Read a health document; a stage is healthy when its value is ``"ok"``."""
    doc = _load(body)
    return HealthStatus(
        stt_ok=_str_field(doc, "stt") == "ok",
        llm_ok=_str_field(doc, "llm") == "ok",
        tts_ok=_str_field(doc, "tts") == "ok",
    )


class StylesClient:
    """Fetches the style list and service health over HTTP."""

    def __init__(self, host: str, port: int, timeout: float = 5.0) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def _get(self, path: str, limit: int) -> bytes:
        conn = http.client.HTTPConnection(self.host, self.port, timeout=self.timeout)
        try:
            conn.request("GET", path)
            response = conn.getresponse()
            code = response.status
            body = response.read()
        except (OSError, http.client.HTTPException) as exc:
            log_line(LogLevel.WARN, "net", "http_get_fail", "path=%s code=%d", path, -1)
            raise StylesError(f"GET {path} failed: {exc}") from exc
        finally:
            conn.close()
        if code != 200:
            log_line(LogLevel.WARN, "net", "http_get_fail", "path=%s code=%d", path, code)
            raise StylesError(f"GET {path} returned {code}")
        return body[:limit]

    def fetch_styles(self) -> list[Style]:
        """GET /v1/styles and parse it."""
        return parse_styles(self._get("/v1/styles", _STYLES_BODY_MAX))

    def fetch_health(self) -> HealthStatus:
        """GET /healthz and parse it."""
        return parse_health(self._get("/healthz", _HEALTH_BODY_MAX))