"""Screen layout for the 128x64 status display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .app_state import AppState

_MASK = 0xFFFFFFFF
_SPINNER_FRAMES = ("-", "\\", "|", "/", "-", "\\", "|", "/", "")
_SPINNER_FRAME_MS = 150
_OVERLAY_MS = 1000
_STATE_WORDS = {
    AppState.IDLE: "READY",
    AppState.UPLOADING: "SENDING",
    AppState.WAITING: "THINKING",
    AppState.DOWNLOADING: "RECVING",
    AppState.PLAYING: "PLAYING",
    AppState.ERROR: "ERROR",
    AppState.NO_WIFI: "NO WIFI",
}


@dataclass
class UiModel:
    """Everything the screen shows."""

    state: AppState = AppState.IDLE
    style_name: str = ""
    wifi_ok: bool = False
    mic_rms: int = 0
    out_rms: int = 0
    bytes_done: int = 0
    bytes_total: int = 0
    volume_x10: int = 6
    now_ms: int = 0
    vol_changed_ms: int = 0
    record_started_ms: int = 0
    health_spinner_started_ms: int = 0
    error_code: str = ""


class Display(Protocol):
    def clear(self) -> None: ...
    def show(self) -> None: ...
    def text(self, x: int, y: int, size: int, s: str) -> None: ...
    def rect(self, x: int, y: int, w: int, h: int, filled: bool) -> None: ...
    def hbar(self, x: int, y: int, w: int, h: int, fill: int) -> None: ...


class RecordingDisplay:
    """In-memory display that records drawing operations per shown frame."""

    WIDTH = 128
    HEIGHT = 64

    def __init__(self) -> None:
        self.ops: list[tuple] = []
        self.frames: list[tuple[tuple, ...]] = []

    def clear(self) -> None:
        self.ops = []

    def show(self) -> None:
        self.frames.append(tuple(self.ops))

    def text(self, x: int, y: int, size: int, s: str) -> None:
        self.ops.append(("text", x, y, size, s))

    def rect(self, x: int, y: int, w: int, h: int, filled: bool) -> None:
        self.ops.append(("rect", x, y, w, h, filled))

    def hbar(self, x: int, y: int, w: int, h: int, fill: int) -> None:
        self.ops.append(("hbar", x, y, w, h, fill))


def _elapsed(now: int, since: int) -> int:
    return (now - since) & _MASK


def rms_to_fill(rms: int) -> int:
    """Map an RMS level (0..65535) to a 0..255 bar fill on a log-like scale."""
    if rms < 50:
        return 0
    steps = 0
    while rms > 50 and steps < 20:
        rms = rms * 7 // 10
        steps += 1
    return steps * 255 // 20


def _center_size2(display: Display, y: int, s: str) -> None:
    s = s[:10]
    display.text(max(0, (128 - len(s) * 12) // 2), y, 2, s)


def _draw_style(display: Display, name: str) -> None:
    if name:
        display.text(0, 0, 2, name[:10])


def _draw_progress(display: Display, done: int, total: int) -> None:
    if total == 0:
        return
    display.hbar(4, 36, 120, 8, (done * 255 // total) & 0xFF)


def _draw_vu(display: Display, rms: int) -> None:
    display.hbar(4, 36, 120, 8, rms_to_fill(rms))


def _draw_sweeper(display: Display, now_ms: int) -> None:
    display.rect(4 + (now_ms // 20) % 112, 36, 8, 8, True)


def _maybe_vol_overlay(display: Display, m: UiModel) -> None:
    if _elapsed(m.now_ms, m.vol_changed_ms) >= _OVERLAY_MS:
        return
    _center_size2(display, 48, f"vol {m.volume_x10}/10")


def _maybe_spinner(display: Display, m: UiModel) -> None:
    if m.state is not AppState.IDLE or m.health_spinner_started_ms == 0:
        return
    if _elapsed(m.now_ms, m.vol_changed_ms) < _OVERLAY_MS:
        return
    frame = _elapsed(m.now_ms, m.health_spinner_started_ms) // _SPINNER_FRAME_MS
    if frame >= len(_SPINNER_FRAMES) or not _SPINNER_FRAMES[frame]:
        return
    display.text(116, 48, 2, _SPINNER_FRAMES[frame])


def render_ui(model: UiModel, display: Display) -> None:
    """Draw one full frame of ``model`` onto ``display``."""
    display.clear()
    state = model.state

    if state is not AppState.NO_WIFI:
        _draw_style(display, model.style_name or "")

    if state is AppState.RECORDING:
        secs = _elapsed(model.now_ms, model.record_started_ms) // 1000
        word = f"REC {secs // 60:02d}:{secs % 60:02d}"
    else:
        word = _STATE_WORDS[state]
    _center_size2(display, 16, word)

    if state is AppState.RECORDING:
        _draw_vu(display, model.mic_rms)
    elif state is AppState.PLAYING:
        _draw_vu(display, model.out_rms)
    elif state in (AppState.UPLOADING, AppState.DOWNLOADING):
        _draw_progress(display, model.bytes_done, model.bytes_total)
    elif state is AppState.WAITING:
        _draw_sweeper(display, model.now_ms)

    if state is AppState.ERROR:
        _center_size2(display, 48, model.error_code or "")
    elif state in (AppState.IDLE, AppState.PLAYING):
        _maybe_vol_overlay(display, model)

    _maybe_spinner(display, model)
    display.show()