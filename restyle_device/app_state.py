"""Application state machine for the record / upload / play cycle."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class AppState(enum.Enum):
    IDLE = 0
    RECORDING = 1
    UPLOADING = 2
    WAITING = 3
    DOWNLOADING = 4
    PLAYING = 5
    ERROR = 6
    NO_WIFI = 7


class AppEvent(enum.Enum):
    WAKE_PRESS = 0
    WAKE_RELEASE = 1
    RECORD_CAP = 2
    UPLOAD_DONE = 3
    SERVER_FIRST_BYTE = 4
    DOWNLOAD_DONE = 5
    PLAYBACK_END = 6
    ERROR_RETRYABLE = 7
    ERROR_NON_RETRYABLE = 8
    ERROR_CLEAR = 9
    WIFI_LOST = 10
    WIFI_OK = 11
    VOL_UP = 12
    VOL_DOWN = 13
    ERROR_TIMEOUT = 14


@dataclass
class AppContext:
    """Shared device context the state machine reads."""

    state: AppState = AppState.IDLE
    wifi_connected: bool = False
    last_error_retryable: bool = False
    style_idx: int = 0
    volume_x10: int = 6


_BUSY = frozenset(
    {AppState.RECORDING, AppState.UPLOADING, AppState.WAITING, AppState.DOWNLOADING}
)
_FAILURES = {
    AppEvent.ERROR_RETRYABLE: AppState.ERROR,
    AppEvent.ERROR_NON_RETRYABLE: AppState.ERROR,
    AppEvent.ERROR_TIMEOUT: AppState.ERROR,
}
_TRANSITIONS = {
    AppState.RECORDING: {
        AppEvent.WAKE_RELEASE: AppState.UPLOADING,
        AppEvent.RECORD_CAP: AppState.UPLOADING,
    },
    AppState.UPLOADING: {AppEvent.UPLOAD_DONE: AppState.WAITING, **_FAILURES},
    AppState.WAITING: {AppEvent.SERVER_FIRST_BYTE: AppState.DOWNLOADING, **_FAILURES},
    AppState.DOWNLOADING: {
        AppEvent.DOWNLOAD_DONE: AppState.PLAYING,
        AppEvent.ERROR_NON_RETRYABLE: AppState.ERROR,
        AppEvent.ERROR_TIMEOUT: AppState.ERROR,
    },
    AppState.PLAYING: {AppEvent.PLAYBACK_END: AppState.IDLE},
}


def on_event(ctx: AppContext, event: AppEvent) -> AppState:
    """Return the state that follows ``event`` in ``ctx``.

    The caller stores the result; only ERROR_CLEAR touches the context,
    resetting ``last_error_retryable``.
    """
    state = ctx.state
    if event is AppEvent.WIFI_LOST:
        if state in _BUSY:
            return AppState.ERROR
        if state is not AppState.NO_WIFI:
            return AppState.NO_WIFI
    if event is AppEvent.WIFI_OK and state is AppState.NO_WIFI:
        return AppState.IDLE

    if state is AppState.IDLE:
        if event is AppEvent.WAKE_PRESS and ctx.wifi_connected:
            return AppState.RECORDING
        return state
    if state is AppState.ERROR:
        if event is AppEvent.ERROR_CLEAR:
            ctx.last_error_retryable = False
            return AppState.IDLE
        return state
    return _TRANSITIONS.get(state, {}).get(event, state)


def state_name(state: AppState) -> str:
    """Return the upper-case name of a state."""
    return state.name