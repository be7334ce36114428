"""Persistent device settings with a write rate limit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, MutableMapping, Optional

Clock = Callable[[], int]

MIN_SAVE_INTERVAL_MS = 1000
_STYLE_ID_MAX = 32
_MASK = 0xFFFFFFFF

_KEY_STYLE_IDX = "style_idx"
_KEY_STYLE_ID = "style_id"
_KEY_VOLUME = "vol_x10"


@dataclass
class NvsState:
    """Settings kept across reboots."""

    style_idx: int = 0
    style_id: str = "jesus"
    volume_x10: int = 6


class NvsStore:
    """Loads and saves settings in a key/value backend, at most once per second."""

    def __init__(
        self,
        backend: Optional[MutableMapping[str, object]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._backend: MutableMapping[str, object] = {} if backend is None else backend
        self._clock = clock
        self._last_save_ms = 0

    def set_clock(self, clock: Optional[Clock]) -> None:
        """Replace the millisecond clock and lift any pending rate limit."""
        self._clock = clock
        self._last_save_ms = 0

    def load(self) -> NvsState:
        """Return stored settings, with defaults for anything missing."""
        b = self._backend
        return NvsState(
            style_idx=int(b.get(_KEY_STYLE_IDX, 0)) & 0xFFFF,
            style_id=str(b.get(_KEY_STYLE_ID, "jesus"))[:_STYLE_ID_MAX],
            volume_x10=int(b.get(_KEY_VOLUME, 6)) & 0xFF,
        )

    def save(self, state: NvsState) -> bool:
        """Store settings; return False when suppressed by the rate limit."""
        now = (self._clock() if self._clock else 0) & _MASK
        if self._last_save_ms and (now - self._last_save_ms) & _MASK < MIN_SAVE_INTERVAL_MS:
            return False
        self._backend[_KEY_STYLE_IDX] = state.style_idx & 0xFFFF
        self._backend[_KEY_STYLE_ID] = state.style_id[:_STYLE_ID_MAX]
        self._backend[_KEY_VOLUME] = state.volume_x10 & 0xFF
        self._last_save_ms = now
        return True