"""Small fixed-voice PCM mixer with per-voice gain, looping and clipping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

MIXER_VOICES = 2
_INT16_MIN = -32768
_INT16_MAX = 32767


@dataclass
class _Voice:
    data: Sequence[int] = ()
    pos: int = 0
    gain: float = 1.0
    active: bool = False
    loop: bool = False


def _clip16(value: int) -> int:
    return max(_INT16_MIN, min(_INT16_MAX, value))


class Mixer:
    """Sums a fixed number of voices into signed 16-bit frames."""

    def __init__(self, voices: int = MIXER_VOICES) -> None:
        self._voices = [_Voice() for _ in range(voices)]

    def reset(self) -> None:
        """Silence and forget every voice."""
        self._voices = [_Voice() for _ in self._voices]

    def _valid(self, voice: int) -> bool:
        return 0 <= voice < len(self._voices)

    def play(self, voice: int, data: Iterable[int], gain: float = 1.0, loop: bool = False) -> None:
        """Start ``data`` on a voice from its first sample; invalid voices are ignored."""
        if not self._valid(voice):
            return
        samples = tuple(data)
        self._voices[voice] = _Voice(samples, 0, gain, bool(samples), loop)

    def stop(self, voice: int) -> None:
        """Silence a voice; invalid voices are ignored."""
        if self._valid(voice):
            self._voices[voice].active = False

    def voice_active(self, voice: int) -> bool:
        """Whether a voice is still playing."""
        return self._valid(voice) and self._voices[voice].active

    def render(self, frames: int, master_volume: float = 1.0) -> list[int]:
        """Mix the next ``frames`` samples and return them."""
        out = []
        for _ in range(frames):
            acc = 0
            for v in self._voices:
                if not v.active:
                    continue
                acc += int(v.data[v.pos] * v.gain)
                v.pos += 1
                if v.pos >= len(v.data):
                    if v.loop:
                        v.pos = 0
                    else:
                        v.active = False
            out.append(_clip16(int(acc * master_volume)))
        return out