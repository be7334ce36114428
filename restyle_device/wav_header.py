"""Canonical 44-byte RIFF/WAVE header for 16 kHz mono 16-bit PCM."""

from __future__ import annotations

import struct

SAMPLE_RATE = 16000
CHANNELS = 1
BITS = 16
HEADER_SIZE = 44

_MASK = 0xFFFFFFFF
_LAYOUT = struct.Struct("<4sI4s4sIHHIIHH4sI")
_U32 = struct.Struct("<I")


def _check_length(pcm_bytes: int) -> None:
    if not 0 <= pcm_bytes <= _MASK:
        raise ValueError(f"pcm length out of range: {pcm_bytes}")


def build_wav_header(pcm_bytes: int) -> bytes:
    """Return the header for a PCM payload of the given byte length."""
    _check_length(pcm_bytes)
    block_align = CHANNELS * (BITS // 8)
    return _LAYOUT.pack(
        b"RIFF",
        (pcm_bytes + 36) & _MASK,
        b"WAVE",
        b"fmt ",
        16,
        1,
        CHANNELS,
        SAMPLE_RATE,
        SAMPLE_RATE * block_align,
        block_align,
        BITS,
        b"data",
        pcm_bytes,
    )


def patch_wav_length(header: bytes, pcm_bytes: int) -> bytes:
    """Return a copy of the header with its RIFF and data lengths rewritten."""
    _check_length(pcm_bytes)
    if len(header) < HEADER_SIZE:
        raise ValueError(f"header must be at least {HEADER_SIZE} bytes, got {len(header)}")
    out = bytearray(header)
    _U32.pack_into(out, 4, (pcm_bytes + 36) & _MASK)
    _U32.pack_into(out, 40, pcm_bytes)
    return bytes(out)