import struct

import pytest

from restyle_device.wav_header import HEADER_SIZE, build_wav_header, patch_wav_length


def _u32(buf, off):
    return struct.unpack_from("<I", buf, off)[0]


def _u16(buf, off):
    return struct.unpack_from("<H", buf, off)[0]


def test_header_canonical_layout_16k_mono_s16():
    hdr = build_wav_header(320000)
    assert len(hdr) == HEADER_SIZE
    assert hdr[0:4] == b"RIFF"
    assert hdr[8:12] == b"WAVE"
    assert hdr[12:16] == b"fmt "
    assert hdr[36:40] == b"data"
    assert _u32(hdr, 16) == 16
    assert _u16(hdr, 20) == 1
    assert _u16(hdr, 22) == 1
    assert _u32(hdr, 24) == 16000
    assert _u32(hdr, 28) == 32000
    assert _u16(hdr, 32) == 2
    assert _u16(hdr, 34) == 16
    assert _u32(hdr, 40) == 320000
    assert _u32(hdr, 4) == 320036


def test_patch_length():
    hdr = patch_wav_length(build_wav_header(0), 480000)
    assert _u32(hdr, 4) == 480036
    assert _u32(hdr, 40) == 480000


def test_patch_matches_fresh_build():
    assert patch_wav_length(build_wav_header(7), 320000) == build_wav_header(320000)


def test_patch_rejects_short_header():
    with pytest.raises(ValueError):
        patch_wav_length(b"RIFF", 10)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        build_wav_header(-1)