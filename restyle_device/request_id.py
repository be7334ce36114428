"""UUIDv4-shaped request identifiers from a seedable xorshift32 generator."""

from __future__ import annotations

import uuid

_DEFAULT_SEED = 0x12345678
_MASK = 0xFFFFFFFF


class RequestIdGenerator:
    """Deterministic generator of version-4, RFC 4122 variant identifiers."""

    def __init__(self, seed: int = _DEFAULT_SEED) -> None:
        self._state = _DEFAULT_SEED
        self.seed(seed)

    def seed(self, seed: int) -> None:
        """Reseed; a zero seed falls back to the default seed."""
        self._state = (seed & _MASK) or _DEFAULT_SEED

    def _next(self) -> int:
        x = self._state
        x ^= (x << 13) & _MASK
        x ^= x >> 17
        x ^= (x << 5) & _MASK
        self._state = x
        return x

    def new(self) -> str:
        """Return the next identifier as a 36-character lowercase string."""
        raw = bytearray(b"".join(self._next().to_bytes(4, "little") for _ in range(4)))
        raw[6] = (raw[6] & 0x0F) | 0x40
        raw[8] = (raw[8] & 0x3F) | 0x80
        return str(uuid.UUID(bytes=bytes(raw)))


_default = RequestIdGenerator()


def seed_request_ids(seed: int) -> None:
    """Reseed the process-wide generator."""
    _default.seed(seed)


def new_request_id() -> str:
    """Return the next identifier from the process-wide generator."""
    return _default.new()