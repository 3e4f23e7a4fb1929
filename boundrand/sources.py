"""Random byte sources consumed by :func:`boundrand.rejection.get_int32`.

A source is anything with a ``fill(buffer)`` method that overwrites every
byte of a writable buffer (``bytearray`` or ``memoryview``). The classes here
cover the OS entropy pool, PyCryptodomex's generator, two reproducible
streams (ChaCha20 keystream and a BLAKE2b counter stream) and a scripted
replay source for exact-value tests.

OS-backed sources are safe to share between threads. The stream sources keep
a read position and need external locking when shared.
"""

from __future__ import annotations

import hashlib
import logging
import os
from abc import ABC, abstractmethod
from typing import Iterable, Union

from Cryptodome.Cipher import ChaCha20
from Cryptodome.Random import get_random_bytes
from argon2.low_level import Type as _ArgonType, hash_secret_raw as _argon_hash

from .constants import (
    ARGON_MEMORY_COST_KIB,
    ARGON_MIN_SALT_SIZE,
    ARGON_PARALLELISM,
    ARGON_TIME_COST,
    BLAKE2B_BLOCK_SIZE,
    CHACHA_DEFAULT_NONCE,
    CHACHA_KEY_SIZE,
    DRAW_BYTE_ORDER,
    DRAW_SIZE,
    UINT32_MAX,
)
from .errors import ShortFillError, SourceExhaustedError

Buffer = Union[bytearray, memoryview]

log = logging.getLogger(__name__)


def _write_into(buffer: Buffer, data: bytes) -> None:
    if len(data) != len(buffer):
        raise ShortFillError(f"Source returned {len(data)} bytes, {len(buffer)} requested")
    buffer[:] = data


class RandomByteSource(ABC):
    """Capability that fills buffers with independent, uniform bytes."""

    @abstractmethod
    def fill(self, buffer: Buffer) -> None:
        """Overwrite every byte of ``buffer`` with random data."""

    def get_bytes(self, n: int) -> bytes:
        buf = bytearray(n)
        self.fill(buf)
        return bytes(buf)

    def get_int32(self, exclusive_max: int) -> int:
        """Uniform integer in ``[0, exclusive_max)`` drawn from this source."""
        from .rejection import get_int32

        return get_int32(self, exclusive_max)


class SystemRandomSource(RandomByteSource):
    """Operating system CSPRNG via ``os.urandom``."""

    def fill(self, buffer: Buffer) -> None:
        _write_into(buffer, os.urandom(len(buffer)))

    def __repr__(self) -> str:
        return "SystemRandomSource()"


class CryptodomeRandomSource(RandomByteSource):
    """PyCryptodomex ``Cryptodome.Random.get_random_bytes``."""

    def fill(self, buffer: Buffer) -> None:
        _write_into(buffer, get_random_bytes(len(buffer)))

    def __repr__(self) -> str:
        return "CryptodomeRandomSource()"


class ChaCha20Source(RandomByteSource):
    """Reproducible ChaCha20 keystream.

    The same (key, nonce) pair always yields the same byte stream, so draws
    and rejections replay exactly. The stream is only as unpredictable as the
    key.
    """

    def __init__(self, key: bytes, nonce: bytes = CHACHA_DEFAULT_NONCE):
        if len(key) != CHACHA_KEY_SIZE:
            raise ValueError(f"ChaCha20 key must be {CHACHA_KEY_SIZE} bytes")
        if len(nonce) not in (8, 12, 24):
            raise ValueError("ChaCha20 nonce must be 8, 12 or 24 bytes")
        self.nonce = nonce
        self._cipher = ChaCha20.new(key=key, nonce=nonce)
        self.position = 0

    @classmethod
    def from_passphrase(cls, passphrase: str, salt: bytes, nonce: bytes = CHACHA_DEFAULT_NONCE) -> "ChaCha20Source":
        """Derive the stream key from a passphrase with Argon2id."""
        if len(salt) < ARGON_MIN_SALT_SIZE:
            raise ValueError(f"Salt must be at least {ARGON_MIN_SALT_SIZE} bytes")
        key = _argon_hash(
            passphrase.encode("utf-8"),
            salt,
            time_cost=ARGON_TIME_COST,
            memory_cost=ARGON_MEMORY_COST_KIB,
            parallelism=ARGON_PARALLELISM,
            hash_len=CHACHA_KEY_SIZE,
            type=_ArgonType.ID,
        )
        log.debug("derived ChaCha20 key from passphrase (salt %d bytes)", len(salt))
        return cls(key, nonce)

    def fill(self, buffer: Buffer) -> None:
        n = len(buffer)
        _write_into(buffer, self._cipher.encrypt(bytes(n)))
        self.position += n


class DeterministicSource(RandomByteSource):
    """Deterministic byte stream built from BLAKE2b in counter mode."""

    def __init__(self, seed_base: bytes, seed_id: int = 0):
        self.seed_base = seed_base
        self.seed_id = seed_id
        self.counter = 0
        self.buffer = b""
        self.pos = 0

    def _refill(self):
        material = self.seed_base + self.seed_id.to_bytes(8, "little") + self.counter.to_bytes(8, "little")
        self.buffer = hashlib.blake2b(material, digest_size=BLAKE2B_BLOCK_SIZE).digest()
        self.counter += 1
        self.pos = 0

    def fill(self, buffer: Buffer) -> None:
        out = bytearray()
        need = len(buffer)
        while len(out) < need:
            if self.pos >= len(self.buffer):
                self._refill()
            take = min(need - len(out), len(self.buffer) - self.pos)
            out += self.buffer[self.pos : self.pos + take]
            self.pos += take
        _write_into(buffer, bytes(out))


class ScriptedSource(RandomByteSource):
    """Replays a fixed byte string and fails once it runs out."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.consumed = 0

    @classmethod
    def from_uint32(cls, values: Iterable[int]) -> "ScriptedSource":
        """Script whole draws: each value is encoded the way draws are decoded."""
        out = bytearray()
        for v in values:
            if not 0 <= v <= UINT32_MAX:
                raise ValueError(f"{v} is not an unsigned 32-bit value")
            out += v.to_bytes(DRAW_SIZE, DRAW_BYTE_ORDER)
        return cls(bytes(out))

    @property
    def remaining(self) -> int:
        return len(self.data) - self.consumed

    def fill(self, buffer: Buffer) -> None:
        n = len(buffer)
        if n > self.remaining:
            raise SourceExhaustedError(f"Scripted source exhausted: {n} bytes requested, {self.remaining} left")
        _write_into(buffer, self.data[self.consumed : self.consumed + n])
        self.consumed += n


__all__ = [
    "RandomByteSource",
    "SystemRandomSource",
    "CryptodomeRandomSource",
    "ChaCha20Source",
    "DeterministicSource",
    "ScriptedSource",
]
