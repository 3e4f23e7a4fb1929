"""
boundrand — unbiased bounded random integers.

Features:

- ``get_int32(source, exclusive_max)``: uniform integer in ``[0, exclusive_max)``
  by rejection sampling on little-endian 32-bit draws, with no modulo bias.
- Pluggable byte sources: OS entropy, PyCryptodomex, a ChaCha20 keystream
  (optionally Argon2id-keyed from a passphrase), a BLAKE2b counter stream and
  a scripted replay source for exact-value tests.
- Chi-square uniformity checks and a small CLI (``boundrand draw|check``).
"""

__version__ = "0.1"

from .errors import (
    BoundRandError,
    InvalidArgumentError,
    OutOfRangeError,
    SourceError,
    SourceExhaustedError,
    ShortFillError,
)
from .rejection import get_int32, draw_uint32, randbelow, check_bound
from .sources import (
    RandomByteSource,
    SystemRandomSource,
    CryptodomeRandomSource,
    ChaCha20Source,
    DeterministicSource,
    ScriptedSource,
)

__all__ = [
    "get_int32",
    "draw_uint32",
    "randbelow",
    "check_bound",
    "RandomByteSource",
    "SystemRandomSource",
    "CryptodomeRandomSource",
    "ChaCha20Source",
    "DeterministicSource",
    "ScriptedSource",
    "BoundRandError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "SourceError",
    "SourceExhaustedError",
    "ShortFillError",
]
