from __future__ import annotations

import logging
from typing import Optional

from .constants import DRAW_BYTE_ORDER, DRAW_SIZE, REJECTION_WARN_THRESHOLD, UINT32_MAX
from .errors import InvalidArgumentError, OutOfRangeError

log = logging.getLogger(__name__)

_default_source = None


def _check_source(source) -> None:
    if source is None:
        raise InvalidArgumentError("source must not be None")
    if not callable(getattr(source, "fill", None)):
        raise InvalidArgumentError(f"{type(source).__name__} has no fill() method")


def check_bound(exclusive_max) -> None:
    """Raise unless ``exclusive_max`` is an int in ``1..0xFFFFFFFF``."""
    if isinstance(exclusive_max, bool) or not isinstance(exclusive_max, int):
        raise InvalidArgumentError(f"exclusive_max must be an int, not {type(exclusive_max).__name__}")
    if exclusive_max <= 0:
        raise OutOfRangeError(f"exclusive_max must be > 0, got {exclusive_max}")
    if exclusive_max > UINT32_MAX:
        raise OutOfRangeError(f"exclusive_max must be <= {UINT32_MAX:#x}, got {exclusive_max}")


def draw_uint32(source) -> int:
    """Fill a fresh 4-byte buffer from ``source`` and decode it little-endian."""
    buf = bytearray(DRAW_SIZE)
    source.fill(buf)
    return int.from_bytes(buf, DRAW_BYTE_ORDER)


def get_int32(source, exclusive_max: int) -> int:
    """Return a uniform integer in ``[0, exclusive_max)`` with no modulo bias.

    Draws unsigned 32-bit words from ``source`` and rejects any word at or
    above the largest multiple of ``exclusive_max`` that fits in 32 bits, so
    the accepted words map evenly onto the output range. At least half of all
    words are accepted, so the expected number of draws is at most two.

    Args:
        source: Object with a ``fill(buffer)`` method, e.g. a
            :class:`boundrand.sources.RandomByteSource`.
        exclusive_max: Exclusive upper bound, ``1 <= exclusive_max <= 0xFFFFFFFF``.

    Returns:
        An int ``v`` with ``0 <= v < exclusive_max``.

    Raises:
        InvalidArgumentError: ``source`` is None or cannot fill buffers, or
            ``exclusive_max`` is not an int.
        OutOfRangeError: ``exclusive_max`` is not in ``1..0xFFFFFFFF``.

    Whatever ``source.fill`` raises propagates unchanged and is not retried.
    """
    _check_source(source)
    check_bound(exclusive_max)

    limit = UINT32_MAX // exclusive_max * exclusive_max

    rejected = 0
    while True:
        value = draw_uint32(source)
        if value < limit:
            return value % exclusive_max
        rejected += 1
        if rejected == REJECTION_WARN_THRESHOLD:
            log.warning(
                "%d consecutive rejections for exclusive_max=%d from %r; source may not be uniform",
                rejected,
                exclusive_max,
                source,
            )


def randbelow(exclusive_max: int, source: Optional[object] = None) -> int:
    """:func:`get_int32` against the OS entropy pool unless ``source`` is given."""
    global _default_source
    if source is None:
        if _default_source is None:
            from .sources import SystemRandomSource

            _default_source = SystemRandomSource()
        source = _default_source
    return get_int32(source, exclusive_max)


__all__ = ["get_int32", "draw_uint32", "randbelow", "check_bound"]
