from __future__ import annotations

import unittest

from boundrand import randbelow
from boundrand.constants import INT32_MAX, REJECTION_WARN_THRESHOLD, UINT32_MAX
from boundrand.errors import InvalidArgumentError, OutOfRangeError, SourceExhaustedError
from boundrand.rejection import check_bound, draw_uint32, get_int32
from boundrand.sources import DeterministicSource, RandomByteSource, ScriptedSource, SystemRandomSource


class _FailingSource(RandomByteSource):
    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    def fill(self, buffer):
        self.calls += 1
        raise self.exc


class _DuckSource:
    """Not a RandomByteSource subclass; only has fill()."""

    def fill(self, buffer):
        buffer[:] = b"\x07\x00\x00\x00"


class RangeTests(unittest.TestCase):
    def test_values_stay_below_bound(self):
        src = DeterministicSource(b"range-test")
        for m in (1, 2, 3, 5, 6, 7, 10, 100, 255, 256, 1000, 65537, 1 << 20, INT32_MAX, UINT32_MAX):
            for _ in range(200):
                v = get_int32(src, m)
                self.assertGreaterEqual(v, 0)
                self.assertLess(v, m)

    def test_bound_of_one_always_zero(self):
        src = ScriptedSource.from_uint32([5, 0xFFFFFFFE, 7, 0])
        for _ in range(4):
            self.assertEqual(get_int32(src, 1), 0)
        self.assertEqual(src.remaining, 0)

    def test_int32_max_bound(self):
        # limit = 2 * INT32_MAX = 0xFFFFFFFE; both top words are rejected
        src = ScriptedSource.from_uint32([0xFFFFFFFF, 0xFFFFFFFE, 0xFFFFFFFD])
        self.assertEqual(get_int32(src, INT32_MAX), INT32_MAX - 1)
        self.assertEqual(src.remaining, 0)

        sys_src = SystemRandomSource()
        for _ in range(100):
            self.assertLess(get_int32(sys_src, INT32_MAX), INT32_MAX)

    def test_uint32_max_bound(self):
        src = ScriptedSource.from_uint32([0xFFFFFFFF, 0xFFFFFFFE])
        self.assertEqual(get_int32(src, UINT32_MAX), 0xFFFFFFFE)


class RejectionTests(unittest.TestCase):
    def test_top_word_rejected_then_second_accepted(self):
        for m in (3, 6, 7, 10, 1000, 12345):
            src = ScriptedSource.from_uint32([0xFFFFFFFF, 1234567])
            self.assertEqual(get_int32(src, m), 1234567 % m)
            self.assertEqual(src.consumed, 8)

    def test_whole_biased_tail_rejected(self):
        # limit for 10 is 4294967290; everything from there up is the tail
        src = ScriptedSource.from_uint32([4294967290, 4294967294, 4294967289])
        self.assertEqual(get_int32(src, 10), 4294967289 % 10)
        self.assertEqual(src.consumed, 12)

    def test_power_of_two_bound(self):
        src = ScriptedSource.from_uint32([0xFFFFFFFE, 0xFFFFFFFD])
        self.assertEqual(get_int32(src, 2), 1)
        self.assertEqual(src.consumed, 8)

    def test_first_draw_accepted_without_extra_reads(self):
        src = ScriptedSource.from_uint32([41, 99])
        self.assertEqual(get_int32(src, 6), 41 % 6)
        self.assertEqual(src.remaining, 4)

    def test_deterministic_source_reproduces(self):
        a = DeterministicSource(b"repro", 3)
        b = DeterministicSource(b"repro", 3)
        self.assertEqual([get_int32(a, 97) for _ in range(500)], [get_int32(b, 97) for _ in range(500)])
        self.assertEqual(a.counter, b.counter)

    def test_warning_after_many_rejections(self):
        src = ScriptedSource.from_uint32([0xFFFFFFFF] * REJECTION_WARN_THRESHOLD + [5])
        with self.assertLogs("boundrand.rejection", level="WARNING") as cm:
            self.assertEqual(get_int32(src, 3), 2)
        self.assertEqual(len(cm.output), 1)
        self.assertIn("consecutive rejections", cm.output[0])


class DrawTests(unittest.TestCase):
    def test_little_endian_decode(self):
        self.assertEqual(draw_uint32(ScriptedSource(b"\x01\x00\x00\x00")), 1)
        self.assertEqual(draw_uint32(ScriptedSource(b"\x00\x00\x00\x80")), 0x80000000)
        self.assertEqual(draw_uint32(ScriptedSource(b"\x78\x56\x34\x12")), 0x12345678)

    def test_duck_typed_source(self):
        self.assertEqual(get_int32(_DuckSource(), 5), 2)

    def test_member_method(self):
        src = ScriptedSource.from_uint32([0xFFFFFFFF, 20])
        self.assertEqual(src.get_int32(6), 2)

    def test_randbelow_default_and_explicit(self):
        for _ in range(50):
            self.assertLess(randbelow(10), 10)
        self.assertEqual(randbelow(6, ScriptedSource.from_uint32([13])), 1)


class ArgumentErrorTests(unittest.TestCase):
    def test_none_source(self):
        with self.assertRaises(InvalidArgumentError):
            get_int32(None, 5)

    def test_source_without_fill(self):
        with self.assertRaises(InvalidArgumentError):
            get_int32(object(), 5)

    def test_non_positive_bound(self):
        src = ScriptedSource(b"")
        for m in (0, -1, -(2**31)):
            with self.assertRaises(OutOfRangeError):
                get_int32(src, m)

    def test_bound_too_large(self):
        with self.assertRaises(OutOfRangeError):
            get_int32(ScriptedSource(b""), UINT32_MAX + 1)

    def test_bound_wrong_type(self):
        src = ScriptedSource(b"")
        for m in (2.5, "3", None, True):
            with self.assertRaises(InvalidArgumentError):
                get_int32(src, m)

    def test_source_checked_before_bound(self):
        with self.assertRaises(InvalidArgumentError):
            get_int32(None, 0)

    def test_errors_are_builtin_compatible(self):
        with self.assertRaises(ValueError):
            get_int32(ScriptedSource(b""), 0)
        with self.assertRaises(TypeError):
            get_int32(None, 1)

    def test_check_bound_alone(self):
        for m in (1, 6, INT32_MAX, UINT32_MAX):
            self.assertIsNone(check_bound(m))
        for m in (0, -1, UINT32_MAX + 1):
            with self.assertRaises(OutOfRangeError):
                check_bound(m)
        with self.assertRaises(InvalidArgumentError):
            check_bound(3.0)

    def test_no_bytes_drawn_on_bad_argument(self):
        src = ScriptedSource.from_uint32([1])
        with self.assertRaises(OutOfRangeError):
            get_int32(src, -5)
        self.assertEqual(src.consumed, 0)


class SourceFailureTests(unittest.TestCase):
    def test_source_error_propagates_verbatim(self):
        exc = OSError("entropy pool unavailable")
        src = _FailingSource(exc)
        with self.assertRaises(OSError) as cm:
            get_int32(src, 10)
        self.assertIs(cm.exception, exc)
        self.assertEqual(src.calls, 1)

    def test_exhaustion_after_rejection_not_retried(self):
        src = ScriptedSource.from_uint32([0xFFFFFFFF])
        with self.assertRaises(SourceExhaustedError):
            get_int32(src, 3)
        self.assertEqual(src.consumed, 4)


if __name__ == "__main__":
    unittest.main()
