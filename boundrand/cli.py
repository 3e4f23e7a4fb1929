from __future__ import annotations

import sys
import argparse
import logging
import json as _json

from typing import List, Optional

from boundrand.constants import CHACHA_KEY_SIZE, DEFAULT_ALPHA, DEFAULT_CHECK_TRIALS
from boundrand.errors import BoundRandError
from boundrand.rejection import check_bound, get_int32
from boundrand.sources import (
    ChaCha20Source,
    CryptodomeRandomSource,
    DeterministicSource,
    RandomByteSource,
    SystemRandomSource,
)
from boundrand.stats import check_uniformity

SOURCE_NAMES = ["system", "cryptodome", "seeded", "chacha"]

# Fixed salt so a passphrase alone reproduces the stream
_PASSPHRASE_SALT = b"boundrand-chacha-salt"


def _parse_seed(seed: Optional[str]) -> bytes:
    if seed is None:
        raise ValueError("--seed is required for this source")
    try:
        return bytes.fromhex(seed)
    except ValueError:
        raise ValueError(f"--seed must be hex, got {seed!r}") from None


def make_source(name: str, *, seed: Optional[str] = None, passphrase: Optional[str] = None) -> RandomByteSource:
    """Build a byte source from CLI options.

    Args:
        name: One of ``SOURCE_NAMES``.
        seed: Hex seed. Required for ``seeded``; for ``chacha`` it is the
            32-byte key unless ``passphrase`` is given.
        passphrase: Passphrase for ``chacha``; the key is derived with Argon2id.

    Raises:
        ValueError: Unknown ``name``, or a seed/passphrase the source cannot use.
    """
    if passphrase is not None and name != "chacha":
        raise ValueError(f"--passphrase is only valid with --source chacha, not {name}")
    if name in ("system", "cryptodome") and seed is not None:
        raise ValueError(f"--seed is not used by --source {name}")
    if name == "system":
        return SystemRandomSource()
    if name == "cryptodome":
        return CryptodomeRandomSource()
    if name == "seeded":
        return DeterministicSource(_parse_seed(seed))
    if name == "chacha":
        if passphrase is not None:
            if seed is not None:
                raise ValueError("Give either --seed or --passphrase for chacha, not both")
            return ChaCha20Source.from_passphrase(passphrase, _PASSPHRASE_SALT)
        key = _parse_seed(seed)
        if len(key) != CHACHA_KEY_SIZE:
            raise ValueError(f"--seed for chacha must be {CHACHA_KEY_SIZE} bytes ({CHACHA_KEY_SIZE * 2} hex digits)")
        return ChaCha20Source(key)
    raise ValueError(f"Unknown source: {name}")


def cmd_draw(bound: int, *, count: int = 1, source: RandomByteSource, as_json: bool = False) -> List[int]:
    """Print ``count`` values in ``[0, bound)`` drawn from ``source``."""
    check_bound(bound)
    if count < 0:
        raise ValueError("--count must be >= 0")
    values = [get_int32(source, bound) for _ in range(count)]
    if as_json:
        print(_json.dumps({"bound": bound, "values": values}))
    else:
        for v in values:
            print(v)
    return values


def cmd_check(
    bound: int,
    *,
    trials: int = DEFAULT_CHECK_TRIALS,
    alpha: float = DEFAULT_ALPHA,
    source: RandomByteSource,
    as_json: bool = False,
) -> bool:
    """Chi-square test ``trials`` draws for uniformity.

    Returns:
        True when uniformity is not rejected at ``alpha``.
    """
    res = check_uniformity(source, bound, trials, alpha=alpha)
    if as_json:
        print(_json.dumps(res.as_dict()))
    else:
        print(f"bound={res.exclusive_max} trials={res.trials}")
        print(f"chi2={res.statistic:.4f} dof={res.dof} p={res.p_value:.6f} alpha={res.alpha}")
        if res.exclusive_max <= 16:
            for i, c in enumerate(res.counts):
                print(f"  {i}: {c}")
        print("OK: uniform" if res.uniform else "FAIL: uniformity rejected")
    return res.uniform


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="boundrand",
        description="Unbiased bounded random integers from a random byte source",
    )
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    def add_source_args(p):
        p.add_argument("--source", choices=SOURCE_NAMES, default="system", help="Byte source (default: system)")
        p.add_argument("--seed", help="Hex seed (seeded: any length; chacha: 32-byte key)")
        p.add_argument("--passphrase", help="Passphrase for --source chacha (Argon2id-derived key)")
        p.add_argument("--json", action="store_true", help="Emit JSON")

    ap_draw = sub.add_parser("draw", help="Draw values in [0, BOUND)")
    ap_draw.add_argument("bound", type=int, help="Exclusive upper bound")
    ap_draw.add_argument("--count", "-n", type=int, default=1, help="Number of values (default 1)")
    add_source_args(ap_draw)

    ap_check = sub.add_parser("check", help="Chi-square uniformity check for BOUND")
    ap_check.add_argument("bound", type=int, help="Exclusive upper bound (number of bins)")
    ap_check.add_argument(
        "--trials", "-t", type=int, default=DEFAULT_CHECK_TRIALS, help=f"Number of draws (default {DEFAULT_CHECK_TRIALS})"
    )
    ap_check.add_argument("--alpha", type=float, default=DEFAULT_ALPHA, help=f"Significance level (default {DEFAULT_ALPHA})")
    add_source_args(ap_check)

    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        source = make_source(args.source, seed=args.seed, passphrase=args.passphrase)
        if args.cmd == "draw":
            cmd_draw(args.bound, count=args.count, source=source, as_json=args.json)
        elif args.cmd == "check":
            ok = cmd_check(args.bound, trials=args.trials, alpha=args.alpha, source=source, as_json=args.json)
            sys.exit(0 if ok else 1)
        else:
            raise RuntimeError("Unknown command")
    except (BoundRandError, ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
