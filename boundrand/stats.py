"""Chi-square goodness-of-fit checks for bounded draws.

The p-value is the regularized upper incomplete gamma function
``Q(dof / 2, statistic / 2)``, evaluated by its power series below
``a + 1`` and by a Lentz continued fraction above it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .constants import DEFAULT_ALPHA, MAX_CHECK_BINS, MIN_EXPECTED_PER_BIN
from .rejection import get_int32

log = logging.getLogger(__name__)

_EPS = 1e-15
_TINY = 1e-300
_MAX_ITER = 100_000


@dataclass
class UniformityResult:
    exclusive_max: int
    trials: int
    statistic: float
    dof: int
    p_value: float
    alpha: float
    counts: List[int] = field(repr=False, default_factory=list)

    @property
    def uniform(self) -> bool:
        """True when the test does not reject uniformity at ``alpha``."""
        return self.p_value >= self.alpha

    def as_dict(self) -> dict:
        return {
            "exclusive_max": self.exclusive_max,
            "trials": self.trials,
            "statistic": self.statistic,
            "dof": self.dof,
            "p_value": self.p_value,
            "alpha": self.alpha,
            "uniform": self.uniform,
            "counts": list(self.counts),
        }


def sample_counts(source, exclusive_max: int, trials: int) -> List[int]:
    """Draw ``trials`` values below ``exclusive_max`` and tally each outcome."""
    if exclusive_max > MAX_CHECK_BINS:
        raise ValueError(f"Too many bins to tally: {exclusive_max} > {MAX_CHECK_BINS}")
    counts = [0] * exclusive_max
    for _ in range(trials):
        counts[get_int32(source, exclusive_max)] += 1
    return counts


def chi_square_statistic(counts: Sequence[int]) -> float:
    """Pearson statistic of ``counts`` against equal expected frequencies."""
    total = sum(counts)
    if len(counts) < 2 or total == 0:
        raise ValueError("Need at least two bins and one observation")
    expected = total / len(counts)
    return sum((c - expected) ** 2 for c in counts) / expected


def _gamma_q(a: float, x: float) -> float:
    """Regularized upper incomplete gamma ``Q(a, x)`` for ``a > 0``, ``x >= 0``."""
    if x <= 0.0:
        return 1.0
    log_prefix = -x + a * math.log(x) - math.lgamma(a)
    if x < a + 1.0:
        # series for P(a, x); Q is not small in this region
        term = total = 1.0 / a
        ap = a
        for _ in range(_MAX_ITER):
            ap += 1.0
            term *= x / ap
            total += term
            if abs(term) < abs(total) * _EPS:
                break
        return max(0.0, 1.0 - total * math.exp(log_prefix))
    b = x + 1.0 - a
    c = 1.0 / _TINY
    d = 1.0 / b
    h = d
    for i in range(1, _MAX_ITER):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _TINY:
            d = _TINY
        c = b + an / c
        if abs(c) < _TINY:
            c = _TINY
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < _EPS:
            break
    return math.exp(log_prefix) * h


def chi_square_pvalue(statistic: float, dof: int) -> float:
    """Upper-tail probability of ``statistic`` under chi-square(``dof``)."""
    if dof < 1:
        raise ValueError("Degrees of freedom must be >= 1")
    if statistic <= 0:
        return 1.0
    return _gamma_q(dof / 2.0, statistic / 2.0)


def check_uniformity(
    source,
    exclusive_max: int,
    trials: int,
    *,
    alpha: float = DEFAULT_ALPHA,
    counts: Optional[Sequence[int]] = None,
) -> UniformityResult:
    """Sample ``trials`` draws and test them for uniformity over ``[0, exclusive_max)``.

    Args:
        source: Byte source passed to :func:`get_int32`.
        exclusive_max: Bound under test, at least 2.
        trials: Number of draws. Must give every bin an expected count of at
            least ``MIN_EXPECTED_PER_BIN``.
        alpha: Significance level.
        counts: Pre-tallied outcomes; when given, ``source`` is not drawn from.

    Raises:
        ValueError: For unusable parameters.
    """
    if not 0.0 < alpha < 1.0:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")
    if exclusive_max < 2:
        raise ValueError("Uniformity needs at least two outcomes")
    if trials < MIN_EXPECTED_PER_BIN * exclusive_max:
        raise ValueError(
            f"{trials} trials is too few for {exclusive_max} bins "
            f"(need >= {MIN_EXPECTED_PER_BIN * exclusive_max})"
        )
    if counts is None:
        counts = sample_counts(source, exclusive_max, trials)
    elif len(counts) != exclusive_max or sum(counts) != trials:
        raise ValueError("counts do not match exclusive_max/trials")

    stat = chi_square_statistic(counts)
    dof = exclusive_max - 1
    p = chi_square_pvalue(stat, dof)
    log.debug("chi-square m=%d n=%d stat=%.4f dof=%d p=%.6f", exclusive_max, trials, stat, dof, p)
    return UniformityResult(
        exclusive_max=exclusive_max,
        trials=trials,
        statistic=stat,
        dof=dof,
        p_value=p,
        alpha=alpha,
        counts=list(counts),
    )


__all__ = [
    "UniformityResult",
    "sample_counts",
    "chi_square_statistic",
    "chi_square_pvalue",
    "check_uniformity",
]
