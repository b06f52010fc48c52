"""
permtest/power.py

Planning how many permutations a test needs.

Monte Carlo p-values are binomial estimates: with N permutations and a true
p near alpha, the standard error is sqrt(alpha*(1-alpha)/N). Asking that a
chosen multiple of the standard error stay below `precision` gives
N = level^2 * alpha*(1-alpha) / precision^2.
See https://stats.stackexchange.com/questions/80025/#80879
"""

from dataclasses import dataclass
import math

from .errors import InvalidArgument
from .utils import is_integer

# confidence level -> approximate two-sided coverage
CONFIDENCE_COVERAGE = {1: 0.68, 2: 0.95, 3: 0.99}


@dataclass
class PrecisionPlan:
    n_permutations: int
    precision: float
    alpha: float
    confidence_level: int
    coverage: float

def _check_alpha(alpha: float) -> None:
    if not (0.0 < alpha < 1.0):
        raise InvalidArgument("alpha must be in (0,1)")

def _check_level(confidence_level: int) -> None:
    if not is_integer(confidence_level) or confidence_level not in CONFIDENCE_COVERAGE:
        raise InvalidArgument("confidence_level must be 1, 2, or 3")

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def permutation_precision(
    precision: float,
    alpha: float = 0.05,
    confidence_level: int = 2,
) -> int:
    """
    Minimum number of permutations for a p-value within +/- precision.

    confidence_level is the multiplier itself (1, 2 or 3 standard errors,
    roughly 68%, 95%, 99% coverage), not a coverage fraction.

    >>> permutation_precision(0.01, alpha=0.05, confidence_level=2)
    1900
    """
    if precision <= 0:
        raise InvalidArgument("precision must be > 0")
    _check_alpha(alpha)
    _check_level(confidence_level)
    return _round_half_up(confidence_level ** 2 * alpha * (1 - alpha) / precision ** 2)

def achieved_precision(
    n_permutations: int,
    alpha: float = 0.05,
    confidence_level: int = 2,
) -> float:
    if not is_integer(n_permutations) or n_permutations < 1:
        raise InvalidArgument("n_permutations must be a positive integer")
    _check_alpha(alpha)
    _check_level(confidence_level)
    return confidence_level * math.sqrt(alpha * (1 - alpha) / n_permutations)

def plan_permutations(
    precision: float,
    alpha: float = 0.05,
    confidence_level: int = 2,
) -> PrecisionPlan:
    n = permutation_precision(precision, alpha, confidence_level)
    return PrecisionPlan(
        n_permutations=n,
        precision=precision,
        alpha=alpha,
        confidence_level=confidence_level,
        coverage=CONFIDENCE_COVERAGE[confidence_level],
    )
