"""
permtest/stats.py

Permutation (randomization) test for a difference in means between two
independent samples.

Dependencies:
  - numpy
  - scipy
  - joblib

What's included:
  - Observed statistics: NaN-excluding mean difference, pooled std, Hedges' g
  - Null distribution: exact enumeration of all partitions, or random permutations
  - Tail-count p-value with +1 smoothing
  - permutation_test: the full pipeline, with optional progress and plotting
  - Parametric reference: Student's t-test on the same samples
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed
from scipy import stats

from .combinations import CombinationEnumerator
from .config import SIDEDNESS, Sidedness, TestOptions
from .errors import InvalidArgument, PrecisionWarning
from .progress import ProgressCallback, TqdmProgress
from .utils import as_sample, count_present, is_integer, nan_mean

logger = logging.getLogger(__name__)

Plotter = Callable[[np.ndarray, float, float, float], object]


# -------------------------
# Pooled observations
# -------------------------

class PooledSample:
    """
    sample1 followed by sample2. NaN entries stay in place; group means skip
    them by summing with NaN -> 0 and dividing by the count of present values.
    """

    def __init__(self, sample1: np.ndarray, sample2: np.ndarray):
        self.values = np.concatenate([sample1, sample2])
        self.present = ~np.isnan(self.values)
        self.filled = np.where(self.present, self.values, 0.0)
        self.n1 = len(sample1)
        self.n = len(self.values)

    @property
    def n2(self) -> int:
        return self.n - self.n1

    def differences(self, group1: np.ndarray, group2: np.ndarray) -> np.ndarray:
        """
        Mean difference per row. group1 has shape (m, n1), group2 (m, n2),
        both holding indices into the pooled values.
        """
        with np.errstate(divide="ignore", invalid="ignore"):
            m1 = self.filled[group1].sum(axis=1) / self.present[group1].sum(axis=1)
            m2 = self.filled[group2].sum(axis=1) / self.present[group2].sum(axis=1)
        return m1 - m2

    def observed(self) -> float:
        # same arithmetic as any permuted assignment, so the identity
        # assignment reproduces the observed value exactly
        idx = np.arange(self.n)
        return float(self.differences(idx[None, :self.n1], idx[None, self.n1:])[0])


# -------------------------
# Observed statistics
# -------------------------

def observed_difference(sample1: Iterable[float], sample2: Iterable[float]) -> float:
    """mean(sample1) - mean(sample2), ignoring NaN entries."""
    x1 = as_sample(sample1, "sample1")
    x2 = as_sample(sample2, "sample2")
    return PooledSample(x1, x2).observed()

def _sum_sq_dev(x: np.ndarray) -> float:
    keep = x[~np.isnan(x)]
    if keep.size == 0:
        return float("nan")
    return float(np.sum((keep - keep.mean()) ** 2))

def pooled_std(sample1: Iterable[float], sample2: Iterable[float]) -> float:
    """
    sqrt(((n1-1)*var1 + (n2-1)*var2) / (n1+n2-2))

    var1/var2 are sample variances (ddof=1) of the non-NaN values; n1/n2
    count the non-NaN values. Returns NaN when n1+n2-2 <= 0.
    """
    x1 = as_sample(sample1, "sample1")
    x2 = as_sample(sample2, "sample2")
    dof = count_present(x1) + count_present(x2) - 2
    if dof <= 0:
        return float("nan")
    return float(math.sqrt((_sum_sq_dev(x1) + _sum_sq_dev(x2)) / dof))

def _standardize(diff: float, sd: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        g = float(np.divide(np.float64(diff), np.float64(sd)))
    if not np.isfinite(g):
        logger.debug("Degenerate effect size: diff=%r, pooled std=%r", diff, sd)
    return g

def hedges_g(sample1: Iterable[float], sample2: Iterable[float]) -> float:
    """
    Hedges' g: mean difference over the pooled standard deviation
    (Hedges & Olkin 1985, p. 78, formula 3; no small-sample correction).

    Identical-valued samples give a zero pooled std; the result is then NaN
    or +/-inf rather than an exception.
    """
    return _standardize(observed_difference(sample1, sample2),
                        pooled_std(sample1, sample2))


# -------------------------
# p-value
# -------------------------

def permutation_pvalue(
    null_distribution: Iterable[float],
    observed: float,
    sidedness: Sidedness = "both",
) -> float:
    """
    (count of more extreme differences + 1) / (number of permutations + 1)

    - both: |d| > |observed|
    - smaller: d < observed
    - larger: d > observed

    Ties with the observed value do not count as more extreme.
    """
    d = np.asarray(null_distribution, dtype=float)
    if sidedness == "both":
        extreme = np.abs(d) > abs(observed)
    elif sidedness == "smaller":
        extreme = d < observed
    elif sidedness == "larger":
        extreme = d > observed
    else:
        raise InvalidArgument(f"sidedness must be one of {SIDEDNESS}, got {sidedness!r}")
    return (int(np.count_nonzero(extreme)) + 1) / (len(d) + 1)


# -------------------------
# Null distribution
# -------------------------

def _exact_batch(pooled: PooledSample, start: int, stop: int) -> np.ndarray:
    group1 = CombinationEnumerator(pooled.n, pooled.n1).block(start, stop)
    m = len(group1)
    rest = np.ones((m, pooled.n), dtype=bool)
    rest[np.arange(m)[:, None], group1] = False
    # nonzero walks rows in order, so each row of group2 is ascending
    group2 = np.nonzero(rest)[1].reshape(m, pooled.n2)
    return pooled.differences(group1, group2)

def _random_batch(pooled: PooledSample, size: int, seed: np.random.SeedSequence) -> np.ndarray:
    rng = np.random.default_rng(seed)
    perms = rng.permuted(np.tile(np.arange(pooled.n), (size, 1)), axis=1)
    return pooled.differences(perms[:, :pooled.n1], perms[:, pooled.n1:])

def _batches(total: int, batch_size: int) -> Iterator[Tuple[int, int]]:
    for start in range(0, total, batch_size):
        yield start, min(start + batch_size, total)

def _report(progress: ProgressCallback, stride: int, start: int, stop: int, total: int) -> None:
    first = (start // stride + 1) * stride
    for i in range(first, stop + 1, stride):
        progress(i, total)

def null_distribution(
    pooled: PooledSample,
    n_permutations: Optional[int] = None,
    exact: bool = False,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    batch_size: int = 1000,
    progress: Optional[ProgressCallback] = None,
    progress_every: int = 0,
) -> np.ndarray:
    """
    Mean differences under relabeling, one per assignment.

    exact=True walks all comb(n, n1) partitions in lexicographic order of the
    first group's indices and ignores n_permutations.
    Otherwise every assignment is an independent uniform permutation of the
    pooled indices. Batches run through joblib; random batches get child
    seeds spawned from `seed`, so the result does not depend on n_jobs.
    """
    if exact:
        n_permutations = math.comb(pooled.n, pooled.n1)
    out = np.empty(n_permutations, dtype=float)
    schedule = list(_batches(n_permutations, batch_size))

    if exact:
        tasks = (delayed(_exact_batch)(pooled, start, stop) for start, stop in schedule)
    else:
        children = np.random.SeedSequence(seed).spawn(len(schedule))
        tasks = (delayed(_random_batch)(pooled, stop - start, child)
                 for (start, stop), child in zip(schedule, children))

    logger.debug("Scheduling %d batches of up to %d on n_jobs=%d",
                 len(schedule), batch_size, n_jobs)

    results = Parallel(n_jobs=n_jobs, return_as="generator")(tasks)
    for diffs, (start, stop) in zip(results, schedule):
        out[start:stop] = diffs
        if progress is not None and progress_every > 0:
            _report(progress, progress_every, start, stop, n_permutations)
    return out


# -------------------------
# Permutation test
# -------------------------

@dataclass(frozen=True)
class PermutationResult:
    """
    Iterating yields (p_value, observed_difference, effect_size), so
    `p, diff, g = permutation_test(...)` works.
    """
    p_value: float
    observed_difference: float
    effect_size: float
    n_permutations: int
    sidedness: str
    exact: bool
    null_distribution: np.ndarray = field(repr=False, compare=False)

    def __iter__(self):
        return iter((self.p_value, self.observed_difference, self.effect_size))

def _check_permutations(permutations, exact: bool) -> None:
    if permutations is None and exact:
        return
    if not is_integer(permutations) or permutations < 1:
        raise InvalidArgument(f"permutations must be a positive integer, got {permutations!r}")

def permutation_test(
    sample1: Iterable[float],
    sample2: Iterable[float],
    permutations: Optional[int] = None,
    *,
    sidedness: Sidedness = "both",
    exact: bool = False,
    plot_result: bool = False,
    show_progress: int = 0,
    seed: Optional[int] = None,
    n_jobs: int = 1,
    batch_size: int = 1000,
    progress: Optional[ProgressCallback] = None,
    plotter: Optional[Plotter] = None,
    options: Optional[TestOptions] = None,
) -> PermutationResult:
    """
    Permutation test for a difference in means between two samples.

    sample1 is the experimental sample, sample2 the control. NaN entries are
    treated as missing. `permutations` is ignored with exact=True and may be
    None there. A prebuilt `options` replaces the keyword options.

    progress is called as progress(i, total) every `show_progress`-th
    iteration (a tqdm bar when not given); plotter is called as
    plotter(null_distribution, observed_difference, effect_size, p_value)
    when plot_result is set (a matplotlib histogram when not given).
    """
    if options is None:
        options = TestOptions(
            sidedness=sidedness,
            exact=exact,
            plot_result=plot_result,
            show_progress=show_progress,
            seed=seed,
            n_jobs=n_jobs,
            batch_size=batch_size,
        )
    x1 = as_sample(sample1, "sample1")
    x2 = as_sample(sample2, "sample2")
    _check_permutations(permutations, options.exact)

    pooled = PooledSample(x1, x2)
    observed = pooled.observed()
    effect = _standardize(observed, pooled_std(x1, x2))

    space = math.comb(pooled.n, pooled.n1)
    if not options.exact and permutations > space:
        msg = (f"the number of permutations ({permutations}) is higher than the number "
               f"of possible combinations ({space}); consider running an exact test "
               f"using the 'exact' argument")
        logger.warning(msg)
        warnings.warn(msg, PrecisionWarning, stacklevel=2)

    n_permutations = space if options.exact else int(permutations)
    logger.info("Permutation test: n1=%d, n2=%d, %s, %d permutations, sidedness=%s",
                pooled.n1, pooled.n2, "exact" if options.exact else "random",
                n_permutations, options.sidedness)

    owned = options.show_progress > 0 and progress is None
    if owned:
        progress = TqdmProgress()
    try:
        diffs = null_distribution(
            pooled,
            n_permutations,
            exact=options.exact,
            seed=options.seed,
            n_jobs=options.n_jobs,
            batch_size=options.batch_size,
            progress=progress,
            progress_every=options.show_progress,
        )
    finally:
        if owned:
            progress.close()

    p = permutation_pvalue(diffs, observed, options.sidedness)

    if options.plot_result:
        if plotter is None:
            from .viz import plot_null_distribution
            plotter = plot_null_distribution
        plotter(diffs, observed, effect, p)

    return PermutationResult(
        p_value=float(p),
        observed_difference=observed,
        effect_size=effect,
        n_permutations=n_permutations,
        sidedness=options.sidedness,
        exact=options.exact,
        null_distribution=diffs,
    )


# -------------------------
# Parametric reference
# -------------------------

_ALTERNATIVE = {"both": "two-sided", "smaller": "less", "larger": "greater"}

@dataclass(frozen=True)
class ReferenceResult:
    mean1: float
    mean2: float
    t: float
    df: float
    p_value: float
    method: str

def student_reference(
    sample1: Iterable[float],
    sample2: Iterable[float],
    sidedness: Sidedness = "both",
) -> ReferenceResult:
    """
    Pooled-variance two-sample t-test on the same data, for orientation next
    to the permutation p-value. NaN entries are omitted.
    """
    if sidedness not in _ALTERNATIVE:
        raise InvalidArgument(f"sidedness must be one of {SIDEDNESS}, got {sidedness!r}")
    x1 = as_sample(sample1, "sample1")
    x2 = as_sample(sample2, "sample2")
    res = stats.ttest_ind(x1, x2, equal_var=True, nan_policy="omit",
                          alternative=_ALTERNATIVE[sidedness])
    return ReferenceResult(
        mean1=nan_mean(x1),
        mean2=nan_mean(x2),
        t=float(res.statistic),
        df=float(count_present(x1) + count_present(x2) - 2),
        p_value=float(res.pvalue),
        method="Student t-test (pooled variance)",
    )
