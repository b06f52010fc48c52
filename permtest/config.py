"""
permtest/config.py

Options for a permutation test, validated when constructed.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Literal, Optional, get_args

from .errors import InvalidArgument
from .utils import is_integer


Sidedness = Literal["both", "smaller", "larger"]
SIDEDNESS: tuple = get_args(Sidedness)


@dataclass(frozen=True)
class TestOptions:
    """
    sidedness:
      - "both": two-sided
      - "smaller": alternative is mean(sample1) < mean(sample2)
      - "larger": alternative is mean(sample1) > mean(sample2)
    exact: enumerate every partition instead of sampling; the requested
      permutation count is then ignored.
    plot_result: hand the null distribution to a plotter when done.
    show_progress: 0 disables progress; N > 0 reports every N-th iteration.
    seed: seed for random permutations (None = fresh entropy).
    n_jobs: joblib workers (-1 = all cores).
    batch_size: iterations computed per vectorized batch.
    """

    __test__ = False  # not a pytest test class

    sidedness: Sidedness = "both"
    exact: bool = False
    plot_result: bool = False
    show_progress: int = 0
    seed: Optional[int] = None
    n_jobs: int = 1
    batch_size: int = 1000

    def __post_init__(self) -> None:
        if self.sidedness not in SIDEDNESS:
            raise InvalidArgument(
                f"sidedness must be one of {SIDEDNESS}, got {self.sidedness!r}"
            )
        if not is_integer(self.show_progress) or self.show_progress < 0:
            raise InvalidArgument("show_progress must be an integer >= 0")
        if self.seed is not None and not is_integer(self.seed):
            raise InvalidArgument("seed must be an integer or None")
        if not is_integer(self.n_jobs) or self.n_jobs == 0:
            raise InvalidArgument("n_jobs must be a non-zero integer")
        if not is_integer(self.batch_size) or self.batch_size < 1:
            raise InvalidArgument("batch_size must be a positive integer")
        # accept 0/1 flags the way callers often pass them
        object.__setattr__(self, "exact", bool(self.exact))
        object.__setattr__(self, "plot_result", bool(self.plot_result))

    def with_updates(self, **changes) -> "TestOptions":
        return replace(self, **changes)
