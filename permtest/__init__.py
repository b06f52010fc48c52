"""
permtest: permutation (randomization) tests for a difference in means between
two independent samples, and planning of the permutation count.

Public API is re-exported here for convenience.
"""

from importlib.metadata import PackageNotFoundError, version as _version

# ---- Version ----
try:
    __version__ = _version("permtest")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

# ---- Re-exports ----
# Errors / options
from .errors import InvalidArgument, PrecisionWarning  # noqa: F401
from .config import TestOptions  # noqa: F401

# Permutation test
from .stats import (  # noqa: F401
    PermutationResult,
    permutation_test,
    permutation_pvalue,
    observed_difference,
    pooled_std,
    hedges_g,
    student_reference,
)

# Combination enumeration
from .combinations import CombinationEnumerator  # noqa: F401

# Permutation count planning
from .power import (  # noqa: F401
    permutation_precision,
    achieved_precision,
    plan_permutations,
)

__all__ = [
    "__version__",
    # errors / options
    "InvalidArgument",
    "PrecisionWarning",
    "TestOptions",
    # stats
    "PermutationResult",
    "permutation_test",
    "permutation_pvalue",
    "observed_difference",
    "pooled_std",
    "hedges_g",
    "student_reference",
    # combinations
    "CombinationEnumerator",
    # power
    "permutation_precision",
    "achieved_precision",
    "plan_permutations",
]
