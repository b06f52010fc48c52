"""
permtest/utils.py

Utility functions used across the package:
  - Input coercion for samples
  - NaN-excluding summary statistics
  - Formatting for reports
"""

from __future__ import annotations
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable

import numpy as np

from .errors import InvalidArgument


# -------------------------
# Validation / coercion
# -------------------------

def is_integer(x) -> bool:
    return isinstance(x, (int, np.integer)) and not isinstance(x, (bool, np.bool_))

def as_sample(x: Iterable[float], name: str = "sample") -> np.ndarray:
    """
    Coerce a numeric sequence to a 1D float array.

    Row and column vectors, shape (1, n) or (n, 1), are flattened. NaN
    entries are kept; they mark missing observations.
    """
    try:
        arr = np.asarray(x if isinstance(x, np.ndarray) else list(x), dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{name} must be a sequence of numbers.") from exc

    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.ravel()
    if arr.ndim != 1:
        raise InvalidArgument(f"{name} must be 1D.")
    if arr.size == 0:
        raise InvalidArgument(f"{name} must not be empty.")
    return arr


# -------------------------
# NaN-excluding statistics
# -------------------------

def nan_mean(x: np.ndarray) -> float:
    """
    Mean over the non-NaN entries. An all-NaN input gives NaN instead of
    numpy's "Mean of empty slice" warning.
    """
    keep = ~np.isnan(x)
    n = int(keep.sum())
    if n == 0:
        return float("nan")
    return float(x[keep].sum() / n)

def count_present(x: np.ndarray) -> int:
    return int(np.count_nonzero(~np.isnan(x)))


# -------------------------
# Reporting / formatting
# -------------------------

def as_report_dict(obj) -> Dict[str, Any]:
    """
    Convert a dataclass result to plain, JSON-serializable values.
    numpy arrays become lists and numpy scalars become Python scalars.
    """
    if is_dataclass(obj):
        obj = asdict(obj)
    if not isinstance(obj, dict):
        raise TypeError("Expected dataclass or dict.")
    return {k: _plain(v) for k, v in obj.items()}

def _plain(v: Any) -> Any:
    if isinstance(v, np.ndarray):
        return v.tolist()
    if isinstance(v, (np.integer, np.floating)):
        return v.item()
    if isinstance(v, dict):
        return {k: _plain(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    return v

def fmt_float(x: float, digits: int = 4) -> str:
    return f"{x:.{digits}f}"

def fmt_pvalue(p: float) -> str:
    if p < 1e-4:
        return "<1e-4"
    return f"{p:.4f}"
