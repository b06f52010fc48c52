"""
permtest/combinations.py

Lexicographic enumeration of k-subsets of {0, ..., n-1}.

Exact permutation tests visit every way of choosing the first group from the
pooled observations. The order is the one produced by
itertools.combinations(range(n), k):

    (0, 1, 2), (0, 1, 3), ..., (n-3, n-2, n-1)

Every combination has a rank in [0, comb(n, k)). Ranks make the sequence
splittable: a worker handed [start, stop) unranks `start` once and then
steps to successors, so disjoint ranges visit every combination exactly once.
"""

from __future__ import annotations
import itertools
import math
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from .errors import InvalidArgument


Combination = Tuple[int, ...]


class CombinationEnumerator:
    """
    Lazy, restartable sequence of all k-sized index combinations of range(n).

    Iterating twice gives the same combinations in the same order. Nothing is
    materialized; len() is comb(n, k), which may be astronomically large.
    """

    def __init__(self, n: int, k: int):
        if n < 0 or k < 0 or k > n:
            raise InvalidArgument(f"Need 0 <= k <= n, got n={n}, k={k}.")
        self.n = int(n)
        self.k = int(k)
        self._total = math.comb(self.n, self.k)

    def __len__(self) -> int:
        return self._total

    def __iter__(self) -> Iterator[Combination]:
        return itertools.combinations(range(self.n), self.k)

    def __getitem__(self, index: int) -> Combination:
        return self.unrank(index)

    def __repr__(self) -> str:
        return f"CombinationEnumerator(n={self.n}, k={self.k})"

    # -------------------------
    # Ranking
    # -------------------------

    def rank(self, combination: Sequence[int]) -> int:
        """Position of `combination` in lexicographic order."""
        combo = tuple(int(c) for c in combination)
        if len(combo) != self.k or any(b <= a for a, b in zip(combo, combo[1:])):
            raise InvalidArgument("combination must be k strictly increasing indices.")
        if combo and (combo[0] < 0 or combo[-1] >= self.n):
            raise InvalidArgument(f"combination indices must lie in [0, {self.n}).")

        r = 0
        prev = -1
        for i, c in enumerate(combo):
            for skipped in range(prev + 1, c):
                r += math.comb(self.n - skipped - 1, self.k - i - 1)
            prev = c
        return r

    def unrank(self, index: int) -> Combination:
        """Combination at position `index` in lexicographic order."""
        if index < 0:
            index += self._total
        if not (0 <= index < self._total):
            raise IndexError(f"combination index {index} out of range for {self!r}")

        out: List[int] = []
        c = 0
        for i in range(self.k):
            while True:
                # combinations that put c at position i
                block = math.comb(self.n - c - 1, self.k - i - 1)
                if index < block:
                    break
                index -= block
                c += 1
            out.append(c)
            c += 1
        return tuple(out)

    # -------------------------
    # Range iteration / partitioning
    # -------------------------

    def iter_range(self, start: int, stop: int) -> Iterator[Combination]:
        """
        Yield the combinations with rank in [start, stop).
        """
        stop = min(stop, self._total)
        if start < 0:
            raise InvalidArgument("start must be >= 0")
        if start >= stop:
            return

        current = list(self.unrank(start))
        yield tuple(current)
        for _ in range(stop - start - 1):
            _advance(current, self.n)
            yield tuple(current)

    def partition(self, n_parts: int) -> List[Tuple[int, int]]:
        """
        Split the rank space into at most `n_parts` contiguous, near-equal
        [start, stop) ranges that together cover every combination once.
        """
        if n_parts < 1:
            raise InvalidArgument("n_parts must be >= 1")
        n_parts = min(n_parts, self._total)
        bounds = [self._total * i // n_parts for i in range(n_parts + 1)]
        return [(lo, hi) for lo, hi in zip(bounds[:-1], bounds[1:])]

    def block(self, start: int, stop: int) -> np.ndarray:
        """
        Combinations with rank in [start, stop) as an integer array of shape
        (m, k), one row per combination.
        """
        rows = list(self.iter_range(start, stop))
        flat = np.fromiter(itertools.chain.from_iterable(rows), dtype=np.intp,
                           count=len(rows) * self.k)
        return flat.reshape(len(rows), self.k)

    def complement(self, combination: Sequence[int]) -> Combination:
        """Indices of range(n) not in `combination`, ascending."""
        chosen = set(combination)
        return tuple(i for i in range(self.n) if i not in chosen)


def _advance(current: List[int], n: int) -> None:
    """Step `current` to its lexicographic successor in place."""
    k = len(current)
    i = k - 1
    while i >= 0 and current[i] == n - k + i:
        i -= 1
    if i < 0:
        raise IndexError("last combination has no successor")
    current[i] += 1
    for j in range(i + 1, k):
        current[j] = current[j - 1] + 1
