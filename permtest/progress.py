"""
permtest/progress.py

Progress reporters for long permutation runs.

A reporter is any callable taking (current_iteration, total_iterations). The
engine calls it at the stride chosen with `show_progress`. Raising from the
callable aborts the run, which is how callers cancel.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ProgressCallback(Protocol):
    def __call__(self, current: int, total: int) -> None: ...


class TqdmProgress:
    """tqdm bar that jumps to `current` on every call and closes at the end."""

    def __init__(self, desc: str = "permutationTest", leave: bool = False):
        self.desc = desc
        self.leave = leave
        self._bar: Optional[tqdm] = None

    def __call__(self, current: int, total: int) -> None:
        if self._bar is None:
            self._bar = tqdm(total=total, desc=self.desc, leave=self.leave, unit="perm")
        self._bar.update(current - self._bar.n)
        self._bar.set_postfix_str(f"Permutation {current} of {total}")
        if current >= total:
            self.close()

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None


class LoggingProgress:
    """Log a line per report instead of drawing a bar."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, current: int, total: int) -> None:
        logger.log(self.level, "Permutation %d of %d", current, total)
