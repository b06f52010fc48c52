"""
permtest/errors.py

Exceptions and warnings raised by the package.
"""

from __future__ import annotations


class InvalidArgument(ValueError):
    """Bad input detected before any computation starts."""


class PrecisionWarning(UserWarning):
    """
    More random permutations were requested than there are distinct
    partitions of the pooled sample; the null distribution will contain
    duplicate assignments.
    """
