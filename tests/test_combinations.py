import itertools
import math

import numpy as np
import pytest

from permtest.combinations import CombinationEnumerator
from permtest.errors import InvalidArgument


def test_matches_itertools_order():
    enum = CombinationEnumerator(5, 3)
    assert len(enum) == 10
    assert list(enum) == list(itertools.combinations(range(5), 3))
    # restartable: a second pass gives the same sequence
    assert list(enum) == list(enum)


def test_rank_and_unrank_follow_iteration_order():
    enum = CombinationEnumerator(7, 3)
    for i, combo in enumerate(enum):
        assert enum.unrank(i) == combo
        assert enum.rank(combo) == i
    assert enum[-1] == (4, 5, 6)


def test_partitions_cover_every_combination_once():
    enum = CombinationEnumerator(8, 3)
    parts = enum.partition(4)
    assert len(parts) == 4
    assert parts[0][0] == 0 and parts[-1][1] == math.comb(8, 3)

    seen = [c for start, stop in parts for c in enum.iter_range(start, stop)]
    assert seen == list(enum)
    assert len(set(seen)) == len(enum)


def test_partition_never_makes_empty_parts():
    enum = CombinationEnumerator(3, 3)
    assert enum.partition(5) == [(0, 1)]


def test_iter_range_clamps_stop():
    enum = CombinationEnumerator(5, 2)
    assert list(enum.iter_range(8, 100)) == [(2, 4), (3, 4)]
    assert list(enum.iter_range(5, 5)) == []


def test_block_shape_and_complement():
    enum = CombinationEnumerator(6, 2)
    block = enum.block(3, 7)
    assert block.shape == (4, 2)
    assert np.array_equal(block, np.array([(0, 4), (0, 5), (1, 2), (1, 3)]))
    assert enum.complement((1, 3)) == (0, 2, 4, 5)


def test_empty_combination():
    enum = CombinationEnumerator(4, 0)
    assert len(enum) == 1
    assert list(enum) == [()]
    assert list(enum.iter_range(0, 1)) == [()]


def test_invalid_arguments():
    with pytest.raises(InvalidArgument):
        CombinationEnumerator(3, 4)
    enum = CombinationEnumerator(5, 2)
    with pytest.raises(IndexError):
        enum.unrank(10)
    with pytest.raises(InvalidArgument):
        enum.rank((3, 1))
    with pytest.raises(InvalidArgument):
        enum.rank((1, 5))
    with pytest.raises(InvalidArgument):
        enum.partition(0)
