import pytest

from permtest.errors import InvalidArgument
from permtest.power import (
    CONFIDENCE_COVERAGE,
    achieved_precision,
    permutation_precision,
    plan_permutations,
)


def test_known_value():
    # round(4 * 0.05 * 0.95 / 0.01^2) = 1900
    assert permutation_precision(0.01, alpha=0.05, confidence_level=2) == 1900


def test_monotonic_in_precision_and_level():
    counts = [permutation_precision(p, 0.05, 2) for p in (0.001, 0.005, 0.01, 0.05)]
    assert counts == sorted(counts, reverse=True)

    by_level = [permutation_precision(0.01, 0.05, level) for level in (1, 2, 3)]
    assert by_level == sorted(by_level)
    assert by_level[0] == 475      # 0.0475 / 0.0001
    assert by_level[2] == 4275     # 9 * 0.0475 / 0.0001


def test_achieved_precision_inverts_estimate():
    assert achieved_precision(1900, 0.05, 2) == pytest.approx(0.01)


def test_plan_reports_coverage():
    plan = plan_permutations(0.005, alpha=0.01, confidence_level=3)
    assert plan.coverage == CONFIDENCE_COVERAGE[3] == 0.99
    assert plan.n_permutations == permutation_precision(0.005, 0.01, 3)


@pytest.mark.parametrize("kwargs", [
    {"precision": 0.0},
    {"precision": -0.01},
    {"precision": 0.01, "alpha": 0.0},
    {"precision": 0.01, "alpha": 1.5},
    {"precision": 0.01, "confidence_level": 4},
    {"precision": 0.01, "confidence_level": 0},
])
def test_rejects_bad_arguments(kwargs):
    with pytest.raises(InvalidArgument):
        permutation_precision(**kwargs)


def test_achieved_precision_rejects_bad_count():
    with pytest.raises(InvalidArgument):
        achieved_precision(0)
    with pytest.raises(InvalidArgument):
        achieved_precision(10.5)
