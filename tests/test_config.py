import pytest

from permtest.config import TestOptions
from permtest.errors import InvalidArgument


def test_defaults():
    opts = TestOptions()
    assert opts.sidedness == "both"
    assert opts.exact is False
    assert opts.plot_result is False
    assert opts.show_progress == 0
    assert opts.n_jobs == 1


def test_flags_coerced_to_bool():
    opts = TestOptions(exact=1, plot_result=0)
    assert opts.exact is True
    assert opts.plot_result is False


def test_with_updates_revalidates():
    opts = TestOptions().with_updates(sidedness="larger", show_progress=250)
    assert opts.sidedness == "larger"
    assert opts.show_progress == 250
    with pytest.raises(InvalidArgument):
        opts.with_updates(sidedness="greater")


@pytest.mark.parametrize("kwargs", [
    {"sidedness": "two-sided"},
    {"show_progress": -1},
    {"show_progress": 1.5},
    {"seed": "abc"},
    {"n_jobs": 0},
    {"batch_size": 0},
])
def test_invalid_options(kwargs):
    with pytest.raises(InvalidArgument):
        TestOptions(**kwargs)
