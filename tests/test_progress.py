import logging

from permtest.progress import LoggingProgress, TqdmProgress


def test_tqdm_progress_tracks_position_and_closes():
    bar = TqdmProgress(leave=False)
    bar(250, 1000)
    assert bar._bar is not None
    assert bar._bar.n == 250
    bar(1000, 1000)
    assert bar._bar is None


def test_logging_progress(caplog):
    with caplog.at_level(logging.INFO, logger="permtest.progress"):
        LoggingProgress()(5, 10)
    assert "Permutation 5 of 10" in caplog.text
