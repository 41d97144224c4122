import logging

from utils.progress import ProgressTracker


def test_logs_start_and_finish(caplog):
    with caplog.at_level(logging.INFO, logger="utils.progress"):
        tracker = ProgressTracker(3, enabled=False)
        for _ in range(3):
            tracker.update()
        tracker.close()

    assert caplog.messages == ["Processing 3 features", "Feature processing finished"]


def test_close_before_completion_does_not_report_finish(caplog):
    with caplog.at_level(logging.INFO, logger="utils.progress"):
        tracker = ProgressTracker(2, enabled=False)
        tracker.update()
        tracker.close()
        tracker.update()

    assert "Feature processing finished" not in caplog.messages


def test_empty_total_is_silent(caplog):
    with caplog.at_level(logging.INFO, logger="utils.progress"):
        ProgressTracker(0).close()
    assert caplog.messages == []
