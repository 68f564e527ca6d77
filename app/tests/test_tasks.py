"""Tests for the background runner."""
from launcharr.core.tasks import HISTORY_SIZE, BackgroundRunner


def test_inline_runner_runs_immediately():
    seen = []
    runner = BackgroundRunner(synchronous=True)
    runner.submit("collect", seen.append, 1)
    assert seen == [1]
    assert list(runner.submitted) == ["collect"]


def test_failures_are_logged_not_raised(caplog):
    def boom():
        raise RuntimeError("nope")

    runner = BackgroundRunner(synchronous=True)
    runner.submit("boom", boom)
    assert "Task boom failed" in caplog.text


def test_history_is_bounded():
    runner = BackgroundRunner(synchronous=True)
    for i in range(HISTORY_SIZE + 5):
        runner.submit(f"job-{i}", lambda: None)
    assert len(runner.submitted) == HISTORY_SIZE
    assert runner.submitted[0] == "job-5"
