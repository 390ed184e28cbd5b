import os
import threading

import pytest

from theme_map.errors import ConfigError
from theme_map.row_scheduler import RowScheduler, resolve_workers


def _recording():
    seen = []
    lock = threading.Lock()

    def process_row(y):
        with lock:
            seen.append(y)

    return seen, process_row


@pytest.mark.parametrize("workers", [1, 2, 50])
def test_every_row_processed_exactly_once(workers):
    seen, process_row = _recording()

    per_worker = RowScheduler(workers).run(range(3, 13), process_row)

    assert sorted(seen) == list(range(3, 13))
    assert len(per_worker) == workers
    assert sum(per_worker) == 10


def test_single_worker_sees_rows_in_ascending_order():
    seen, process_row = _recording()

    RowScheduler(1).run(range(100), process_row)

    assert seen == list(range(100))


def test_empty_row_range_returns_immediately():
    seen, process_row = _recording()

    per_worker = RowScheduler(4).run(range(0), process_row)

    assert seen == []
    assert per_worker == [0, 0, 0, 0]


def test_worker_failure_aborts_the_run():
    processed = []

    def process_row(y):
        if y == 3:
            raise RuntimeError("row 3 exploded")
        processed.append(y)

    with pytest.raises(RuntimeError, match="row 3 exploded"):
        RowScheduler(4, queue_depth=1).run(range(10_000), process_row)

    assert len(processed) < 10_000


def test_failing_progress_callback_aborts_the_run():
    def progress(done, total):
        raise BrokenPipeError("stderr closed")

    with pytest.raises(BrokenPipeError):
        RowScheduler(1).run(range(100), lambda y: None, progress)


def test_progress_reports_every_row():
    calls = []
    lock = threading.Lock()

    def progress(done, total):
        with lock:
            calls.append((done, total))

    RowScheduler(3).run(range(25), lambda y: None, progress)

    assert sorted(done for done, _ in calls) == list(range(1, 26))
    assert {total for _, total in calls} == {25}


def test_resolve_workers_defaults_to_host_parallelism():
    assert resolve_workers(None) == (os.cpu_count() or 1)
    assert resolve_workers(0) == (os.cpu_count() or 1)
    assert resolve_workers(5) == 5


def test_negative_worker_count_is_rejected():
    with pytest.raises(ConfigError):
        resolve_workers(-1)
    with pytest.raises(ConfigError):
        RowScheduler(-2)


def test_default_queue_depth_follows_worker_count():
    assert RowScheduler(3).queue_depth == 6
    assert RowScheduler(3, queue_depth=1).queue_depth == 1
