# theme_map/row_scheduler.py
from __future__ import annotations

"""
Row scheduler: a fixed pool of long-lived worker threads fed row indices
through a shared bounded queue.

One producer (the calling thread) pushes every row index once, ascending.
Each worker pulls indices until it receives a stop marker, so which worker
handles which row is whatever happens to be free. run() returns only after
every row has been produced and every worker has finished its last row.

If any worker raises, the run aborts: the producer stops feeding, idle
workers stop pulling, and the first exception is re-raised in the caller.
"""

import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from .errors import ConfigError

RowCallback = Callable[[int], None]
ProgressCallback = Callable[[int, int], None]  # (rows_done, rows_total)

_STOP = object()
_POLL_SECONDS = 0.05


def resolve_workers(requested: Optional[int]) -> int:
    """None or 0 -> host parallelism; negative counts are a config error."""
    if requested is None or requested == 0:
        return os.cpu_count() or 1
    if requested < 0:
        raise ConfigError(f"worker count must be >= 0, got {requested}")
    return int(requested)


class RowScheduler:
    def __init__(self, workers: Optional[int] = None, queue_depth: Optional[int] = None) -> None:
        self.workers = resolve_workers(workers)
        self.queue_depth = queue_depth if queue_depth else 2 * self.workers

    def run(
        self,
        rows: Iterable[int],
        process_row: RowCallback,
        progress: Optional[ProgressCallback] = None,
    ) -> List[int]:
        """
        Process every row in `rows` with `process_row`.

        Returns:
          rows handled by each worker, in worker start order.
        """
        rows = list(rows)
        total = len(rows)
        work: queue.Queue = queue.Queue(maxsize=self.queue_depth)
        abort = threading.Event()
        done_lock = threading.Lock()
        done = [0]

        def report_row() -> None:
            if progress is None:
                return
            with done_lock:
                done[0] += 1
                finished = done[0]
            progress(finished, total)

        def drain() -> int:
            handled = 0
            while not abort.is_set():
                try:
                    row = work.get(timeout=_POLL_SECONDS)
                except queue.Empty:
                    continue
                if row is _STOP:
                    break
                try:
                    process_row(row)
                    handled += 1
                    report_row()
                except BaseException:
                    abort.set()
                    raise
            return handled

        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="theme-map-row"
        ) as pool:
            futures = [pool.submit(drain) for _ in range(self.workers)]
            try:
                for row in rows:
                    if not self._offer(work, row, abort):
                        break
                for _ in range(self.workers):
                    if not self._offer(work, _STOP, abort):
                        break
            except BaseException:
                abort.set()
                raise
            # result() re-raises a failed worker's exception.
            return [f.result() for f in futures]

    @staticmethod
    def _offer(work: queue.Queue, item: object, abort: threading.Event) -> bool:
        """Blocking put that gives up once the run is aborted."""
        while not abort.is_set():
            try:
                work.put(item, timeout=_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False


__all__ = ["RowCallback", "ProgressCallback", "resolve_workers", "RowScheduler"]
