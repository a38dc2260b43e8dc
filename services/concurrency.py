"""Fixed-size worker pool draining a shared queue of items."""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def map_with_concurrency(
    items: Sequence[T],
    concurrency: int,
    worker: Callable[[T, int], None],
) -> None:
    """Call ``worker(item, index)`` once per item using ``concurrency`` threads.

    Returns after every item has been handled. A raising callback does not
    stop its thread; the first exception is re-raised once the pool has
    drained.
    """
    if not items:
        return

    pending: "queue.Queue[Tuple[int, T]]" = queue.Queue()
    for index, item in enumerate(items):
        pending.put((index, item))

    errors: List[BaseException] = []
    errors_lock = threading.Lock()

    def drain() -> None:
        while True:
            try:
                index, item = pending.get_nowait()
            except queue.Empty:
                return
            try:
                worker(item, index)
            except Exception as exc:
                logger.error("Worker failed on item %d: %s", index, exc)
                with errors_lock:
                    errors.append(exc)

    workers = min(max(1, concurrency), len(items))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="screen") as pool:
        futures = [pool.submit(drain) for _ in range(workers)]
        for future in futures:
            future.result()

    if errors:
        raise errors[0]
