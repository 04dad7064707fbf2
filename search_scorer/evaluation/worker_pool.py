"""
Fixed-size worker pool draining a shared work queue.

Each worker loops "take the next item, handle it" until the queue is
empty. Items are processed in no particular order and each one by exactly
one worker. The first error stops every worker from taking new items and
is raised to the caller once the pool has shut down: there are no partial
results.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_workers(
    items: Iterable[T],
    handle: Callable[[T], R],
    worker_count: int,
    *,
    name: str = "worker",
) -> List[R]:
    """
    Apply `handle` to every item using `worker_count` threads.

    Args:
        items: Work items
        handle: Function called once per item; may block on I/O
        worker_count: Number of worker threads
        name: Thread name prefix, shown in logs

    Returns:
        Results in the same order as `items`

    Raises:
        Whatever `handle` raised first
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be >= 1, got {worker_count}")

    work: "queue.Queue[Tuple[int, T]]" = queue.Queue()
    for index, item in enumerate(items):
        work.put((index, item))

    results: List[Tuple[int, R]] = []
    results_lock = threading.Lock()
    failed = threading.Event()

    def worker() -> None:
        while not failed.is_set():
            try:
                index, item = work.get_nowait()
            except queue.Empty:
                return

            try:
                result = handle(item)
            except Exception:
                failed.set()
                raise

            with results_lock:
                results.append((index, result))

    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix=name) as executor:
        futures = [executor.submit(worker) for _ in range(worker_count)]

    first_error: Optional[BaseException] = None
    for future in futures:
        error = future.exception()
        if error is not None and first_error is None:
            first_error = error

    if first_error is not None:
        raise first_error

    results.sort(key=lambda pair: pair[0])
    return [result for _, result in results]
