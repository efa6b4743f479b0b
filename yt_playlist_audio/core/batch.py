"""
Batch runners: fan a list of WorkItems out to a retrying item processor.

- run_batch: bounded worker pool (at most ``limit`` items in flight), fail-soft
- run_sequential: one item at a time in input order, for timing comparisons

Both return every item that failed after its retries; neither raises on item failures.
Failure order from run_batch follows completion order, not input order.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional, Sequence

from .. import config
from .models import ItemFailure, WorkItem
from .retry import ItemProcessor, RetryPolicy, attempt_with_retry

logger = logging.getLogger(__name__)

ItemDoneCallback = Callable[[WorkItem, Optional[BaseException]], None]


def _run_one(
    item: WorkItem,
    processor: ItemProcessor,
    policy: RetryPolicy,
    on_item_done: Optional[ItemDoneCallback],
) -> Optional[ItemFailure]:
    error: Optional[BaseException] = None
    try:
        attempt_with_retry(item, processor, policy)
    except (KeyboardInterrupt, SystemExit):
        raise
    except BaseException as e:
        # Non-Exception errors skip the retry loop but still count as this item's failure.
        error = e

    if on_item_done is not None:
        try:
            on_item_done(item, error)
        except Exception as e:
            logger.error(f"Item callback failed for {item.name}: {e}")

    if error is None:
        logger.debug(f"Done: {item.name}")
        return None
    return ItemFailure(item=item, cause=error)


def run_batch(
    items: Sequence[WorkItem],
    processor: ItemProcessor,
    limit: int = config.DOWNLOAD_CONCURRENCY,
    policy: Optional[RetryPolicy] = None,
    *,
    on_item_done: Optional[ItemDoneCallback] = None,
) -> list[ItemFailure]:
    """
    Process every item with at most ``limit`` concurrent processor calls.

    Blocks until every item has either succeeded or exhausted its retries.
    """
    try:
        limit = int(limit)
    except Exception as e:
        raise ValueError(f"Invalid concurrency limit: {limit!r}") from e
    if limit < 1:
        raise ValueError(f"Concurrency limit must be >= 1, got {limit}")

    items = list(items)
    if not items:
        return []

    policy = policy or RetryPolicy()
    workers = min(limit, len(items))

    q: queue.Queue[Optional[WorkItem]] = queue.Queue()
    for item in items:
        q.put(item)
    for _ in range(workers):
        q.put(None)

    failures: list[ItemFailure] = []
    failures_lock = threading.Lock()

    def worker() -> None:
        while True:
            item = q.get()
            try:
                if item is None:
                    break
                failure = _run_one(item, processor, policy, on_item_done)
                if failure is not None:
                    with failures_lock:
                        failures.append(failure)
            except BaseException as e:
                # Workers outlive any item error so queued items are never skipped.
                logger.exception(f"Unexpected error while processing {getattr(item, 'name', item)}")
                if item is not None:
                    with failures_lock:
                        failures.append(ItemFailure(item=item, cause=e))
            finally:
                q.task_done()

    logger.debug(f"Starting batch: items={len(items)} workers={workers}")
    threads: list[threading.Thread] = []
    for i in range(workers):
        t = threading.Thread(target=worker, name=f"worker-{i+1}", daemon=True)
        threads.append(t)
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    return failures


def run_sequential(
    items: Sequence[WorkItem],
    processor: ItemProcessor,
    policy: Optional[RetryPolicy] = None,
    *,
    on_item_done: Optional[ItemDoneCallback] = None,
) -> list[ItemFailure]:
    """Process items one at a time; failures come back in input order."""
    policy = policy or RetryPolicy()
    failures: list[ItemFailure] = []
    for item in items:
        failure = _run_one(item, processor, policy, on_item_done)
        if failure is not None:
            failures.append(failure)
    return failures
