"""
Bounded fan-out over a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from ..exceptions import PartialFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def fan_out(
    func: Callable[[T], R],
    items: Sequence[T],
    max_workers: int = 10,
    label: Callable[[T], str] = str,
) -> List[Tuple[T, Optional[R]]]:
    """
    Run ``func`` over ``items`` with at most ``max_workers`` calls in flight.

    A failing item is logged as a partial failure and yields ``None``; it
    never aborts the rest. Results come back in input order.

    Returns:
        ``(item, result)`` pairs in the order of ``items``
    """
    if not items:
        return []

    results: List[Optional[R]] = [None] * len(items)
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(items)))) as executor:
        futures = {executor.submit(func, item): i for i, item in enumerate(items)}
        for future in as_completed(futures):
            i = futures[future]
            try:
                results[i] = future.result()
            except Exception as e:
                failure = PartialFailure(label(items[i]), e)
                logger.warning(f"Dropping {failure}")

    return list(zip(items, results))


def run_concurrently(*calls: Callable[[], R]) -> List[R]:
    """Run a handful of zero-argument calls at once; the first error propagates."""
    with ThreadPoolExecutor(max_workers=len(calls)) as executor:
        futures = [executor.submit(call) for call in calls]
        return [future.result() for future in futures]
