"""
Bounded fan-out over worker threads.

``run_bounded`` is the one concurrency primitive of the discovery engine: it
is used for the forge-level wave and for the per-forge documentation probes.
"""

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

from forgescan.exceptions import DiscoveryCancelledError

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class Outcome(Generic[R]):
    """Result of one call: ``value`` on success, ``error`` if the call raised."""

    value: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_bounded(
    items: Sequence[T],
    limit: int,
    fn: Callable[[T], R],
    cancel: threading.Event | None = None,
    thread_name_prefix: str = "forgescan",
) -> list[Outcome[R]]:
    """
    Apply ``fn`` to every item with at most ``limit`` calls in flight.

    Args:
        items: Inputs, in the order results should be returned
        limit: Concurrency ceiling (clamped to ``len(items)``)
        fn: Function to run for each item; exceptions are captured
        cancel: When set, items that have not started yet are skipped
        thread_name_prefix: Worker thread name prefix

    Returns:
        One Outcome per item; ``results[i]`` belongs to ``items[i]``

    Raises:
        ValueError: If ``limit`` is below 1
    """
    if limit < 1:
        raise ValueError(f"concurrency limit must be >= 1, got {limit}")

    if not items:
        return []

    def call(item: T) -> Outcome[R]:
        if cancel is not None and cancel.is_set():
            return Outcome(error=DiscoveryCancelledError())
        try:
            return Outcome(value=fn(item))
        except Exception as e:
            return Outcome(error=e)

    workers = min(limit, len(items))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=thread_name_prefix) as executor:
        futures = [executor.submit(call, item) for item in items]
        return [future.result() for future in futures]
