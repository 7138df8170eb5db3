# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Dispatching of multi-request write operations (the chunks of insert_many,
the commands of bulk_write) with bounded concurrency.

Ordered batches run one unit at a time on the calling thread and stop at
the first failure. Unordered batches run up to `concurrency` units at once
(a thread pool living for the duration of the call, or a semaphore over
gathered tasks for coroutines) and always run every unit. Either way the
outcome lists the results in submission order, whatever the completion order.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

U = TypeVar("U")
T = TypeVar("T")

logger = logging.getLogger(__name__)


def check_batch_parameters(
    *,
    ordered: bool,
    concurrency: int,
    chunk_size: int | None = None,
    max_chunk_size: int | None = None,
) -> None:
    """
    Validate the parameters of a batch operation. To be called before
    any request is made.

    Raises:
        ValueError: for ordered batches with concurrency, or out-of-range values.
    """
    if concurrency < 1:
        raise ValueError(f"Concurrency must be a positive integer (got {concurrency}).")
    if ordered and concurrency > 1:
        raise ValueError("Cannot run ordered batches concurrently.")
    if chunk_size is not None:
        if chunk_size < 1:
            raise ValueError(
                f"Chunk size must be a positive integer (got {chunk_size})."
            )
        if max_chunk_size is not None and chunk_size > max_chunk_size:
            raise ValueError(
                f"Chunk size cannot exceed {max_chunk_size} (got {chunk_size})."
            )


def chunk_items(items: Sequence[T], chunk_size: int) -> list[list[T]]:
    """Split items into contiguous chunks, the last one possibly shorter."""
    return [
        list(items[i : i + chunk_size]) for i in range(0, len(items), chunk_size)
    ]


@dataclass
class BatchOutcome(Generic[T]):
    """
    What came out of running a batch.

    Attributes:
        results: one slot per unit, in submission order. A slot is None if
            its unit failed or was never run (ordered batch after a failure).
        errors: one slot per unit, in submission order: the exception raised
            by the unit, or None.
    """

    results: list[T | None]
    errors: list[Exception | None] = field(default_factory=list)

    @property
    def exceptions(self) -> list[Exception]:
        """The errors of the failed units, in submission order."""
        return [exc for exc in self.errors if exc is not None]

    @property
    def succeeded(self) -> list[T]:
        return [result for result in self.results if result is not None]


def run_batch(
    units: Sequence[U],
    work: Callable[[U], T],
    *,
    ordered: bool,
    concurrency: int,
) -> BatchOutcome[T]:
    """
    Apply `work` to every unit, sequentially or concurrently.

    Args:
        units: the items to process, e.g. chunks of documents.
        work: the function running one unit (typically one request).
        ordered: if True, run units one by one and stop at the first error.
        concurrency: the maximum number of units in flight (unordered only).

    Returns:
        a BatchOutcome. Errors are collected there, never raised.
    """
    results: list[T | None] = [None] * len(units)
    slot_exceptions: list[Exception | None] = [None] * len(units)
    if ordered or concurrency == 1:
        for unit_i, unit in enumerate(units):
            try:
                results[unit_i] = work(unit)
            except Exception as exc:
                slot_exceptions[unit_i] = exc
                if ordered:
                    break
    else:
        with ThreadPoolExecutor(max_workers=concurrency) as executor:
            futures = [executor.submit(work, unit) for unit in units]
        # the executor is joined here: every future is done
        for unit_i, future in enumerate(futures):
            exc = future.exception()
            if exc is None:
                results[unit_i] = future.result()
            elif isinstance(exc, Exception):
                slot_exceptions[unit_i] = exc
            else:
                raise exc
    return BatchOutcome(results=results, errors=slot_exceptions)


async def async_run_batch(
    units: Sequence[U],
    work: Callable[[U], Awaitable[T]],
    *,
    ordered: bool,
    concurrency: int,
) -> BatchOutcome[T]:
    """
    The coroutine counterpart of `run_batch`. Concurrency is bounded by a
    semaphore. If the caller is cancelled, the pending tasks are cancelled
    and awaited before the cancellation propagates.
    """
    results: list[T | None] = [None] * len(units)
    slot_exceptions: list[Exception | None] = [None] * len(units)
    if ordered or concurrency == 1:
        for unit_i, unit in enumerate(units):
            try:
                results[unit_i] = await work(unit)
            except Exception as exc:
                slot_exceptions[unit_i] = exc
                if ordered:
                    break
    else:
        semaphore = asyncio.Semaphore(concurrency)

        async def _bounded_work(unit: U) -> T:
            async with semaphore:
                return await work(unit)

        tasks = [asyncio.ensure_future(_bounded_work(unit)) for unit in units]
        try:
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        for unit_i, outcome in enumerate(outcomes):
            if isinstance(outcome, Exception):
                slot_exceptions[unit_i] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results[unit_i] = outcome
    return BatchOutcome(results=results, errors=slot_exceptions)
