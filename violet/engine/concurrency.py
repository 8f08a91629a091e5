"""Running sibling coroutines together.

Used for a task's dependencies and for the branches of a ``parallel``
action. Two failure modes are supported:

- fail fast: siblings share an ``asyncio.TaskGroup``; the first failure
  cancels whatever is still running and is re-raised on its own, not
  wrapped in an ``ExceptionGroup``.
- run to completion: every sibling finishes (or fails) independently and
  the first failure in submission order is re-raised afterwards.
"""

import asyncio
from collections.abc import Coroutine, Iterable
from typing import Any


async def run_concurrently(coros: Iterable[Coroutine[Any, Any, Any]], *, fail_fast: bool = True) -> list[Any]:
    """Start every coroutine at once and wait for all of them.

    Args:
        coros: Coroutines to run; started in iteration order
        fail_fast: Cancel the remaining siblings on the first failure

    Returns:
        Results in submission order

    Raises:
        Exception: The first failure raised by any coroutine
    """
    pending = list(coros)
    if not pending:
        return []

    if not fail_fast:
        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results

    try:
        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(coro) for coro in pending]
    except BaseExceptionGroup as eg:
        first = eg.exceptions[0]
    else:
        return [task.result() for task in tasks]
    raise first
