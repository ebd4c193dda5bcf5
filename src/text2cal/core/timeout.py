"""Race an awaitable against a timer: first settled wins, the loser is cancelled."""

import asyncio
import logging
from typing import Awaitable, TypeVar

from text2cal.exceptions.errors import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_timeout(operation: Awaitable[T], timeout: float, name: str = "operation") -> T:
    """Await ``operation`` unless ``timeout`` seconds pass first.

    Args:
        operation: Coroutine or future doing the real work.
        timeout: Seconds before the timer wins.
        name: Label used in logs and in the timeout error.

    Returns:
        The operation's result.

    Raises:
        OperationTimeoutError: If the timer settles first; the operation is cancelled.
        Exception: Whatever the operation raised, if it settled first.
    """
    work = asyncio.ensure_future(operation)
    timer = asyncio.ensure_future(asyncio.sleep(timeout))

    try:
        done, _ = await asyncio.wait({work, timer}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        timer.cancel()
        raise

    if work in done:
        timer.cancel()
        return work.result()

    logger.warning("%s timed out after %.1fs; cancelling", name, timeout)
    # Not awaited: a call that ignores cancellation must not hold up the caller
    work.add_done_callback(_discard_late_result)
    work.cancel()
    raise OperationTimeoutError(timeout, operation=name)


def _discard_late_result(task: "asyncio.Future") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.debug("Late failure discarded after timeout: %s", type(error).__name__)
    else:
        logger.debug("Late result discarded after timeout")
