# Services/request_scope.py
import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from fastapi import Request

from Services.errors import InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestCancelled(Exception):
    """The request went away or ran past its deadline before the store answered."""


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def run_bounded(request: Request, operation: Awaitable[T], timeout: Optional[float]) -> T:
    """
    Await ``operation`` for as long as the client is connected and the
    deadline has not passed. Otherwise cancel it, which aborts the statement
    in flight, and fail with ``InternalError``.
    """
    work = asyncio.ensure_future(operation)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait(
            {work, watcher}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        watcher.cancel()

    if work in done:
        return work.result()

    work.cancel()
    await asyncio.wait({work})
    if watcher in done:
        reason = RequestCancelled(f"client disconnected from {request.url.path}")
    else:
        reason = RequestCancelled(f"{request.url.path} exceeded its {timeout}s deadline")
    logger.error(f"Aborted store call: {reason}")
    raise InternalError(reason)
