from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional, Set, Tuple

from journy.core.config import settings
from journy.core.logging import get_logger
from journy.http.types import HttpClient, HttpRequest, HttpResponse, aclose_client
from journy.observability.metrics import QUEUE_DEPTH

log = get_logger("journy.queue")

Work = Callable[[], Awaitable[Any]]


class DispatchQueue:
    """Bounded-concurrency executor that starts work strictly in FIFO order.

    ``add`` returns a future that settles with the outcome of the work once it
    has been started and finished. Work items start in the order they were
    added; at most ``concurrency`` of them are running at any time. A failing
    item settles its own future and never stops later items from starting.
    """

    def __init__(self, concurrency: Optional[int] = None):
        concurrency = (
            concurrency if concurrency is not None else settings.QUEUE_CONCURRENCY
        )
        if not isinstance(concurrency, int) or concurrency < 1:
            raise ValueError(
                f"concurrency must be a positive integer, got {concurrency}"
            )
        self.concurrency = concurrency
        self._waiting: Deque[Tuple[Work, asyncio.Future]] = deque()
        self._running = 0
        self._tasks: Set[asyncio.Task] = set()
        self._idle: Optional[asyncio.Event] = None

    @property
    def size(self) -> int:
        """Number of items waiting for their turn."""
        return len(self._waiting)

    @property
    def pending(self) -> int:
        """Number of items currently running."""
        return self._running

    def add(self, work: Work) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        self._waiting.append((work, future))
        QUEUE_DEPTH.inc()
        self._idle_event().clear()
        self._dispatch()
        return future

    async def join(self) -> None:
        """Wait until nothing is waiting or running."""
        if not self._waiting and not self._running:
            return
        await self._idle_event().wait()

    def _idle_event(self) -> asyncio.Event:
        if self._idle is None:
            self._idle = asyncio.Event()
            self._idle.set()
        return self._idle

    def _dispatch(self) -> None:
        while self._running < self.concurrency and self._waiting:
            work, future = self._waiting.popleft()
            QUEUE_DEPTH.dec()
            if future.cancelled():
                continue
            self._running += 1
            task = asyncio.ensure_future(self._run(work, future))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        if not self._waiting and not self._running:
            self._idle_event().set()

    async def _run(self, work: Work, future: asyncio.Future) -> None:
        try:
            result = await work()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            self._running -= 1
            self._dispatch()


class QueuedHttpClient:
    """Sends requests through a ``DispatchQueue`` so they leave in call order."""

    def __init__(self, client: HttpClient, queue: Optional[DispatchQueue] = None):
        self.client = client
        self.queue = queue or DispatchQueue()

    async def send(self, request: HttpRequest) -> HttpResponse:
        log.bind(
            method=request.method, url=str(request.url), waiting=self.queue.size
        ).debug("queue.enqueue")
        return await self.queue.add(lambda: self.client.send(request))

    async def aclose(self) -> None:
        """Wait for queued requests to finish, then close the wrapped client."""
        await self.queue.join()
        await aclose_client(self.client)
