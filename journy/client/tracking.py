from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable, Optional

from journy.client.client import Client
from journy.client.events import Event, Properties
from journy.core.logging import get_logger
from journy.http.queue import DispatchQueue

log = get_logger("journy.tracking")


class Tracking:
    """Fire-and-forget façade over a ``Client``.

    Every method schedules the matching client call on a FIFO dispatch queue
    and returns immediately. Outcomes are not reported back to the caller:
    failed results are logged at DEBUG and unexpected exceptions at WARNING.
    Calls made while no event loop is running are dropped and logged at
    WARNING. ``flush`` waits for everything scheduled so far.
    """

    def __init__(self, client: Client, queue: Optional[DispatchQueue] = None):
        self.client = client
        self.queue = queue or DispatchQueue()

    def _schedule(self, operation: str, work: Callable[[], Awaitable[Any]]) -> None:
        try:
            future = self.queue.add(work)
        except RuntimeError as e:
            # no running event loop
            log.bind(operation=operation, error=repr(e)).warning("tracking.dropped")
            return
        future.add_done_callback(lambda f: self._discard(operation, f))

    @staticmethod
    def _discard(operation: str, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            log.bind(operation=operation, error=repr(error)).warning(
                "tracking.dropped"
            )
            return
        result = future.result()
        if result is not None and not result.success:
            log.bind(operation=operation, error=result.error.value).debug(
                "tracking.failed"
            )

    def add_event(self, event: Event) -> None:
        self._schedule("add_event", lambda: self.client.add_event(event))

    def upsert_user(
        self,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        properties: Optional[Properties] = None,
    ) -> None:
        self._schedule(
            "upsert_user",
            lambda: self.client.upsert_user(
                user_id=user_id, email=email, properties=properties
            ),
        )

    def upsert_account(
        self,
        account_id: Optional[str] = None,
        domain: Optional[str] = None,
        properties: Optional[Properties] = None,
        members: Optional[Iterable[str]] = None,
    ) -> None:
        self._schedule(
            "upsert_account",
            lambda: self.client.upsert_account(
                account_id=account_id,
                domain=domain,
                properties=properties,
                members=members,
            ),
        )

    def link(
        self,
        device_id: str,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> None:
        self._schedule(
            "link",
            lambda: self.client.link(device_id, user_id=user_id, email=email),
        )

    async def flush(self) -> None:
        await self.queue.join()
