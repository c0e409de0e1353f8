"""
testing.py

Deterministic stand-ins for a transport, used to exercise the client and the
decorators without a network.

Classes:
- HttpClientFixed: always answers with one configurable response
- HttpClientMatch: answers 2xx responses, raises HttpRequestError otherwise
- HttpClientThatThrows: always fails as if no response was received
- HttpClientRecorder: delegates to a handler and records every request
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional

from journy.http.types import (
    HttpRequest,
    HttpRequestError,
    HttpRequestFailed,
    HttpResponse,
)


class HttpClientFixed:
    def __init__(self, response: HttpResponse):
        self.response = response
        self.last_request: Optional[HttpRequest] = None

    def set_response(self, response: HttpResponse) -> None:
        self.response = response

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.last_request = request
        return self.response


class HttpClientMatch:
    def __init__(self, response: HttpResponse):
        self.response = response
        self.last_request: Optional[HttpRequest] = None

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.last_request = request
        if self.response.is_success:
            return self.response
        raise HttpRequestError(
            "errorMessage",
            self.response.status_code,
            self.response.headers,
        )


class HttpClientThatThrows:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error or HttpRequestFailed("HttpClientThatThrows")

    async def send(self, request: HttpRequest) -> HttpResponse:
        raise self.error


Handler = Callable[[HttpRequest], Awaitable[HttpResponse]]


class HttpClientRecorder:
    """Records requests in the order ``send`` was entered, then runs ``handler``."""

    def __init__(self, handler: Optional[Handler] = None):
        self.handler = handler
        self.requests: List[HttpRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.handler is None:
                await asyncio.sleep(0)
                return HttpResponse()
            return await self.handler(request)
        finally:
            self.in_flight -= 1
