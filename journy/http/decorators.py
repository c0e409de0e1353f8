from __future__ import annotations

from journy.core.logging import get_logger
from journy.http.types import HttpClient, HttpRequest, HttpResponse, aclose_client

log = get_logger("journy.http")

API_KEY_HEADER = "x-api-key"


class ApiHttpClient:
    """Adds the ``x-api-key`` header to every request sent through ``client``."""

    def __init__(self, api_key: str, client: HttpClient):
        if not api_key or not api_key.strip():
            raise ValueError("The API key cannot be empty.")
        self.api_key = api_key
        self.client = client

    async def aclose(self) -> None:
        await aclose_client(self.client)

    async def send(self, request: HttpRequest) -> HttpResponse:
        return await self.client.send(
            request.with_headers({API_KEY_HEADER: self.api_key})
        )


class LoggingHttpClient:
    def __init__(self, client: HttpClient):
        self.client = client

    async def send(self, request: HttpRequest) -> HttpResponse:
        log.bind(method=request.method, url=str(request.url)).debug("http.request")
        response = await self.client.send(request)
        log.bind(status=response.status_code, body=response.body).debug(
            "http.response"
        )
        return response

    async def aclose(self) -> None:
        await aclose_client(self.client)
