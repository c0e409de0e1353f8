from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional

import httpx

from journy.core.config import settings
from journy.http.types import (
    HttpHeaders,
    HttpRequest,
    HttpRequestError,
    HttpRequestFailed,
    HttpResponse,
)


def request_id_from_body(body: str) -> Optional[str]:
    try:
        parsed = json.loads(body)
    except (TypeError, ValueError):
        return None
    if not isinstance(parsed, dict):
        return None
    meta = parsed.get("meta")
    if not isinstance(meta, dict):
        return None
    request_id = meta.get("requestId")
    return str(request_id) if request_id is not None else None


class HttpxHttpClient:
    """Executes one ``HttpRequest`` over an ``httpx.AsyncClient``.

    By default every received response is returned whatever its status code.
    With ``raise_for_status=True`` a non-2xx response raises
    ``HttpRequestError`` instead. Failing to obtain any response raises
    ``HttpRequestFailed``.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_ms: Optional[int] = None,
        *,
        raise_for_status: bool = False,
    ):
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.TIMEOUT_MS
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")
        self.raise_for_status = raise_for_status
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=False)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _body_kwargs(self, body: Any) -> Dict[str, Any]:
        if not body:
            return {}
        if isinstance(body, (str, bytes)):
            return {"content": body}
        return {"json": body}

    async def send(self, request: HttpRequest) -> HttpResponse:
        url = str(request.url)
        timeout = self.timeout_ms / 1000.0
        try:
            # httpx timeouts apply per phase; wait_for bounds the whole exchange
            r = await asyncio.wait_for(
                self._client.request(
                    request.method,
                    url,
                    headers=request.headers.to_dict(),
                    timeout=httpx.Timeout(timeout),
                    **self._body_kwargs(request.body),
                ),
                timeout,
            )
        except asyncio.TimeoutError as e:
            raise HttpRequestFailed(
                f"{request.method} HTTP request to {url} failed: "
                f"no response within {self.timeout_ms} ms"
            ) from e
        except httpx.HTTPError as e:
            raise HttpRequestFailed(
                f"{request.method} HTTP request to {url} failed: {e}"
            ) from e

        headers = HttpHeaders(dict(r.headers.items()))
        if self.raise_for_status:
            try:
                r.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise HttpRequestError(
                    f"{request.method} HTTP request to {url} failed: {e} -> "
                    f"{json.dumps(r.text)}",
                    r.status_code,
                    headers,
                    request_id=request_id_from_body(r.text),
                ) from e

        return HttpResponse(r.status_code, headers, r.text or "")
