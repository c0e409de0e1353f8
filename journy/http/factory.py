from typing import Optional

import httpx

from journy.core.config import Settings, settings as global_settings
from journy.http.decorators import LoggingHttpClient
from journy.http.queue import DispatchQueue, QueuedHttpClient
from journy.http.transport import HttpxHttpClient
from journy.http.types import HttpClient


def build_http_client(
    settings: Optional[Settings] = None,
    *,
    timeout_ms: Optional[int] = None,
    queued: Optional[bool] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> HttpClient:
    s = settings or global_settings
    http_client: HttpClient = HttpxHttpClient(
        client, timeout_ms if timeout_ms is not None else s.TIMEOUT_MS
    )
    if s.LOG_REQUESTS:
        http_client = LoggingHttpClient(http_client)
    if queued is None:
        queued = s.QUEUE_ENABLED
    if queued:
        http_client = QueuedHttpClient(
            http_client, DispatchQueue(concurrency=s.QUEUE_CONCURRENCY)
        )
    return http_client
