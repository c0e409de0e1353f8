from loguru import logger as _logger

from journy.client.client import Client, ClientConfig
from journy.client.events import Event, Metadata, Properties
from journy.client.identity import AccountIdentified, UserIdentified
from journy.client.schemas import (
    APIError,
    ApiKeyDetails,
    Failure,
    Result,
    Success,
    TrackingSnippetResponse,
)
from journy.client.tracking import Tracking
from journy.http.queue import DispatchQueue, QueuedHttpClient
from journy.http.transport import HttpxHttpClient
from journy.http.types import (
    HttpClient,
    HttpHeaders,
    HttpRequest,
    HttpRequestError,
    HttpRequestFailed,
    HttpResponse,
)

# silent until the application opts in through setup_logging()
_logger.disable("journy")

__all__ = [
    "APIError",
    "AccountIdentified",
    "ApiKeyDetails",
    "Client",
    "ClientConfig",
    "DispatchQueue",
    "Event",
    "Failure",
    "HttpClient",
    "HttpHeaders",
    "HttpRequest",
    "HttpRequestError",
    "HttpRequestFailed",
    "HttpResponse",
    "HttpxHttpClient",
    "Metadata",
    "Properties",
    "QueuedHttpClient",
    "Result",
    "Success",
    "Tracking",
    "TrackingSnippetResponse",
    "UserIdentified",
]
