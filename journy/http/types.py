from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Protocol, Union
from urllib.parse import urlsplit

Method = Literal["GET", "POST", "PUT", "DELETE", "HEAD"]
METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "HEAD"})

HeadersLike = Union["HttpHeaders", Mapping[str, str], None]


class HttpHeaders(Mapping[str, str]):
    """Immutable header mapping with case-insensitive names.

    Names are lower-cased on construction, so lookups through ``by_name``,
    ``[]`` and ``in`` ignore case. Two instances compare equal when they hold
    the same logical name/value pairs.
    """

    __slots__ = ("_headers",)

    def __init__(self, headers: Optional[Mapping[str, str]] = None):
        self._headers: dict[str, str] = {
            str(name).lower(): value for name, value in (headers or {}).items()
        }

    @classmethod
    def of(cls, headers: HeadersLike) -> "HttpHeaders":
        if isinstance(headers, HttpHeaders):
            return headers
        return cls(headers)

    def by_name(self, name: str) -> Optional[str]:
        return self._headers.get(name.lower())

    def to_dict(self) -> dict[str, str]:
        return dict(self._headers)

    def merge(self, other: HeadersLike) -> "HttpHeaders":
        merged = dict(self._headers)
        merged.update(HttpHeaders.of(other)._headers)
        return HttpHeaders(merged)

    def __getitem__(self, name: str) -> str:
        return self._headers[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HttpHeaders):
            return self._headers == other._headers
        if isinstance(other, Mapping):
            return self._headers == HttpHeaders(other)._headers
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._headers.items()))

    def __repr__(self) -> str:
        return f"HttpHeaders({self._headers!r})"


@dataclass(frozen=True)
class HttpRequest:
    url: str
    method: Method = "GET"
    headers: HttpHeaders = field(default_factory=HttpHeaders)
    body: Any = ""

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        parts = urlsplit(str(self.url))
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Request URL must be absolute: {self.url}")
        if not isinstance(self.headers, HttpHeaders):
            object.__setattr__(self, "headers", HttpHeaders.of(self.headers))

    def with_headers(self, headers: HeadersLike) -> "HttpRequest":
        return HttpRequest(
            url=self.url,
            method=self.method,
            headers=self.headers.merge(headers),
            body=self.body,
        )


@dataclass(frozen=True)
class HttpResponse:
    status_code: int = 200
    headers: HttpHeaders = field(default_factory=HttpHeaders)
    body: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.headers, HttpHeaders):
            object.__setattr__(self, "headers", HttpHeaders.of(self.headers))

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class HttpRequestError(Exception):
    """The server answered, but with a status the transport treats as failure."""

    def __init__(
        self,
        message: str,
        status_code: int,
        headers: HeadersLike = None,
        *,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.headers = HttpHeaders.of(headers)
        self.request_id = request_id


class HttpRequestFailed(Exception):
    """No response was received at all (connect error, DNS, timeout)."""


class HttpClient(Protocol):
    async def send(self, request: HttpRequest) -> HttpResponse: ...


async def aclose_client(client: Any) -> None:
    """Close ``client`` if it holds resources; plain doubles have no ``aclose``."""
    aclose = getattr(client, "aclose", None)
    if aclose is not None:
        await aclose()
