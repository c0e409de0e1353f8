from __future__ import annotations

import time
from typing import Any, Callable, Dict, Iterable, List, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from journy.client import normalizer
from journy.client.events import Event, Properties, stringify_properties
from journy.client.identity import AccountIdentified, UserIdentified
from journy.client.schemas import (
    ApiKeyDetails,
    Result,
    TrackingSnippetResponse,
)
from journy.core.config import settings as global_settings
from journy.core.logging import get_logger
from journy.http.decorators import ApiHttpClient
from journy.http.factory import build_http_client
from journy.http.types import HttpClient, HttpHeaders, HttpRequest, Method
from journy.observability.metrics import record_call, update_calls_remaining

log = get_logger("journy.client")

DEFAULT_ROOT_URL = "https://api.journy.io"


class ClientConfig(BaseModel):
    api_key: str
    root_url: str = DEFAULT_ROOT_URL
    # Whether the current platform may hold the API secret. Runtimes that
    # expose code to end users (browsers, embedded webviews) must pass False.
    secrets_allowed: bool = True


def _is_valid_url(url: str) -> bool:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


class Client:
    def __init__(self, http_client: HttpClient, config: ClientConfig):
        self._assert_secrets_allowed(config)
        self._assert_config_is_valid(config)
        self.config = config
        self.http_client = ApiHttpClient(config.api_key, http_client)
        self._root_url = config.root_url.rstrip("/")

    @classmethod
    def with_defaults(
        cls,
        api_key: Optional[str] = None,
        root_url: Optional[str] = None,
        *,
        timeout_ms: Optional[int] = None,
        queued: Optional[bool] = None,
    ) -> "Client":
        config = ClientConfig(
            api_key=api_key or global_settings.API_KEY or "",
            root_url=root_url or global_settings.API_URL,
        )
        # validate before opening any connection
        cls._assert_config_is_valid(config)
        return cls(build_http_client(timeout_ms=timeout_ms, queued=queued), config)

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _assert_secrets_allowed(config: ClientConfig) -> None:
        if not config.secrets_allowed:
            raise RuntimeError(
                "Sorry, you can't use our SDK in an environment that can't "
                "keep secrets because this will leak your API key."
            )

    @staticmethod
    def _assert_config_is_valid(config: ClientConfig) -> None:
        if not _is_valid_url(config.root_url):
            raise ValueError(f"The API url is not a valid URL: {config.root_url}")
        if not config.api_key or not config.api_key.strip():
            raise ValueError("The API key cannot be empty.")

    def _url(self, path: str) -> str:
        return self._root_url + path

    def _headers(self) -> HttpHeaders:
        return HttpHeaders(
            {
                "content-type": "application/json",
                "user-agent": global_settings.USER_AGENT,
            }
        )

    def _request(
        self, method: Method, path: str, body: Optional[Dict[str, Any]] = None
    ) -> HttpRequest:
        return HttpRequest(self._url(path), method, self._headers(), body or "")

    async def _call(
        self,
        operation: str,
        request: HttpRequest,
        parse: Optional[Callable[[Any], Any]] = None,
    ):
        start = time.perf_counter()
        try:
            response = await self.http_client.send(request)
        except Exception as e:
            log.bind(operation=operation, error=str(e)).warning("api.call_failed")
            result = normalizer.from_error(e)
        else:
            result = normalizer.from_response(response, parse)
        dur_ms = (time.perf_counter() - start) * 1000.0

        outcome = "success" if result.success else result.error.value
        record_call(operation, outcome, dur_ms)
        update_calls_remaining(result.calls_remaining)
        log.bind(
            operation=operation,
            outcome=outcome,
            calls_remaining=result.calls_remaining,
            request_id=result.request_id,
        ).debug("api.call")
        return result

    async def get_api_key_details(self) -> Result[ApiKeyDetails]:
        return await self._call(
            "get_api_key_details",
            self._request("GET", "/validate"),
            ApiKeyDetails.model_validate,
        )

    async def add_event(self, event: Event) -> Result[None]:
        return await self._call(
            "add_event",
            self._request("POST", "/track", event.to_request_payload()),
        )

    async def upsert_user(
        self,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        properties: Optional[Properties] = None,
    ) -> Result[None]:
        user = UserIdentified(user_id=user_id, email=email)
        body: Dict[str, Any] = {"identification": user.encode()}
        if properties:
            body["properties"] = stringify_properties(properties)
        return await self._call(
            "upsert_user", self._request("POST", "/users/upsert", body)
        )

    async def delete_user(
        self, user_id: Optional[str] = None, email: Optional[str] = None
    ) -> Result[None]:
        user = UserIdentified(user_id=user_id, email=email)
        return await self._call(
            "delete_user",
            self._request("DELETE", "/users", {"identification": user.encode()}),
        )

    async def upsert_account(
        self,
        account_id: Optional[str] = None,
        domain: Optional[str] = None,
        properties: Optional[Properties] = None,
        members: Optional[Iterable[str]] = None,
    ) -> Result[None]:
        account = AccountIdentified(account_id=account_id, domain=domain)
        body: Dict[str, Any] = {"identification": account.encode()}
        if properties:
            body["properties"] = stringify_properties(properties)
        if members is not None:
            member_ids = list(members)
            if any(not m for m in member_ids):
                raise ValueError("Member user IDs cannot be empty!")
            body["members"] = member_ids
        return await self._call(
            "upsert_account", self._request("POST", "/accounts/upsert", body)
        )

    async def delete_account(
        self, account_id: Optional[str] = None, domain: Optional[str] = None
    ) -> Result[None]:
        account = AccountIdentified(account_id=account_id, domain=domain)
        return await self._call(
            "delete_account",
            self._request("DELETE", "/accounts", {"identification": account.encode()}),
        )

    def _membership_body(
        self, account: AccountIdentified, users: Iterable[UserIdentified]
    ) -> Dict[str, Any]:
        users = list(users)
        if not users:
            raise ValueError("Users cannot be empty!")
        return {
            "account": account.encode(),
            "users": [{"identification": user.encode()} for user in users],
        }

    async def add_users_to_account(
        self, account: AccountIdentified, users: List[UserIdentified]
    ) -> Result[None]:
        return await self._call(
            "add_users_to_account",
            self._request(
                "POST", "/accounts/users/add", self._membership_body(account, users)
            ),
        )

    async def remove_users_from_account(
        self, account: AccountIdentified, users: List[UserIdentified]
    ) -> Result[None]:
        return await self._call(
            "remove_users_from_account",
            self._request(
                "POST",
                "/accounts/users/remove",
                self._membership_body(account, users),
            ),
        )

    async def link(
        self,
        device_id: str,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Result[None]:
        user = UserIdentified(user_id=user_id, email=email)
        if not device_id:
            raise ValueError("Device ID cannot be empty!")
        return await self._call(
            "link",
            self._request(
                "POST",
                "/link",
                {"deviceId": device_id, "identification": user.encode()},
            ),
        )

    async def get_tracking_snippet(self, domain: str) -> Result[TrackingSnippetResponse]:
        if not domain:
            raise ValueError("Domain cannot be empty!")
        return await self._call(
            "get_tracking_snippet",
            self._request("GET", f"/tracking/snippet?domain={quote(domain, safe='')}"),
            lambda data: TrackingSnippetResponse(
                domain=domain, snippet=data["snippet"]
            ),
        )


