import os
import sys
import json

import pytest

# Ensure project root on path
sys.path.insert(0, os.getcwd())

from journy.client.client import Client, ClientConfig
from journy.http.types import HttpHeaders, HttpResponse


DEFAULT_BODY = json.dumps({"meta": {"requestId": "requestId"}})


@pytest.fixture()
def client_config() -> ClientConfig:
    return ClientConfig(api_key="key-secret", root_url="https://api.test.com")


@pytest.fixture()
def expected_headers() -> HttpHeaders:
    from journy.core.config import settings

    return HttpHeaders(
        {
            "x-api-key": "key-secret",
            "content-type": "application/json",
            "user-agent": settings.USER_AGENT,
        }
    )


@pytest.fixture()
def make_response():
    def _make(status: int, remaining: str = "5000", body: str = DEFAULT_BODY):
        return HttpResponse(status, HttpHeaders({"X-RateLimit-Remaining": remaining}), body)

    return _make


@pytest.fixture()
def make_client(client_config):
    def _make(http_client, config: ClientConfig = None) -> Client:
        return Client(http_client, config or client_config)

    return _make
