import json

import pytest

from journy.client.client import Client
from journy.client.events import Event
from journy.client.identity import UserIdentified
from journy.client.tracking import Tracking
from journy.http.queue import DispatchQueue
from journy.http.testing import HttpClientRecorder, HttpClientThatThrows
from journy.http.types import HttpHeaders, HttpResponse


def _created(request):
    async def respond():
        return HttpResponse(
            201,
            HttpHeaders({"X-RateLimit-Remaining": "5000"}),
            json.dumps({"meta": {"requestId": "requestId"}}),
        )

    return respond()


@pytest.mark.asyncio
async def test_tracking_returns_immediately_and_sends_in_order(client_config):
    recorder = HttpClientRecorder(_created)
    tracking = Tracking(Client(recorder, client_config))

    assert tracking.add_event(Event.for_user("signed_up", UserIdentified.by_user_id("u"))) is None
    assert tracking.upsert_user(user_id="u", properties={"plan": "pro"}) is None
    assert tracking.upsert_account(account_id="a", members=["u"]) is None
    assert tracking.link("device", user_id="u") is None
    assert recorder.requests == []

    await tracking.flush()

    assert [r.url for r in recorder.requests] == [
        "https://api.test.com/track",
        "https://api.test.com/users/upsert",
        "https://api.test.com/accounts/upsert",
        "https://api.test.com/link",
    ]
    assert recorder.max_in_flight == 1


@pytest.mark.asyncio
async def test_tracking_discards_failures(client_config):
    tracking = Tracking(Client(HttpClientThatThrows(), client_config))
    tracking.add_event(Event.for_user("signed_up", UserIdentified.by_user_id("u")))
    await tracking.flush()


@pytest.mark.asyncio
async def test_tracking_discards_invalid_input(client_config):
    recorder = HttpClientRecorder(_created)
    tracking = Tracking(Client(recorder, client_config), DispatchQueue(concurrency=1))

    tracking.upsert_user(user_id="", email="")
    tracking.upsert_user(user_id="u")
    await tracking.flush()

    assert [r.url for r in recorder.requests] == ["https://api.test.com/users/upsert"]


def test_tracking_outside_event_loop_drops_call(client_config):
    recorder = HttpClientRecorder(_created)
    tracking = Tracking(Client(recorder, client_config))

    tracking.add_event(Event.for_user("signed_up", UserIdentified.by_user_id("u")))

    assert recorder.requests == []
    assert tracking.queue.size == 0
