import asyncio

import pytest

from journy.http.queue import DispatchQueue, QueuedHttpClient
from journy.http.testing import HttpClientRecorder
from journy.http.types import HttpRequest, HttpRequestFailed, HttpResponse


def _request(name: str) -> HttpRequest:
    return HttpRequest(f"https://api.test.com/{name}")


@pytest.mark.asyncio
async def test_work_starts_in_submission_order():
    started = []

    def make(name, delay):
        async def work():
            started.append(name)
            await asyncio.sleep(delay)
            return name

        return work

    queue = DispatchQueue(concurrency=1)
    futures = [
        queue.add(make("A", 0.03)),
        queue.add(make("B", 0)),
        queue.add(make("C", 0.01)),
    ]
    assert await asyncio.gather(*futures) == ["A", "B", "C"]
    assert started == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_sequential_queue_never_overlaps():
    async def slow(request):
        await asyncio.sleep(0.01)
        return HttpResponse()

    recorder = HttpClientRecorder(slow)
    client = QueuedHttpClient(recorder, DispatchQueue(concurrency=1))

    await asyncio.gather(*(client.send(_request(str(i))) for i in range(5)))

    assert recorder.max_in_flight == 1
    assert [r.url for r in recorder.requests] == [
        f"https://api.test.com/{i}" for i in range(5)
    ]


@pytest.mark.asyncio
async def test_concurrent_callers_dispatch_fifo_even_when_later_resolve_faster():
    delays = {"A": 0.03, "B": 0.0, "C": 0.01}
    completed = []

    async def handler(request):
        name = request.url.rsplit("/", 1)[-1]
        await asyncio.sleep(delays[name])
        completed.append(name)
        return HttpResponse(body=name)

    recorder = HttpClientRecorder(handler)
    client = QueuedHttpClient(recorder)

    async def caller(name):
        return (await client.send(_request(name))).body

    results = await asyncio.gather(caller("A"), caller("B"), caller("C"))

    assert results == ["A", "B", "C"]
    assert [r.url.rsplit("/", 1)[-1] for r in recorder.requests] == ["A", "B", "C"]
    assert completed == ["A", "B", "C"]


@pytest.mark.asyncio
async def test_concurrency_bound_is_respected():
    async def handler(request):
        await asyncio.sleep(0.01)
        return HttpResponse()

    recorder = HttpClientRecorder(handler)
    client = QueuedHttpClient(recorder, DispatchQueue(concurrency=2))

    await asyncio.gather(*(client.send(_request(str(i))) for i in range(6)))

    assert recorder.max_in_flight == 2
    assert [r.url for r in recorder.requests] == [
        f"https://api.test.com/{i}" for i in range(6)
    ]


@pytest.mark.asyncio
async def test_failure_does_not_block_later_items():
    async def handler(request):
        if request.url.endswith("/A"):
            raise HttpRequestFailed("boom")
        return HttpResponse(body="ok")

    recorder = HttpClientRecorder(handler)
    client = QueuedHttpClient(recorder)

    results = await asyncio.gather(
        client.send(_request("A")),
        client.send(_request("B")),
        return_exceptions=True,
    )

    assert isinstance(results[0], HttpRequestFailed)
    assert results[1].body == "ok"
    assert len(recorder.requests) == 2


@pytest.mark.asyncio
async def test_cancelled_waiting_item_is_skipped():
    started = []
    release = asyncio.Event()

    async def first():
        started.append("first")
        await release.wait()

    async def second():
        started.append("second")

    async def third():
        started.append("third")

    queue = DispatchQueue()
    f1 = queue.add(first)
    f2 = queue.add(second)
    f3 = queue.add(third)
    await asyncio.sleep(0)
    assert queue.size == 2
    assert queue.pending == 1

    f2.cancel()
    release.set()
    await asyncio.gather(f1, f3)

    assert started == ["first", "third"]


@pytest.mark.asyncio
async def test_join_waits_until_idle():
    done = []

    async def work():
        await asyncio.sleep(0.01)
        done.append(1)

    queue = DispatchQueue()
    await queue.join()
    for _ in range(3):
        queue.add(work)
    await queue.join()

    assert done == [1, 1, 1]
    assert queue.size == 0
    assert queue.pending == 0


@pytest.mark.parametrize("concurrency", [0, -1])
def test_invalid_concurrency(concurrency):
    with pytest.raises(ValueError):
        DispatchQueue(concurrency=concurrency)


def test_default_concurrency_is_one():
    assert DispatchQueue().concurrency == 1


@pytest.mark.asyncio
async def test_queued_client_close_waits_for_queued_requests():
    finished = []

    async def slow(request):
        await asyncio.sleep(0.01)
        finished.append(str(request.url))
        return HttpResponse(200)

    client = QueuedHttpClient(HttpClientRecorder(slow))
    sends = [asyncio.ensure_future(client.send(_request(n))) for n in ("a", "b")]
    await asyncio.sleep(0)

    await client.aclose()

    assert finished == ["https://api.test.com/a", "https://api.test.com/b"]
    await asyncio.gather(*sends)
    assert client.queue.size == 0
