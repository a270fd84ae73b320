import asyncio
import gc
import json

import httpx
import pytest

from cerebras_cloud.domain.errors import CerebrasApiError
from cerebras_cloud.domain.models.chat import ChatCompletionChunk
from cerebras_cloud.infrastructure.http.retry import RetryPolicy
from cerebras_cloud.infrastructure.http.transport import AsyncHttpTransport, OutboundRequest


def _frame(content):
    payload = {
        'id': 'chatcmpl-1',
        'created': 1700000000,
        'model': 'llama3.1-8b',
        'choices': [{'index': 0, 'delta': {'content': content}}],
    }
    return f"data: {json.dumps(payload)}\n\n"


def _transport(handler, sleeps=None, max_retries=3):
    delays = sleeps if sleeps is not None else []

    async def fake_sleep(delay):
        delays.append(delay)

    return AsyncHttpTransport(
        api_key='test-key-123',
        base_url='https://api.test/v1/',
        retry_policy=RetryPolicy(max_retries=max_retries),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=fake_sleep,
    )


@pytest.mark.asyncio
async def test_async_send_retries_transient_status():
    statuses = [429, 500, 200]
    requests = []

    def handler(request):
        requests.append(request)
        status = statuses.pop(0)
        return httpx.Response(status, json={'ok': status == 200})

    sleeps = []
    transport = _transport(handler, sleeps=sleeps)
    response = await transport.send(OutboundRequest('GET', 'models'))

    assert response.status_code == 200
    assert len(requests) == 3
    assert len(sleeps) == 2
    assert len({r.headers['X-Request-Id'] for r in requests}) == 3


@pytest.mark.asyncio
async def test_async_send_does_not_retry_bad_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(400, text='Bad Request')

    transport = _transport(handler)
    with pytest.raises(CerebrasApiError) as exc_info:
        await transport.send(OutboundRequest('POST', 'completions', {'model': 'm'}))

    assert len(calls) == 1
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == 'Bad Request'


@pytest.mark.asyncio
async def test_async_network_error_is_normalized():
    boom = httpx.ConnectTimeout('timed out')

    def handler(request):
        raise boom

    transport = _transport(handler)
    with pytest.raises(CerebrasApiError) as exc_info:
        await transport.send(OutboundRequest('GET', 'models'))

    assert exc_info.value.status_code is None
    assert exc_info.value.__cause__ is boom


@pytest.mark.asyncio
async def test_task_cancellation_propagates_as_cancelled_error():
    started = asyncio.Event()

    async def handler(request):
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, json={})

    transport = _transport(handler)
    task = asyncio.create_task(transport.send(OutboundRequest('GET', 'models')))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_cancellation_during_backoff_propagates():
    async def slow_sleep(delay):
        await asyncio.sleep(10)

    transport = AsyncHttpTransport(
        api_key='test-key-123',
        base_url='https://api.test/v1/',
        client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(503))),
        sleep=slow_sleep,
    )
    task = asyncio.create_task(transport.send(OutboundRequest('GET', 'models')))
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_async_stream_skips_bad_frames_and_closes():
    body = (_frame('Hello') + 'data: nope\n\n' + _frame(' there') + 'data: [DONE]\n\n').encode()
    transport = _transport(lambda request: httpx.Response(200, content=body))

    stream = await transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)
    texts = [chunk.choices[0].delta.content async for chunk in stream]

    assert texts == ['Hello', ' there']
    assert stream.closed
    assert stream.response.is_closed


@pytest.mark.asyncio
async def test_async_stream_early_exit_releases_response():
    body = (_frame('a') + _frame('b') + 'data: [DONE]\n\n').encode()
    transport = _transport(lambda request: httpx.Response(200, content=body))

    async with await transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict) as stream:
        async for _ in stream:
            break

    assert stream.closed
    assert stream.response.is_closed


@pytest.mark.asyncio
async def test_async_stream_error_status_raises_immediately():
    transport = _transport(lambda request: httpx.Response(401, json={'error': {'message': 'bad key'}}))

    with pytest.raises(CerebrasApiError) as exc_info:
        await transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == 'bad key'


@pytest.mark.asyncio
async def test_cancelling_consumer_mid_stream_releases_response():
    async def body():
        yield _frame('first').encode()
        await asyncio.sleep(10)
        yield _frame('never').encode()

    transport = _transport(lambda request: httpx.Response(200, content=body()))
    stream = await transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)
    received = []

    async def consume():
        async for chunk in stream:
            received.append(chunk.choices[0].delta.content)

    task = asyncio.create_task(consume())
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert received == ['first']
    assert stream.closed
    assert stream.response.is_closed


@pytest.mark.asyncio
async def test_unread_async_stream_is_released_when_garbage_collected():
    body = (_frame('a') + 'data: [DONE]\n\n').encode()
    transport = _transport(lambda request: httpx.Response(200, content=body))

    stream = await transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)
    response = stream.response

    del stream
    gc.collect()
    for _ in range(3):
        await asyncio.sleep(0)

    assert response.is_closed


@pytest.mark.asyncio
async def test_async_undecodable_stream_body_is_normalized():
    async def body():
        yield b'not gzip'

    transport = _transport(lambda request: httpx.Response(200, headers={'Content-Encoding': 'gzip'}, content=body()))
    stream = await transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)

    with pytest.raises(CerebrasApiError) as exc_info:
        await stream.__anext__()
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
    assert stream.closed
