import gc
import json
import logging
import threading

import httpx
import pytest

from cerebras_cloud.domain.errors import CerebrasApiError, RequestCancelledError
from cerebras_cloud.domain.models.chat import ChatCompletionChunk
from cerebras_cloud.infrastructure.http.retry import RetryPolicy
from cerebras_cloud.infrastructure.http.sse import extract_data, iter_chunks
from cerebras_cloud.infrastructure.http.transport import HttpTransport, OutboundRequest


def _frame(content, finish_reason=None):
    payload = {
        'id': 'chatcmpl-1',
        'object': 'chat.completion.chunk',
        'created': 1700000000,
        'model': 'llama3.1-8b',
        'choices': [{'index': 0, 'delta': {'content': content}, 'finish_reason': finish_reason}],
    }
    return f"data: {json.dumps(payload)}\n\n"


def _sse_body(*frames):
    return ''.join(frames).encode()


def _transport(handler, sleeps=None):
    return HttpTransport(
        api_key='test-key-123',
        base_url='https://api.test/v1/',
        retry_policy=RetryPolicy(max_retries=3),
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        sleep=(sleeps if sleeps is not None else []).append,
    )


def test_extract_data_requires_exact_prefix():
    assert extract_data('data: {"a": 1}') == '{"a": 1}'
    assert extract_data('data: [DONE]') == '[DONE]'
    assert extract_data('') is None
    assert extract_data('   ') is None
    assert extract_data('event: ping') is None
    assert extract_data(': keep-alive') is None
    assert extract_data('data:{"a": 1}') is None


def test_invalid_frame_is_skipped_and_logged(caplog):
    lines = [
        _frame('Hello').strip(),
        '',
        'data: {not json',
        '',
        _frame(' world', 'stop').strip(),
        '',
        'data: [DONE]',
    ]
    with caplog.at_level(logging.WARNING):
        chunks = list(iter_chunks(lines, ChatCompletionChunk.from_dict))

    assert [c.choices[0].delta.content for c in chunks] == ['Hello', ' world']
    assert chunks[1].choices[0].finish_reason == 'stop'
    assert any('malformed' in r.getMessage() for r in caplog.records)


def test_frames_after_done_are_ignored():
    lines = [_frame('a').strip(), 'data: [DONE]', _frame('b').strip()]
    chunks = list(iter_chunks(lines, ChatCompletionChunk.from_dict))
    assert len(chunks) == 1


def test_frame_with_wrong_shape_is_skipped():
    lines = ['data: {"id": "x"}', _frame('ok').strip()]
    chunks = list(iter_chunks(lines, ChatCompletionChunk.from_dict))
    assert [c.choices[0].delta.content for c in chunks] == ['ok']


def test_stream_yields_chunks_in_order_and_closes():
    body = _sse_body(_frame('Hel'), _frame('lo'), 'data: {broken\n\n', _frame('!', 'stop'), 'data: [DONE]\n\n')
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, headers={'content-type': 'text/event-stream'}, content=body)

    transport = _transport(handler)
    stream = transport.stream(OutboundRequest('POST', 'chat/completions', {'stream': True}), ChatCompletionChunk.from_dict)
    texts = [c.choices[0].delta.content for c in stream]

    assert texts == ['Hel', 'lo', '!']
    assert stream.closed
    assert stream.response.is_closed
    assert requests[0].headers['Accept'] == 'text/event-stream'
    assert stream.request_id == requests[0].headers['X-Request-Id']


def test_stream_error_status_raises_before_any_chunk_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, json={'error': {'message': 'overloaded'}})

    transport = _transport(handler)
    with pytest.raises(CerebrasApiError) as exc_info:
        transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == 'overloaded'
    assert len(calls) == 1


def test_early_close_releases_response():
    body = _sse_body(_frame('a'), _frame('b'), _frame('c'), 'data: [DONE]\n\n')
    transport = _transport(lambda request: httpx.Response(200, content=body))

    with transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict) as stream:
        first = next(stream)
    assert first.choices[0].delta.content == 'a'
    assert stream.closed
    assert stream.response.is_closed


def test_cancellation_mid_stream_releases_connection():
    body = _sse_body(_frame('a'), _frame('b'), 'data: [DONE]\n\n')
    transport = _transport(lambda request: httpx.Response(200, content=body))
    cancel = threading.Event()

    stream = transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict, cancel_event=cancel)
    next(stream)
    cancel.set()

    with pytest.raises(RequestCancelledError):
        next(stream)
    assert stream.closed
    assert stream.response.is_closed


def test_interrupted_stream_is_normalized():
    def chunks():
        yield _frame('partial').encode()
        raise httpx.ReadError('connection reset')

    transport = _transport(lambda request: httpx.Response(200, content=chunks()))
    stream = transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)

    assert next(stream).choices[0].delta.content == 'partial'
    with pytest.raises(CerebrasApiError) as exc_info:
        next(stream)
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ReadError)
    assert stream.closed


def test_unread_stream_is_released_when_garbage_collected():
    body = _sse_body(_frame('a'), 'data: [DONE]\n\n')
    transport = _transport(lambda request: httpx.Response(200, content=body))

    stream = transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)
    response = stream.response
    assert not response.is_closed

    del stream
    gc.collect()

    assert response.is_closed


def test_undecodable_stream_body_is_normalized():
    def handler(request):
        return httpx.Response(200, headers={'Content-Encoding': 'gzip'}, content=iter([b'not gzip']))

    transport = _transport(handler)
    stream = transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)

    with pytest.raises(CerebrasApiError) as exc_info:
        next(stream)
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
    assert stream.closed


def test_undecodable_error_body_is_normalized():
    def handler(request):
        return httpx.Response(502, headers={'Content-Encoding': 'gzip'}, content=iter([b'not gzip']))

    transport = _transport(handler)

    with pytest.raises(CerebrasApiError) as exc_info:
        transport.stream(OutboundRequest('POST', 'chat/completions'), ChatCompletionChunk.from_dict)
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
