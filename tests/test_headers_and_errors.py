import logging

from cerebras_cloud import __version__
from cerebras_cloud.infrastructure.http.errors import error_from_exception, error_from_response, parse_error_body
from cerebras_cloud.infrastructure.http.headers import REQUEST_ID_HEADER, build_headers, build_user_agent
from cerebras_cloud.utils import mask_secret, setup_logging, validate_api_key


def test_user_agent_carries_sdk_version_and_platform():
    agent = build_user_agent()
    assert agent.startswith(f'cerebras-cloud-python/{__version__} (Python/')


def test_headers_generate_new_request_id_each_time():
    first = build_headers('csk-key', 'ua')
    second = build_headers('csk-key', 'ua')

    assert first['Authorization'] == 'Bearer csk-key'
    assert first[REQUEST_ID_HEADER] != second[REQUEST_ID_HEADER]
    assert build_headers('csk-key', 'ua', request_id='fixed')[REQUEST_ID_HEADER] == 'fixed'
    assert build_headers('csk-key', 'ua', stream=True)['Accept'] == 'text/event-stream'
    assert 'Authorization' not in build_headers(None, 'ua')


def test_parse_error_body_variants():
    assert parse_error_body('{"error": {"message": "m", "type": "t", "code": 42}}') == ('m', 't', '42')
    assert parse_error_body('{"error": "plain"}') == ('plain', None, None)
    assert parse_error_body('{"detail": "x"}') == (None, None, None)
    assert parse_error_body('Service Unavailable') == ('Service Unavailable', None, None)
    assert parse_error_body('') == (None, None, None)


def test_error_from_response_fallback_message():
    err = error_from_response(502, '{"unexpected": true}')
    assert err.message == 'Request failed with status 502'
    assert err.status_code == 502
    assert str(err) == '[502] Request failed with status 502'


def test_error_from_exception_has_no_status():
    err = error_from_exception(TimeoutError())
    assert err.status_code is None
    assert err.message == 'Network error occurred: TimeoutError'


def test_validate_api_key():
    assert validate_api_key('csk-abcdefghijk')
    assert not validate_api_key('')
    assert not validate_api_key(None)
    assert not validate_api_key('short')
    assert not validate_api_key('csk-abc defghijk')


def test_mask_secret():
    assert mask_secret('csk-abcdefghijk') == 'csk-***'
    assert mask_secret(None) == ''


def test_setup_logging_quiets_http_libraries():
    setup_logging('INFO')
    assert logging.getLogger('httpx').level == logging.WARNING
    assert logging.getLogger('httpcore').level == logging.WARNING


def test_parse_error_body_non_object_json_keeps_raw_text():
    assert parse_error_body('["upstream exploded"]') == ('["upstream exploded"]', None, None)
    assert parse_error_body('"overloaded"') == ('"overloaded"', None, None)
    assert parse_error_body('503') == ('503', None, None)
    assert parse_error_body('{"error": null}') == (None, None, None)
    assert parse_error_body('{"error": 7}') == ('{"error": 7}', None, None)
    assert error_from_response(500, '["upstream exploded"]').message == '["upstream exploded"]'
