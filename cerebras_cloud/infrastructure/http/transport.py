"""
HTTP transport - Infrastructure component performing one logical API call.

Decorates each attempt with auth/user-agent/request-id headers, retries
transient statuses for unary calls, hands streaming calls back as chunk
streams and normalizes every failure into CerebrasApiError.
"""

from __future__ import annotations
import asyncio
import logging
import threading
import time
from typing import Any, Callable, Optional, TypeVar

import httpx

from ...domain.errors import CerebrasApiError, RequestCancelledError
from ...domain.interfaces.transport import OutboundRequest
from ..config.settings import DEFAULT_BASE_URL, CerebrasSettings
from .errors import error_from_exception, error_from_response
from .headers import build_headers, build_user_agent
from .retry import RetryPolicy
from .stream import AsyncSSEStream, SSEStream

T = TypeVar('T')

__all__ = ['AsyncHttpTransport', 'HttpTransport', 'OutboundRequest']


class _TransportBase:
    """Configuration and request building shared by both transports."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url if base_url.endswith('/') else base_url + '/'
        self._timeout = httpx.Timeout(timeout)
        self._retry = retry_policy or RetryPolicy()
        self._logger = logger or logging.getLogger(__name__)
        self._user_agent = build_user_agent()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def _url(self, path: str) -> str:
        return self._base_url + path.lstrip('/')

    def _build(self, client: Any, request: OutboundRequest, stream: bool = False) -> httpx.Request:
        # New headers (and request id) for every attempt; the body dict is re-encoded each time
        return client.build_request(
            request.method,
            self._url(request.path),
            json=request.body,
            headers=build_headers(self._api_key, self._user_agent, stream=stream),
            timeout=self._timeout,
        )

    def _api_error(self, response: httpx.Response) -> CerebrasApiError:
        error = error_from_response(response.status_code, response.text)
        self._logger.error(
            f"Cerebras API request failed with status {response.status_code}: {error.message}"
        )
        return error

    def _retry_delay(self, response: httpx.Response, attempt: int) -> float:
        delay = self._retry.next_delay(attempt, response.headers.get('Retry-After'))
        self._logger.warning(
            f"Retry {attempt + 1}/{self._retry.max_retries} after {delay * 1000:.0f}ms "
            f"due to {response.status_code}"
        )
        return delay


class HttpTransport(_TransportBase):
    """Blocking transport over httpx.Client.

    Cancellation is cooperative through an optional threading.Event checked
    before each attempt, during backoff waits and between streamed lines.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(api_key, base_url, timeout, retry_policy, logger)
        self._owns_client = client is None
        self._client = client or httpx.Client()
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: CerebrasSettings,
        client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None,
    ) -> HttpTransport:
        return cls(
            api_key=settings.resolved_api_key(),
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            retry_policy=RetryPolicy(max_retries=settings.max_retries),
            client=client,
            logger=logger,
        )

    def send(self, request: OutboundRequest, cancel_event: Optional[threading.Event] = None) -> httpx.Response:
        """Send a unary request, retrying transient failures.

        Returns the 2xx response (body already read). Raises CerebrasApiError
        on final failure and RequestCancelledError when cancel_event is set.
        """
        attempt = 0
        while True:
            self._check_cancelled(cancel_event)
            http_request = self._build(self._client, request)
            self._logger.debug(
                f"{request.method} {request.path} attempt {attempt + 1} "
                f"(request id {http_request.headers.get('X-Request-Id')})"
            )
            try:
                response = self._client.send(http_request)
            except httpx.RequestError as e:
                self._logger.error(f"HTTP request failed: {e}")
                raise error_from_exception(e) from e

            if response.is_success:
                return response
            if self._retry.should_retry(response.status_code, attempt):
                delay = self._retry_delay(response, attempt)
                response.close()
                self._wait(delay, cancel_event)
                attempt += 1
                continue
            raise self._api_error(response)

    def stream(
        self,
        request: OutboundRequest,
        decode: Callable[[Any], T],
        cancel_event: Optional[threading.Event] = None,
    ) -> SSEStream[T]:
        """Open a streaming request and return its chunk stream.

        Not retried. A non-2xx initial response raises before any chunk.
        """
        self._check_cancelled(cancel_event)
        http_request = self._build(self._client, request, stream=True)
        self._logger.debug(
            f"{request.method} {request.path} streaming "
            f"(request id {http_request.headers.get('X-Request-Id')})"
        )
        try:
            response = self._client.send(http_request, stream=True)
        except httpx.RequestError as e:
            self._logger.error(f"HTTP request failed: {e}")
            raise error_from_exception(e) from e

        if not response.is_success:
            try:
                response.read()
            except httpx.RequestError as e:
                self._logger.error(f"HTTP request failed: {e}")
                raise error_from_exception(e) from e
            finally:
                response.close()
            raise self._api_error(response)
        return SSEStream(response, decode, cancel_event=cancel_event, logger=self._logger)

    def _check_cancelled(self, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._logger.warning("Request was cancelled")
            raise RequestCancelledError("Request was cancelled")

    def _wait(self, delay: float, cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is None:
            self._sleep(delay)
            return
        if cancel_event.wait(delay):
            self._logger.warning("Request was cancelled during retry backoff")
            raise RequestCancelledError("Request was cancelled")

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncHttpTransport(_TransportBase):
    """asyncio transport over httpx.AsyncClient.

    Task cancellation surfaces as asyncio.CancelledError, never as
    CerebrasApiError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        super().__init__(api_key, base_url, timeout, retry_policy, logger)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: CerebrasSettings,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> AsyncHttpTransport:
        return cls(
            api_key=settings.resolved_api_key(),
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            retry_policy=RetryPolicy(max_retries=settings.max_retries),
            client=client,
            logger=logger,
        )

    async def send(self, request: OutboundRequest) -> httpx.Response:
        """Async counterpart of HttpTransport.send."""
        attempt = 0
        try:
            while True:
                http_request = self._build(self._client, request)
                self._logger.debug(
                    f"{request.method} {request.path} attempt {attempt + 1} "
                    f"(request id {http_request.headers.get('X-Request-Id')})"
                )
                try:
                    response = await self._client.send(http_request)
                except httpx.RequestError as e:
                    self._logger.error(f"HTTP request failed: {e}")
                    raise error_from_exception(e) from e

                if response.is_success:
                    return response
                if self._retry.should_retry(response.status_code, attempt):
                    delay = self._retry_delay(response, attempt)
                    await response.aclose()
                    await self._sleep(delay)
                    attempt += 1
                    continue
                raise self._api_error(response)
        except asyncio.CancelledError:
            self._logger.warning("Request was cancelled")
            raise

    async def stream(self, request: OutboundRequest, decode: Callable[[Any], T]) -> AsyncSSEStream[T]:
        """Async counterpart of HttpTransport.stream."""
        http_request = self._build(self._client, request, stream=True)
        self._logger.debug(
            f"{request.method} {request.path} streaming "
            f"(request id {http_request.headers.get('X-Request-Id')})"
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.RequestError as e:
            self._logger.error(f"HTTP request failed: {e}")
            raise error_from_exception(e) from e
        except asyncio.CancelledError:
            self._logger.warning("Request was cancelled")
            raise

        if not response.is_success:
            try:
                await response.aread()
            except httpx.RequestError as e:
                self._logger.error(f"HTTP request failed: {e}")
                raise error_from_exception(e) from e
            finally:
                await response.aclose()
            raise self._api_error(response)
        return AsyncSSEStream(response, decode, logger=self._logger)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
