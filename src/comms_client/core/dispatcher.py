"""
Endpoint dispatch.

``execute(descriptor, request)`` performs at most one HTTP round trip:

- PreconditionError and NoUsableCredentialError are raised before any I/O
- httpx request failures become TransportError
- non-2xx responses become ``descriptor.error_type``
- 2xx bodies are decoded into ``descriptor.response_type``

Retries are left to the caller (see ``errors.is_retryable``).
"""
import logging
from typing import Any, Optional

import httpx

from ..auth.credentials import CredentialSet
from ..auth.selector import AuthMethodSelector
from ..config import ClientConfig, ResolvedConfig, resolve_config
from ..console import trace_request, trace_response
from ..errors import MalformedPayloadError, TransportError
from ..types import PreparedRequest
from ..wire.model import load_json
from .endpoint import EndpointDescriptor
from .request_builder import prepare_request

logger = logging.getLogger(__name__)


def decode_body(response_type: Any, status_code: int, content: bytes) -> Any:
    """Decode a 2xx body into the endpoint's response type."""
    if response_type is None or status_code == 204 or not content or not content.strip():
        return None
    if response_type is bytes:
        return content
    if response_type is str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError(f"Response body is not valid UTF-8: {exc}") from exc
    if response_type in (dict, list):
        data = load_json(content)
        if not isinstance(data, response_type):
            raise MalformedPayloadError(f"Expected a JSON {response_type.__name__}, got {type(data).__name__}")
        return data
    if hasattr(response_type, "from_wire"):
        return response_type.from_wire(content)
    if callable(response_type):
        return response_type(load_json(content))
    raise TypeError(f"Unsupported response type: {response_type!r}")


def interpret_response(descriptor: EndpointDescriptor, status_code: int, reason: Optional[str], content: bytes) -> Any:
    """Map a completed response to a typed result or a typed error."""
    if 200 <= status_code < 300:
        return decode_body(descriptor.response_type, status_code, content)
    raise descriptor.error_type.from_response(status_code, reason, content)


def _timeout(config: ResolvedConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.timeout.connect,
        read=config.timeout.read,
        write=config.timeout.write,
        pool=config.timeout.connect,
    )


class _BaseDispatcher:
    def __init__(self, credentials: CredentialSet, config: Optional[ClientConfig] = None):
        self._config = resolve_config(config)
        self._selector = AuthMethodSelector(credentials)
        self._closed = False

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def credentials(self) -> CredentialSet:
        return self._selector.credentials

    def prepare(self, descriptor: EndpointDescriptor, request: Any = None, now: Optional[float] = None) -> PreparedRequest:
        if self._closed:
            raise RuntimeError("Dispatcher has been closed")
        prepared = prepare_request(descriptor, request, self._config, self._selector, now)
        if self._config.trace_http:
            trace_request(prepared.method, prepared.url, prepared.headers, prepared.params, prepared.content)
        return prepared

    def finish(self, descriptor: EndpointDescriptor, prepared: PreparedRequest, response: httpx.Response) -> Any:
        logger.debug(
            f"{type(self).__name__}.execute: {prepared.method} {prepared.url} -> "
            f"{response.status_code} ({len(response.content)} bytes)"
        )
        if self._config.trace_http:
            trace_response(response.status_code, response.reason_phrase or "", response.content)
        return interpret_response(descriptor, response.status_code, response.reason_phrase, response.content)

    def _transport_error(self, prepared: PreparedRequest, exc: httpx.RequestError) -> TransportError:
        logger.debug(f"{type(self).__name__}.execute: {prepared.method} {prepared.url} failed: {exc!r}")
        return TransportError(
            f"{prepared.method} {prepared.url} failed: {type(exc).__name__}: {exc}",
            details={"method": prepared.method, "url": prepared.url},
        )


class EndpointDispatcher(_BaseDispatcher):
    """Synchronous dispatcher over httpx.Client."""

    def __init__(
        self,
        credentials: CredentialSet,
        config: Optional[ClientConfig] = None,
        httpx_client: Optional[httpx.Client] = None,
    ):
        super().__init__(credentials, config)
        self._owns_client = httpx_client is None
        self._client = httpx_client or httpx.Client(timeout=_timeout(self._config))

    def execute(self, descriptor: EndpointDescriptor, request: Any = None) -> Any:
        prepared = self.prepare(descriptor, request)
        try:
            response = self._client.request(
                prepared.method,
                prepared.url,
                params=prepared.params or None,
                headers=prepared.headers,
                content=prepared.content,
            )
        except httpx.RequestError as exc:
            raise self._transport_error(prepared, exc) from exc
        return self.finish(descriptor, prepared, response)

    def close(self) -> None:
        """Close the dispatcher (and the httpx client it created)."""
        self._closed = True
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "EndpointDispatcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class AsyncEndpointDispatcher(_BaseDispatcher):
    """Asynchronous dispatcher over httpx.AsyncClient."""

    def __init__(
        self,
        credentials: CredentialSet,
        config: Optional[ClientConfig] = None,
        httpx_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(credentials, config)
        self._owns_client = httpx_client is None
        self._client = httpx_client or httpx.AsyncClient(timeout=_timeout(self._config))

    async def execute(self, descriptor: EndpointDescriptor, request: Any = None) -> Any:
        prepared = self.prepare(descriptor, request)
        try:
            response = await self._client.request(
                prepared.method,
                prepared.url,
                params=prepared.params or None,
                headers=prepared.headers,
                content=prepared.content,
            )
        except httpx.RequestError as exc:
            raise self._transport_error(prepared, exc) from exc
        return self.finish(descriptor, prepared, response)

    async def close(self) -> None:
        """Close the dispatcher (and the httpx client it created)."""
        self._closed = True
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncEndpointDispatcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
