"""
Tests for core/path.py, core/endpoint.py, core/request_builder.py, core/dispatcher.py
Logic testing: Path, Boundary, Error Path coverage
"""
import json
from dataclasses import FrozenInstanceError
from typing import Optional

import httpx
import pytest
import respx
from pydantic import Field

from comms_client.auth.credentials import CredentialKind, CredentialSet
from comms_client.auth.selector import AuthMethodSelector
from comms_client.config import resolve_config
from comms_client.core.dispatcher import AsyncEndpointDispatcher, EndpointDispatcher, decode_body
from comms_client.core.endpoint import EndpointDescriptor
from comms_client.core.path import build_url, path_template
from comms_client.core.request_builder import build_body, build_query, prepare_request
from comms_client.errors import (
    ApiError,
    MalformedPayloadError,
    NoUsableCredentialError,
    PreconditionError,
    TransportError,
    VoiceApiError,
)
from comms_client.wire.model import WireModel
from conftest import API_BASE, REST_BASE, RecordingTransport, json_response


class Widget(WireModel):
    id: int
    name: Optional[str] = None


class WidgetRef(WireModel):
    """Path-only request."""

    id: str = Field(exclude=True)


class WidgetFilter(WireModel):
    page_size: Optional[int] = None
    active: Optional[bool] = None


def _widget_path(request: WidgetRef) -> str:
    return path_template("/v1/widgets/{id}", id=request.id)


GET_WIDGET = EndpointDescriptor(
    method="GET",
    path=_widget_path,
    auth=(CredentialKind.BEARER_TOKEN, CredentialKind.API_KEY_SECRET),
    response_type=Widget,
)

SIGNED_WIDGET = EndpointDescriptor(
    method="GET",
    path="/widgets",
    auth=(CredentialKind.HMAC_SIGNED,),
    response_type=dict,
    base="rest",
)

CREATE_WIDGET = EndpointDescriptor(
    method="POST",
    path="/v1/widgets",
    auth=(CredentialKind.API_KEY_SECRET,),
    response_type=Widget,
)

DELETE_WIDGET = EndpointDescriptor(
    method="DELETE",
    path=_widget_path,
    auth=(CredentialKind.API_KEY_SECRET,),
)


class TestPathTemplate:
    # Happy Path: substitution
    def test_substitutes(self):
        assert path_template("/v1/widgets/{id}", id=42) == "/v1/widgets/42"

    # Path: values are URL-quoted, including '/'
    def test_quotes_values(self):
        assert path_template("/v1/widgets/{id}", id="a b/c") == "/v1/widgets/a%20b%2Fc"

    # Error Path: missing parameter
    def test_missing_parameter(self):
        with pytest.raises(PreconditionError) as exc_info:
            path_template("/v1/widgets/{id}")
        assert exc_info.value.field == "id"
        assert exc_info.value.constraint == "required"

    # Error Path: empty or blank parameter
    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_parameter(self, value):
        with pytest.raises(PreconditionError) as exc_info:
            path_template("/v1/widgets/{id}", id=value)
        assert exc_info.value.constraint == "non-empty"


class TestBuildUrl:
    # Happy Path: absolute path appended to base
    def test_absolute_path(self):
        assert build_url("https://api.test", "/v1/widgets") == "https://api.test/v1/widgets"

    # Path: base path is kept
    def test_base_path_kept(self):
        assert build_url("https://api.test/prefix/", "/v1/widgets") == "https://api.test/prefix/v1/widgets"

    # Path: relative path joined under the base path
    def test_relative_path(self):
        assert build_url("https://rest.test/prefix", "account/get-balance") == "https://rest.test/prefix/account/get-balance"

    # Boundary: empty path returns the base unchanged
    def test_empty_path(self):
        assert build_url("https://api.test/v1", "") == "https://api.test/v1"


class TestEndpointDescriptor:
    # Happy Path: method normalized
    def test_method_upper_cased(self):
        descriptor = EndpointDescriptor(method="get", path="/x", auth=(CredentialKind.API_KEY_SECRET,))
        assert descriptor.method == "GET"

    # Error Path: empty auth tuple
    def test_empty_auth(self):
        with pytest.raises(ValueError):
            EndpointDescriptor(method="GET", path="/x", auth=())

    # Error Path: unknown method
    def test_unknown_method(self):
        with pytest.raises(ValueError):
            EndpointDescriptor(method="TRACE", path="/x", auth=(CredentialKind.API_KEY_SECRET,))

    # Error Path: unknown base URI
    def test_unknown_base(self):
        with pytest.raises(ValueError):
            EndpointDescriptor(method="GET", path="/x", auth=(CredentialKind.API_KEY_SECRET,), base="video")

    # Error Path: error_type must be an ApiError subclass
    def test_bad_error_type(self):
        with pytest.raises(ValueError):
            EndpointDescriptor(method="GET", path="/x", auth=(CredentialKind.API_KEY_SECRET,), error_type=KeyError)

    # Path: descriptors are immutable
    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            GET_WIDGET.method = "POST"


class TestBuildQuery:
    # Path: unset fields are omitted, bools lowercase
    def test_model_query(self):
        assert build_query(WidgetFilter(active=True)) == {"active": "true"}

    # Path: None request gives no params
    def test_none(self):
        assert build_query(None) == {}

    # Path: None values in a mapping are dropped
    def test_mapping(self):
        assert build_query({"a": 1, "b": None}) == {"a": "1"}

    # Error Path: unrenderable request
    def test_unrenderable(self):
        with pytest.raises(PreconditionError):
            build_query(42)


class TestBuildBody:
    # Happy Path: only set fields are sent
    def test_model_body(self):
        content, is_json = build_body(Widget(id=1))
        assert is_json
        assert json.loads(content) == {"id": 1}

    # Path: bytes pass through as raw content
    def test_bytes(self):
        assert build_body(b"\x00\x01") == (b"\x00\x01", False)

    # Path: None and str carry no body
    @pytest.mark.parametrize("request_value", [None, "ignored"])
    def test_no_body(self, request_value):
        assert build_body(request_value) == (None, False)

    # Error Path: not JSON serializable
    def test_not_serializable(self):
        with pytest.raises(PreconditionError):
            build_body({"when": object()})


class TestPrepareRequest:
    # Happy Path: URL, headers and auth resolved without I/O
    def test_prepare(self, config, all_credentials):
        prepared = prepare_request(
            GET_WIDGET, WidgetRef(id="42"), resolve_config(config), AuthMethodSelector(all_credentials)
        )

        assert prepared.method == "GET"
        assert prepared.url == f"{API_BASE}/v1/widgets/42"
        assert prepared.headers["Authorization"].startswith("Bearer ")
        assert prepared.headers["Accept"] == "application/json"
        assert "Content-Type" not in prepared.headers
        assert prepared.content is None

    # Path: HMAC params merged into query on the rest base
    def test_hmac_params(self, config, hmac_credential):
        prepared = prepare_request(
            SIGNED_WIDGET, {"color": "red"}, resolve_config(config), AuthMethodSelector(CredentialSet(hmac_credential))
        )

        assert prepared.url == f"{REST_BASE}/widgets"
        assert prepared.params["color"] == "red"
        assert set(prepared.params) == {"color", "api_key", "timestamp", "sig"}

    # Path: write methods send a JSON body
    def test_json_body(self, config, api_key_credential):
        prepared = prepare_request(
            CREATE_WIDGET, Widget(id=7, name="gear"), resolve_config(config), AuthMethodSelector(CredentialSet(api_key_credential))
        )

        assert prepared.headers["Content-Type"] == "application/json"
        assert json.loads(prepared.content) == {"id": 7, "name": "gear"}

    # Error Path: path function failure
    def test_path_failure(self, config, all_credentials):
        with pytest.raises(PreconditionError) as exc_info:
            prepare_request(GET_WIDGET, object(), resolve_config(config), AuthMethodSelector(all_credentials))
        assert exc_info.value.field == "path"


class TestDecodeBody:
    # Path: unit response
    def test_none_response_type(self):
        assert decode_body(None, 200, b'{"a":1}') is None

    # Boundary: 204 and empty bodies decode to None
    @pytest.mark.parametrize("status,content", [(204, b""), (200, b""), (200, b"  ")])
    def test_empty(self, status, content):
        assert decode_body(Widget, status, content) is None

    # Path: raw bytes and text
    def test_raw(self):
        assert decode_body(bytes, 200, b"abc") == b"abc"
        assert decode_body(str, 200, b"abc") == "abc"

    # Path: raw JSON with type check
    def test_raw_json(self):
        assert decode_body(dict, 200, b'{"a":1}') == {"a": 1}
        with pytest.raises(MalformedPayloadError):
            decode_body(dict, 200, b"[1]")

    # Error Path: invalid JSON
    def test_invalid_json(self):
        with pytest.raises(MalformedPayloadError):
            decode_body(Widget, 200, b"not json")

    # Error Path: invalid UTF-8 is refused for text and JSON alike
    @pytest.mark.parametrize("response_type", [str, dict, Widget])
    def test_invalid_utf8(self, response_type):
        with pytest.raises(MalformedPayloadError):
            decode_body(response_type, 200, b'{"id": 1, "name": "\xff\xfe"}')

    # Error Path: shape mismatch names the field
    def test_shape_mismatch(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            decode_body(Widget, 200, b'{"id":"forty-two"}')
        assert exc_info.value.field == "id"


class TestEndpointDispatcher:
    # Happy Path: 2xx decoded into the response type
    def test_success(self, config, all_credentials):
        with respx.mock(base_url=API_BASE) as mock:
            route = mock.get("/v1/widgets/42").mock(return_value=httpx.Response(200, json={"id": 42, "name": "gear"}))

            with EndpointDispatcher(all_credentials, config) as dispatcher:
                widget = dispatcher.execute(GET_WIDGET, WidgetRef(id="42"))

        assert widget == Widget(id=42, name="gear")
        assert route.call_count == 1
        assert route.calls.last.request.headers["Authorization"].startswith("Bearer ")

    # Error Path: non-2xx becomes the descriptor's error type
    def test_not_found(self, config, all_credentials):
        with respx.mock(base_url=API_BASE) as mock:
            route = mock.get("/v1/widgets/42").mock(return_value=httpx.Response(404, json={"detail": "not found"}))

            with EndpointDispatcher(all_credentials, config) as dispatcher:
                with pytest.raises(ApiError) as exc_info:
                    dispatcher.execute(GET_WIDGET, WidgetRef(id="42"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "not found"
        assert route.call_count == 1

    # Error Path: missing credential fails before any HTTP call
    def test_no_usable_credential_no_io(self, config, api_key_credential):
        transport = RecordingTransport(json_response(200, {}))
        dispatcher = EndpointDispatcher(CredentialSet(api_key_credential), config, transport.sync_client())

        with pytest.raises(NoUsableCredentialError):
            dispatcher.execute(SIGNED_WIDGET, {})

        assert transport.call_count == 0

    # Error Path: empty path segment fails before any HTTP call
    def test_precondition_no_io(self, config, all_credentials):
        transport = RecordingTransport(json_response(200, {"id": 1}))
        dispatcher = EndpointDispatcher(all_credentials, config, transport.sync_client())

        with pytest.raises(PreconditionError):
            dispatcher.execute(GET_WIDGET, WidgetRef(id=""))

        assert transport.call_count == 0

    # Error Path: transport failure wrapped with cause
    def test_transport_error(self, config, all_credentials):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = RecordingTransport(handler)
        dispatcher = EndpointDispatcher(all_credentials, config, transport.sync_client())

        with pytest.raises(TransportError) as exc_info:
            dispatcher.execute(GET_WIDGET, WidgetRef(id="42"))

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert transport.call_count == 1

    # Path: family error type parses extra fields
    def test_family_error(self, config, all_credentials):
        descriptor = EndpointDescriptor(
            method="GET", path="/v1/calls", auth=(CredentialKind.BEARER_TOKEN,), error_type=VoiceApiError
        )
        body = {"title": "Bad Request", "invalid_parameters": [{"name": "to", "reason": "required"}]}
        transport = RecordingTransport(json_response(400, body))
        dispatcher = EndpointDispatcher(all_credentials, config, transport.sync_client())

        with pytest.raises(VoiceApiError) as exc_info:
            dispatcher.execute(descriptor)

        assert exc_info.value.invalid_parameters == ({"name": "to", "reason": "required"},)

    # Path: DELETE with 204 returns None and sends no body
    def test_delete_no_content(self, config, all_credentials):
        transport = RecordingTransport(json_response(204))
        dispatcher = EndpointDispatcher(all_credentials, config, transport.sync_client())

        assert dispatcher.execute(DELETE_WIDGET, WidgetRef(id="9")) is None
        assert transport.last.method == "DELETE"
        assert transport.last.content == b""

    # Path: exactly one round trip on a 5xx
    def test_no_retry_on_server_error(self, config, all_credentials):
        transport = RecordingTransport(json_response(503, {"title": "Service Unavailable"}))
        dispatcher = EndpointDispatcher(all_credentials, config, transport.sync_client())

        with pytest.raises(ApiError):
            dispatcher.execute(GET_WIDGET, WidgetRef(id="1"))

        assert transport.call_count == 1

    # Error Path: closed dispatcher
    def test_closed(self, config, all_credentials):
        dispatcher = EndpointDispatcher(all_credentials, config)
        dispatcher.close()

        with pytest.raises(RuntimeError):
            dispatcher.execute(GET_WIDGET, WidgetRef(id="1"))

    # Path: HTTP tracing prints masked panels
    def test_trace_http(self, config, all_credentials):
        from io import StringIO

        from rich.console import Console

        from comms_client.console import set_console

        buffer = StringIO()
        set_console(Console(file=buffer, width=120))
        try:
            config.trace_http = True
            transport = RecordingTransport(json_response(200, {"id": 1}))
            dispatcher = EndpointDispatcher(all_credentials, config, transport.sync_client())
            dispatcher.execute(GET_WIDGET, WidgetRef(id="1"))
        finally:
            set_console(None)

        output = buffer.getvalue()
        assert "GET" in output
        assert "200" in output
        token = transport.last.headers["Authorization"].split(" ", 1)[1]
        assert token not in output


class TestAsyncEndpointDispatcher:
    # Happy Path: async round trip
    @pytest.mark.asyncio
    async def test_success(self, config, all_credentials):
        transport = RecordingTransport(json_response(200, {"id": 5}))

        async with AsyncEndpointDispatcher(all_credentials, config, transport.async_client()) as dispatcher:
            widget = await dispatcher.execute(GET_WIDGET, WidgetRef(id="5"))

        assert widget.id == 5
        assert transport.last.url == f"{API_BASE}/v1/widgets/5"

    # Error Path: async error mapping
    @pytest.mark.asyncio
    async def test_error(self, config, all_credentials):
        transport = RecordingTransport(json_response(404, {"detail": "not found"}))

        async with AsyncEndpointDispatcher(all_credentials, config, transport.async_client()) as dispatcher:
            with pytest.raises(ApiError) as exc_info:
                await dispatcher.execute(GET_WIDGET, WidgetRef(id="5"))

        assert exc_info.value.status_code == 404

    # Error Path: async transport failure
    @pytest.mark.asyncio
    async def test_transport_error(self, config, all_credentials):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport = RecordingTransport(handler)
        async with AsyncEndpointDispatcher(all_credentials, config, transport.async_client()) as dispatcher:
            with pytest.raises(TransportError):
                await dispatcher.execute(GET_WIDGET, WidgetRef(id="5"))
