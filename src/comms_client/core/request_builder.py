"""
Request builder utilities.

Turns (descriptor, request) into a PreparedRequest:

1. resolve the URL from the descriptor's path function
2. select a credential from the descriptor's acceptable kinds
3. serialize the request (query parameters for GET/DELETE, JSON otherwise)
4. render the credential's auth material onto headers/params
"""
import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from ..auth.selector import AuthMethodSelector
from ..config import ResolvedConfig
from ..errors import PreconditionError
from ..types import QUERY_METHODS, HttpMethod, PreparedRequest, RequestContext
from .endpoint import EndpointDescriptor
from .path import build_url

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def resolve_path(descriptor: EndpointDescriptor, request: Any) -> str:
    """Run the descriptor's path function, mapping its failures to PreconditionError."""
    if isinstance(descriptor.path, str):
        return descriptor.path
    try:
        return descriptor.path(request)
    except PreconditionError:
        raise
    except (ValueError, KeyError, AttributeError, TypeError) as exc:
        raise PreconditionError(
            f"Cannot resolve path for {descriptor.label}: {exc}",
            field="path",
            constraint=type(exc).__name__,
        ) from exc


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(_query_value(v) for v in value)
    return str(value)


def build_query(request: Any) -> Dict[str, str]:
    """Render a request as query parameters, omitting unset values."""
    if request is None or isinstance(request, (str, bytes, bytearray)):
        return {}
    if hasattr(request, "to_request_body"):
        data = request.to_request_body()
    elif isinstance(request, Mapping):
        data = dict(request)
    else:
        raise PreconditionError(
            f"Cannot render {type(request).__name__} as query parameters", field="request", constraint="type"
        )
    return {k: _query_value(v) for k, v in data.items() if v is not None}


def build_body(request: Any) -> Tuple[Optional[bytes], bool]:
    """
    Serialize a request body.

    Returns:
        (content, is_json). Unset model fields are omitted, never sent as null.
    """
    if request is None or isinstance(request, str):
        return None, False
    if isinstance(request, (bytes, bytearray)):
        return bytes(request), False
    if hasattr(request, "to_request_body"):
        data: Any = request.to_request_body()
    elif isinstance(request, (Mapping, list, tuple)):
        data = request
    else:
        raise PreconditionError(
            f"Cannot serialize {type(request).__name__} as a request body", field="request", constraint="type"
        )
    try:
        return json.dumps(data, separators=(",", ":")).encode("utf-8"), True
    except (TypeError, ValueError) as exc:
        raise PreconditionError(f"Request body is not JSON serializable: {exc}", field="request", constraint="json") from exc


def build_headers(
    config: ResolvedConfig,
    descriptor: EndpointDescriptor,
    body_type: Optional[str] = None,
) -> Dict[str, str]:
    """Build request headers (before auth). body_type is the default Content-Type when a body is sent."""
    result = dict(config.headers)
    result["User-Agent"] = config.user_agent
    lowered = {k.lower() for k in result}

    if body_type and "content-type" not in lowered:
        result["Content-Type"] = descriptor.content_type or body_type
    if "accept" not in lowered:
        result["Accept"] = descriptor.accept or JSON_CONTENT_TYPE
    return result


def create_request_context(
    method: HttpMethod,
    url: str,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
    json_body: Optional[Any] = None,
) -> RequestContext:
    """Create request context for credential rendering."""
    return RequestContext(
        method=method,
        url=url,
        params=dict(params or {}),
        headers=dict(headers or {}),
        json=json_body,
    )


def prepare_request(
    descriptor: EndpointDescriptor,
    request: Any,
    config: ResolvedConfig,
    selector: AuthMethodSelector,
    now: Optional[float] = None,
) -> PreparedRequest:
    """Resolve, authenticate and serialize one request without doing any I/O."""
    path = resolve_path(descriptor, request)
    url = build_url(config.http.base_uri(descriptor.base), path)
    logger.debug(f"prepare_request: {descriptor.label} -> {descriptor.method} {url}")

    credential = selector.select(descriptor.auth, now)

    params: Dict[str, str] = {}
    content: Optional[bytes] = None
    is_json = False
    if descriptor.method in QUERY_METHODS:
        params = build_query(request)
    else:
        content, is_json = build_body(request)

    body_type = None
    if content is not None:
        body_type = JSON_CONTENT_TYPE if is_json else "application/octet-stream"
    headers = build_headers(config, descriptor, body_type)

    context = create_request_context(
        descriptor.method,
        url,
        params=params,
        headers=headers,
        json_body=json.loads(content) if is_json else None,
    )
    material = credential.get_auth(context, now)
    headers.update(material.headers)
    params.update(material.params)

    return PreparedRequest(
        method=descriptor.method,
        url=url,
        headers=headers,
        params=params,
        content=content,
    )
