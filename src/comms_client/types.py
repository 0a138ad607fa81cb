"""
Type definitions for comms_client.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional


# HTTP methods an endpoint may declare
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

# Methods whose request is rendered as query parameters rather than a body
QUERY_METHODS = frozenset({"GET", "DELETE"})


@dataclass
class RequestContext:
    """Request context handed to a credential when it renders auth material."""

    method: HttpMethod
    url: str
    params: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    json: Optional[Any] = None


@dataclass
class AuthMaterial:
    """Transport-level auth additions produced by a credential."""

    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


@dataclass
class PreparedRequest:
    """A fully resolved request, ready for exactly one HTTP round trip."""

    method: HttpMethod
    url: str
    headers: Dict[str, str]
    params: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None
