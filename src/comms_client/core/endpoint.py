"""
Endpoint descriptors.

An EndpointDescriptor is the immutable description of one API operation.
Descriptors are module-level constants shared by every call.
"""
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, Type, TypeVar, Union

from ..auth.credentials import CredentialKind
from ..errors import ApiError
from ..types import HTTP_METHODS, HttpMethod

Req = TypeVar("Req")
Res = TypeVar("Res")

BASE_URIS = ("api", "rest")


@dataclass(frozen=True)
class EndpointDescriptor(Generic[Req, Res]):
    """
    One API operation.

    Attributes:
        method: HTTP method
        path: Pure function of the request returning the path, or a fixed path
        auth: Acceptable credential kinds, most preferred first
        response_type: None (unit), bytes, str, dict/list (raw JSON), a wire
            model class with ``from_wire``, or a callable taking parsed JSON
        error_type: ApiError subclass non-2xx bodies are parsed into
        base: Which configured base URI the path is appended to
        content_type: Content-Type for request bodies (default JSON)
        accept: Accept header (default JSON)
        name: Operation name for logs
    """

    method: HttpMethod
    path: Union[Callable[[Req], str], str]
    auth: Tuple[CredentialKind, ...]
    response_type: Any = None
    error_type: Type[ApiError] = ApiError
    base: str = "api"
    content_type: Optional[str] = None
    accept: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        method = str(self.method).upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        object.__setattr__(self, "method", method)

        auth = tuple(self.auth)
        if not auth:
            raise ValueError("An endpoint must accept at least one credential kind")
        for kind in auth:
            if not isinstance(kind, CredentialKind):
                raise ValueError(f"Unknown credential kind: {kind!r}")
        object.__setattr__(self, "auth", auth)

        if self.base not in BASE_URIS:
            raise ValueError(f"Unknown base URI '{self.base}', expected one of {BASE_URIS}")
        if not (isinstance(self.error_type, type) and issubclass(self.error_type, ApiError)):
            raise ValueError(f"error_type must be an ApiError subclass, got {self.error_type!r}")

    @property
    def label(self) -> str:
        return self.name or f"{self.method} {self.path if isinstance(self.path, str) else '<path fn>'}"
