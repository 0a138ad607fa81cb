"""
Client Exceptions

Responsibilities:
- Define the client's exception hierarchy
- Keep caller/configuration bugs distinguishable from runtime/network failures
- Map non-2xx response bodies into per-product error types

All client exceptions inherit from CommsClientError.
"""
import json
from typing import Any, Dict, Iterable, Optional, Tuple


class CommsClientError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Error message
        details: Optional dict with additional error context
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PreconditionError(CommsClientError, ValueError):
    """
    Malformed request detected before any I/O.

    Raised when:
    - A builder or constructor rejects a field value
    - A required path parameter is empty or missing
    - An identifier does not have the expected format

    Never retried; always the caller's bug.
    """

    def __init__(self, message: str, field: Optional[str] = None, constraint: Optional[str] = None):
        super().__init__(message, details={"field": field, "constraint": constraint})
        self.field = field
        self.constraint = constraint


class NoUsableCredentialError(CommsClientError):
    """
    None of an endpoint's acceptable credential kinds is available.

    This is a configuration error. It is raised before any network call.
    """

    def __init__(self, acceptable: Iterable[Any], available: Iterable[Any]):
        self.acceptable: Tuple[Any, ...] = tuple(acceptable)
        self.available: Tuple[Any, ...] = tuple(available)
        wanted = ", ".join(getattr(k, "value", str(k)) for k in self.acceptable) or "<none>"
        held = ", ".join(getattr(k, "value", str(k)) for k in self.available) or "<none>"
        super().__init__(
            f"No usable credential: endpoint accepts [{wanted}], client holds [{held}]",
            details={"acceptable": list(self.acceptable), "available": list(self.available)},
        )


class TransportError(CommsClientError):
    """
    Connection, timeout or I/O failure below the application protocol.

    The underlying httpx exception is chained as __cause__.
    """
    pass


class MalformedPayloadError(CommsClientError):
    """
    A 2xx response or event payload could not be parsed into the expected shape.

    Raised when:
    - The body is not valid JSON
    - An event has no string discriminator
    - A field does not match the variant's expected shape
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field})
        self.field = field


class ApiError(CommsClientError):
    """
    A non-2xx response whose body was parsed into the endpoint family's error shape.

    The body follows the problem-details layout: type, title, detail, instance.
    Subclasses name the product family and may read additional fields.
    """

    family = "api"

    def __init__(
        self,
        status_code: int,
        title: Optional[str] = None,
        detail: Optional[str] = None,
        type: Optional[str] = None,
        instance: Optional[str] = None,
        body: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type
        self.instance = instance
        self.body = body or {}
        super().__init__(self._format_message(), details={"status_code": status_code, "body": self.body})

    def _format_message(self) -> str:
        if self.title is None:
            return f"HTTP {self.status_code}"
        message = f"{self.status_code} ({self.title})"
        if self.detail:
            message += f": {self.detail}"
        return message

    @classmethod
    def from_response(cls, status_code: int, reason: Optional[str], content: bytes) -> "ApiError":
        """Build the error from a raw non-2xx response."""
        body: Dict[str, Any] = {}
        if content and content.strip():
            try:
                parsed = json.loads(content)
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                body = parsed
            else:
                body = {"raw": content.decode("utf-8", errors="replace")}

        error = cls(
            status_code=status_code,
            title=body.get("title") or reason or None,
            detail=body.get("detail"),
            type=body.get("type"),
            instance=body.get("instance"),
            body=body,
        )
        error._read_family_fields(body)
        return error

    def _read_family_fields(self, body: Dict[str, Any]) -> None:
        """Hook for subclasses reading extra fields from the error body."""
        pass

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiError) or type(self) is not type(other):
            return NotImplemented
        return (
            self.status_code == other.status_code
            and self.title == other.title
            and self.detail == other.detail
            and self.type == other.type
            and self.instance == other.instance
        )

    def __hash__(self) -> int:
        return hash((type(self), self.status_code, self.title, self.detail, self.type, self.instance))


class ConversationsApiError(ApiError):
    """Error returned by the conversations API."""

    family = "conversations"
    code: Optional[str] = None

    def _read_family_fields(self, body: Dict[str, Any]) -> None:
        self.code = body.get("code")


class VoiceApiError(ApiError):
    """Error returned by the voice API."""

    family = "voice"
    invalid_parameters: Tuple[Any, ...] = ()

    def _read_family_fields(self, body: Dict[str, Any]) -> None:
        self.invalid_parameters = tuple(body.get("invalid_parameters") or ())


class AccountApiError(ApiError):
    """Error returned by the account API."""

    family = "account"
    error_code: Optional[str] = None

    def _read_family_fields(self, body: Dict[str, Any]) -> None:
        self.error_code = body.get("error-code") or body.get("error_code")


RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def is_retryable(error: BaseException) -> bool:
    """
    Whether a layer above the dispatcher may retry after this error.

    Transport failures and 429/5xx API errors are runtime conditions.
    Precondition, credential and payload errors are caller or configuration bugs.
    """
    if isinstance(error, TransportError):
        return True
    if isinstance(error, ApiError):
        return error.status_code in RETRYABLE_STATUS
    return False
