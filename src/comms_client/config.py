"""
Configuration for comms_client.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Union
from urllib.parse import urlparse

from . import __version__

DEFAULT_API_BASE_URI = "https://api.nexmo.com"
DEFAULT_REST_BASE_URI = "https://rest.nexmo.com"
DEFAULT_USER_AGENT = f"comms-client-python/{__version__}"


@dataclass
class TimeoutConfig:
    """Timeout configuration in seconds."""

    connect: float = 5.0
    read: float = 30.0
    write: float = 10.0


@dataclass
class HttpConfig:
    """Base URIs that endpoint paths are appended to."""

    api_base_uri: str = DEFAULT_API_BASE_URI
    rest_base_uri: str = DEFAULT_REST_BASE_URI

    def base_uri(self, name: str) -> str:
        """Return the base URI an endpoint declared by name ("api" or "rest")."""
        if name == "api":
            return self.api_base_uri
        if name == "rest":
            return self.rest_base_uri
        raise ValueError(f"Unknown base URI: {name}")


@dataclass
class ClientConfig:
    """Client configuration."""

    http: HttpConfig = field(default_factory=HttpConfig)
    timeout: Union[TimeoutConfig, float, None] = None
    headers: Dict[str, str] = field(default_factory=dict)
    user_agent: Optional[str] = None
    trace_http: bool = False


# Default values
DEFAULT_TIMEOUT = TimeoutConfig()


@dataclass
class ResolvedConfig:
    """Resolved client configuration with defaults applied."""

    http: HttpConfig
    timeout: TimeoutConfig
    headers: Dict[str, str]
    user_agent: str
    trace_http: bool


def normalize_timeout(timeout: Union[TimeoutConfig, float, None]) -> TimeoutConfig:
    """Normalize timeout config."""
    if timeout is None:
        return DEFAULT_TIMEOUT
    if isinstance(timeout, (int, float)):
        return TimeoutConfig(connect=timeout, read=timeout, write=timeout)
    return timeout


def _validate_base_uri(name: str, value: str) -> None:
    if not value:
        raise ValueError(f"{name} is required")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid {name}: {value}")


def validate_config(config: ClientConfig) -> None:
    """Validate client configuration."""
    _validate_base_uri("api_base_uri", config.http.api_base_uri)
    _validate_base_uri("rest_base_uri", config.http.rest_base_uri)

    timeout = normalize_timeout(config.timeout)
    for name in ("connect", "read", "write"):
        if getattr(timeout, name) <= 0:
            raise ValueError(f"timeout.{name} must be positive")


def resolve_config(config: Optional[ClientConfig] = None) -> ResolvedConfig:
    """Resolve client configuration with defaults."""
    config = config or ClientConfig()
    validate_config(config)

    return ResolvedConfig(
        http=HttpConfig(
            api_base_uri=config.http.api_base_uri.rstrip("/"),
            rest_base_uri=config.http.rest_base_uri.rstrip("/"),
        ),
        timeout=normalize_timeout(config.timeout),
        headers=dict(config.headers),
        user_agent=config.user_agent or DEFAULT_USER_AGENT,
        trace_http=config.trace_http,
    )
