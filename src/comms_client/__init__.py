"""
HTTP client for a multi-product communications API.

Provides typed endpoint dispatch with ranked credential selection (API
key/secret, HMAC-signed, application JWT) and a polymorphic codec for
conversation event payloads.
"""
__version__ = "0.1.0"

from .types import (
    HttpMethod,
    RequestContext,
    AuthMaterial,
    PreparedRequest,
)
from .config import (
    HttpConfig,
    TimeoutConfig,
    ClientConfig,
    resolve_config,
)
from .errors import (
    CommsClientError,
    PreconditionError,
    NoUsableCredentialError,
    TransportError,
    MalformedPayloadError,
    ApiError,
    ConversationsApiError,
    VoiceApiError,
    AccountApiError,
    is_retryable,
)
from .auth import (
    CredentialKind,
    Credential,
    CredentialSet,
    ApiKeySecretCredential,
    HmacSignedCredential,
    JwtCredential,
    BearerTokenCredential,
    AuthMethodSelector,
    SignatureMethod,
    verify_signature,
)
from .core import (
    EndpointDescriptor,
    EndpointDispatcher,
    AsyncEndpointDispatcher,
    path_template,
)
from .conversations import (
    ConversationsClient,
    PolymorphicEventCodec,
    Event,
    EventType,
    MemberChannel,
    decode_event,
    encode_event,
)
from .voice import VoiceClient, CreateCallRequest
from .account import AccountClient
from .settings import ClientSettings, load_settings, load_credentials
from .client import CommsClient, AsyncCommsClient, create_client_from_settings

__all__ = [
    "__version__",
    # Types
    "HttpMethod",
    "RequestContext",
    "AuthMaterial",
    "PreparedRequest",
    # Config
    "HttpConfig",
    "TimeoutConfig",
    "ClientConfig",
    "resolve_config",
    # Errors
    "CommsClientError",
    "PreconditionError",
    "NoUsableCredentialError",
    "TransportError",
    "MalformedPayloadError",
    "ApiError",
    "ConversationsApiError",
    "VoiceApiError",
    "AccountApiError",
    "is_retryable",
    # Auth
    "CredentialKind",
    "Credential",
    "CredentialSet",
    "ApiKeySecretCredential",
    "HmacSignedCredential",
    "JwtCredential",
    "BearerTokenCredential",
    "AuthMethodSelector",
    "SignatureMethod",
    "verify_signature",
    # Dispatch
    "EndpointDescriptor",
    "EndpointDispatcher",
    "AsyncEndpointDispatcher",
    "path_template",
    # Conversations
    "ConversationsClient",
    "PolymorphicEventCodec",
    "Event",
    "EventType",
    "MemberChannel",
    "decode_event",
    "encode_event",
    # Voice / Account
    "VoiceClient",
    "CreateCallRequest",
    "AccountClient",
    # Settings
    "ClientSettings",
    "load_settings",
    "load_credentials",
    # Clients
    "CommsClient",
    "AsyncCommsClient",
    "create_client_from_settings",
]
