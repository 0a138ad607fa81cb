"""
Shared fixtures.
"""
import json
from typing import Any, Callable, List

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from comms_client.auth.credentials import (
    ApiKeySecretCredential,
    CredentialSet,
    HmacSignedCredential,
    JwtCredential,
)
from comms_client.config import ClientConfig, HttpConfig

API_BASE = "https://api.test"
REST_BASE = "https://rest.test"

CONVERSATION_ID = "CON-aaaaaaaa-bbbb-cccc-dddd-0123456789ab"
MEMBER_ID = "MEM-aaaaaaaa-bbbb-cccc-dddd-0123456789ab"
USER_ID = "USR-aaaaaaaa-bbbb-cccc-dddd-0123456789ab"


@pytest.fixture(scope="session")
def rsa_key_pair():
    """(private PEM bytes, public PEM bytes)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@pytest.fixture
def private_key(rsa_key_pair):
    return rsa_key_pair[0]


@pytest.fixture
def public_key(rsa_key_pair):
    return rsa_key_pair[1]


@pytest.fixture
def config():
    return ClientConfig(http=HttpConfig(api_base_uri=API_BASE, rest_base_uri=REST_BASE))


@pytest.fixture
def api_key_credential():
    return ApiKeySecretCredential("key123", "secret456")


@pytest.fixture
def hmac_credential():
    return HmacSignedCredential("key123", "signing-secret", method="sha256")


@pytest.fixture
def jwt_credential(private_key):
    return JwtCredential("app-1", private_key)


@pytest.fixture
def all_credentials(api_key_credential, hmac_credential, jwt_credential):
    return CredentialSet(api_key_credential, hmac_credential, jwt_credential)


class RecordingTransport:
    """
    httpx.MockTransport wrapper that records every request.

    ``handler`` returns the httpx.Response for a request.
    """

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)

    def sync_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def json_response(status: int, body: Any = None) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    return handler


@pytest.fixture
def recording_transport():
    """Factory: recording_transport(handler) -> RecordingTransport."""
    return RecordingTransport
