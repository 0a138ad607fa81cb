"""
Credentials for comms_client.

A credential renders the auth material (headers and/or query parameters) for
one request. A CredentialSet holds at most one credential per kind and is
built once when the client is created.
"""
import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from ..console import mask_sensitive
from ..types import AuthMaterial, RequestContext
from .encoding import encode_auth
from .jwt_token import DEFAULT_REFRESH_MARGIN, DEFAULT_TTL, TokenCache, load_private_key
from .signing import PARAM_API_KEY, SignatureMethod, sign_params

logger = logging.getLogger(__name__)
LOG_PREFIX = f"[AUTH:{__name__}]"


class CredentialKind(str, Enum):
    """Supported authentication schemes."""

    API_KEY_SECRET = "api_key_secret"
    HMAC_SIGNED = "hmac_signed"
    BEARER_TOKEN = "bearer_token"


def _require(name: str, value: Optional[str]) -> str:
    if not value or not str(value).strip():
        raise ValueError(f"{name} is required")
    return value


class Credential(ABC):
    """Credential interface."""

    kind: CredentialKind

    def is_usable(self, now: Optional[float] = None) -> bool:
        """Whether this credential can authenticate a request at ``now``."""
        return True

    @abstractmethod
    def get_auth(self, context: RequestContext, now: Optional[float] = None) -> AuthMaterial:
        """Render auth material for a request."""
        ...


class ApiKeySecretCredential(Credential):
    """API key and secret sent as HTTP Basic auth."""

    kind = CredentialKind.API_KEY_SECRET

    def __init__(self, api_key: str, api_secret: str):
        self.api_key = _require("api_key", api_key)
        self._api_secret = _require("api_secret", api_secret)

    def get_auth(self, context: RequestContext, now: Optional[float] = None) -> AuthMaterial:
        headers = encode_auth("basic", username=self.api_key, password=self._api_secret)
        logger.debug(
            f"{LOG_PREFIX} ApiKeySecretCredential.get_auth: api_key={self.api_key} -> "
            f"Authorization={mask_sensitive(headers['Authorization'])}"
        )
        return AuthMaterial(headers=headers)

    def __repr__(self) -> str:
        return f"ApiKeySecretCredential(api_key={self.api_key!r}, api_secret='***')"


class HmacSignedCredential(Credential):
    """API key plus a signature over the request's query parameters."""

    kind = CredentialKind.HMAC_SIGNED

    def __init__(
        self,
        api_key: str,
        signature_secret: str,
        method: Union[SignatureMethod, str] = SignatureMethod.MD5HASH,
    ):
        self.api_key = _require("api_key", api_key)
        self._signature_secret = _require("signature_secret", signature_secret)
        self.method = SignatureMethod(method)

    def get_auth(self, context: RequestContext, now: Optional[float] = None) -> AuthMaterial:
        params = dict(context.params)
        params[PARAM_API_KEY] = self.api_key
        signed = sign_params(params, self._signature_secret, self.method, now=now)
        material = {k: str(signed[k]) for k in (PARAM_API_KEY, "timestamp", "sig")}
        logger.debug(
            f"{LOG_PREFIX} HmacSignedCredential.get_auth: method={self.method.value}, "
            f"timestamp={material['timestamp']}, sig={mask_sensitive(material['sig'])}"
        )
        return AuthMaterial(params=material)

    def __repr__(self) -> str:
        return f"HmacSignedCredential(api_key={self.api_key!r}, method={self.method.value!r})"


class JwtCredential(Credential):
    """
    Application JWT minted from a private key.

    Nothing is minted at construction. The token is minted the first time a
    request needs it and reused until it nears expiry.
    """

    kind = CredentialKind.BEARER_TOKEN

    def __init__(
        self,
        application_id: str,
        private_key: Union[str, bytes, Path],
        ttl: int = DEFAULT_TTL,
        refresh_margin: int = DEFAULT_REFRESH_MARGIN,
        claims: Optional[Mapping[str, Any]] = None,
    ):
        self.application_id = _require("application_id", application_id)
        if not private_key:
            raise ValueError("private_key is required")
        self._cache = TokenCache(
            application_id,
            load_private_key(private_key),
            ttl=ttl,
            refresh_margin=refresh_margin,
            claims=claims,
        )

    @property
    def mint_count(self) -> int:
        return self._cache.mint_count

    def token(self, now: Optional[float] = None) -> str:
        return self._cache.get(now)

    def get_auth(self, context: RequestContext, now: Optional[float] = None) -> AuthMaterial:
        token = self.token(now)
        logger.debug(
            f"{LOG_PREFIX} JwtCredential.get_auth: application_id={self.application_id} -> "
            f"Authorization=Bearer {mask_sensitive(token)}"
        )
        return AuthMaterial(headers=encode_auth("bearer", token=token))

    def __repr__(self) -> str:
        return f"JwtCredential(application_id={self.application_id!r})"


class BearerTokenCredential(Credential):
    """Pre-issued bearer token, optionally with an expiry (epoch seconds)."""

    kind = CredentialKind.BEARER_TOKEN

    def __init__(self, token: str, expires_at: Optional[float] = None):
        self._token = _require("token", token)
        self.expires_at = expires_at

    def is_usable(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return True
        now = time.time() if now is None else now
        return now < self.expires_at

    def get_auth(self, context: RequestContext, now: Optional[float] = None) -> AuthMaterial:
        return AuthMaterial(headers=encode_auth("bearer", token=self._token))

    def __repr__(self) -> str:
        return f"BearerTokenCredential(token={mask_sensitive(self._token)!r}, expires_at={self.expires_at!r})"


class CredentialSet:
    """Immutable, ordered collection holding at most one credential per kind."""

    def __init__(self, *credentials: Credential):
        by_kind = {}
        for credential in credentials:
            if not isinstance(credential, Credential):
                raise TypeError(f"Expected a Credential, got {type(credential).__name__}")
            if credential.kind in by_kind:
                raise ValueError(f"Duplicate credential for kind {credential.kind.value}")
            by_kind[credential.kind] = credential
        self._by_kind = MappingProxyType(by_kind)

    @property
    def kinds(self) -> Tuple[CredentialKind, ...]:
        return tuple(self._by_kind)

    def get(self, kind: CredentialKind) -> Optional[Credential]:
        return self._by_kind.get(kind)

    def __contains__(self, kind: object) -> bool:
        return kind in self._by_kind

    def __iter__(self) -> Iterator[Credential]:
        return iter(self._by_kind.values())

    def __len__(self) -> int:
        return len(self._by_kind)

    def __repr__(self) -> str:
        return f"CredentialSet({', '.join(repr(c) for c in self)})"
