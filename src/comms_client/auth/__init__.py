"""
Credentials, request signing and auth method selection.
"""
from .credentials import (
    ApiKeySecretCredential,
    BearerTokenCredential,
    Credential,
    CredentialKind,
    CredentialSet,
    HmacSignedCredential,
    JwtCredential,
)
from .encoding import encode_auth
from .jwt_token import TokenCache, mint_token
from .selector import AuthMethodSelector, select_credential
from .signing import SignatureMethod, compute_signature, sign_params, verify_signature

__all__ = [
    "ApiKeySecretCredential",
    "BearerTokenCredential",
    "Credential",
    "CredentialKind",
    "CredentialSet",
    "HmacSignedCredential",
    "JwtCredential",
    "encode_auth",
    "TokenCache",
    "mint_token",
    "AuthMethodSelector",
    "select_credential",
    "SignatureMethod",
    "compute_signature",
    "sign_params",
    "verify_signature",
]
