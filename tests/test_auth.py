"""
Tests for auth/credentials.py, auth/selector.py, auth/jwt_token.py, auth/encoding.py
Logic testing: Path, Boundary, Error Path coverage
"""
import base64
import threading
from unittest.mock import patch

import jwt
import pytest

from comms_client.auth import jwt_token
from comms_client.auth.credentials import (
    ApiKeySecretCredential,
    BearerTokenCredential,
    CredentialKind,
    CredentialSet,
    HmacSignedCredential,
    JwtCredential,
)
from comms_client.auth.encoding import encode_auth
from comms_client.auth.jwt_token import TokenCache, load_private_key, mint_token
from comms_client.auth.selector import AuthMethodSelector, select_credential
from comms_client.auth.signing import verify_signature
from comms_client.errors import NoUsableCredentialError
from comms_client.types import RequestContext


def _context(params=None):
    return RequestContext(method="GET", url="https://rest.test/account/get-balance", params=params or {})


class TestEncodeAuth:
    # Happy Path: basic
    def test_basic(self):
        headers = encode_auth("basic", username="user", password="pass")
        assert headers == {"Authorization": "Basic " + base64.b64encode(b"user:pass").decode()}

    # Happy Path: bearer
    def test_bearer(self):
        assert encode_auth("bearer", token="tok") == {"Authorization": "Bearer tok"}

    # Error Path: unsupported scheme
    def test_unknown_scheme(self):
        with pytest.raises(ValueError):
            encode_auth("digest", token="tok")


class TestCredentials:
    # Happy Path: API key/secret renders Basic auth
    def test_api_key_secret(self):
        material = ApiKeySecretCredential("key", "secret").get_auth(_context())

        assert material.headers["Authorization"] == "Basic " + base64.b64encode(b"key:secret").decode()
        assert material.params == {}

    # Error Path: blank values rejected at construction
    @pytest.mark.parametrize("key,secret", [("", "secret"), ("key", ""), ("  ", "secret")])
    def test_api_key_secret_requires_values(self, key, secret):
        with pytest.raises(ValueError):
            ApiKeySecretCredential(key, secret)

    # Path: secret is not exposed by repr
    def test_api_key_secret_repr_hides_secret(self):
        assert "secret456" not in repr(ApiKeySecretCredential("key123", "secret456"))

    # Happy Path: HMAC credential signs request params plus api_key
    def test_hmac_signs_params(self):
        credential = HmacSignedCredential("key", "sig-secret", method="sha256")
        material = credential.get_auth(_context({"to": "447700900000"}), now=5000)

        assert set(material.params) == {"api_key", "timestamp", "sig"}
        assert material.params["api_key"] == "key"
        assert material.params["timestamp"] == "5000"
        signed = {"to": "447700900000", **material.params}
        assert verify_signature(signed, "sig-secret", "sha256", now=5000)

    # Error Path: unknown signature method
    def test_hmac_unknown_method(self):
        with pytest.raises(ValueError):
            HmacSignedCredential("key", "secret", method="crc32")

    # Boundary: bearer token usable until expiry
    def test_bearer_expiry(self):
        credential = BearerTokenCredential("tok", expires_at=100)

        assert credential.is_usable(now=99.9)
        assert not credential.is_usable(now=100)

    # Path: bearer without expiry is always usable
    def test_bearer_without_expiry(self):
        assert BearerTokenCredential("tok").is_usable(now=10 ** 12)


class TestCredentialSet:
    # Happy Path: ordered kinds
    def test_kinds(self, api_key_credential, jwt_credential):
        credentials = CredentialSet(jwt_credential, api_key_credential)

        assert credentials.kinds == (CredentialKind.BEARER_TOKEN, CredentialKind.API_KEY_SECRET)
        assert CredentialKind.API_KEY_SECRET in credentials
        assert CredentialKind.HMAC_SIGNED not in credentials
        assert len(credentials) == 2

    # Error Path: two credentials of one kind
    def test_duplicate_kind(self, jwt_credential):
        with pytest.raises(ValueError):
            CredentialSet(jwt_credential, BearerTokenCredential("tok"))

    # Error Path: non-credential value
    def test_rejects_non_credential(self):
        with pytest.raises(TypeError):
            CredentialSet("key:secret")

    # Path: nothing is minted when the set is built
    def test_no_mint_at_construction(self, jwt_credential):
        CredentialSet(jwt_credential)
        assert jwt_credential.mint_count == 0


class TestSelectCredential:
    # Happy Path: first acceptable kind wins
    def test_first_acceptable_wins(self, all_credentials):
        selected = select_credential(
            (CredentialKind.HMAC_SIGNED, CredentialKind.API_KEY_SECRET), all_credentials
        )
        assert selected.kind == CredentialKind.HMAC_SIGNED

    # Path: preferred kind missing falls through to the next
    def test_falls_through(self, api_key_credential):
        selected = select_credential(
            (CredentialKind.BEARER_TOKEN, CredentialKind.API_KEY_SECRET), CredentialSet(api_key_credential)
        )
        assert selected is api_key_credential

    # Path: expired bearer token is skipped
    def test_unusable_skipped(self, api_key_credential):
        expired = BearerTokenCredential("tok", expires_at=10)
        selected = select_credential(
            (CredentialKind.BEARER_TOKEN, CredentialKind.API_KEY_SECRET),
            CredentialSet(expired, api_key_credential),
            now=20,
        )
        assert selected is api_key_credential

    # Error Path: nothing usable
    def test_no_usable_credential(self, api_key_credential):
        with pytest.raises(NoUsableCredentialError) as exc_info:
            select_credential((CredentialKind.HMAC_SIGNED,), CredentialSet(api_key_credential))

        assert exc_info.value.acceptable == (CredentialKind.HMAC_SIGNED,)
        assert exc_info.value.available == (CredentialKind.API_KEY_SECRET,)

    # Error Path: empty acceptable list is a configuration bug
    def test_empty_acceptable(self, all_credentials):
        with pytest.raises(ValueError):
            select_credential((), all_credentials)

    # Happy Path: selector binds the set
    def test_selector(self, all_credentials):
        selector = AuthMethodSelector(all_credentials)
        assert selector.select((CredentialKind.BEARER_TOKEN,)).kind == CredentialKind.BEARER_TOKEN


class TestMintToken:
    # Happy Path: RS256 with the standard claims
    def test_claims(self, private_key, public_key):
        token = mint_token("app-1", private_key, ttl=600, claims={"sub": "alice"}, now=1_000)
        claims = jwt.decode(token, public_key, algorithms=["RS256"], options={"verify_exp": False, "verify_iat": False})

        assert claims["application_id"] == "app-1"
        assert claims["iat"] == 1_000
        assert claims["exp"] == 1_600
        assert claims["sub"] == "alice"
        assert claims["jti"]

    # Path: every token has a fresh jti
    def test_unique_jti(self, private_key, public_key):
        options = {"verify_exp": False, "verify_iat": False}
        first = jwt.decode(mint_token("app", private_key, now=1), public_key, algorithms=["RS256"], options=options)
        second = jwt.decode(mint_token("app", private_key, now=1), public_key, algorithms=["RS256"], options=options)
        assert first["jti"] != second["jti"]


class TestLoadPrivateKey:
    # Path: PEM text
    def test_pem_text(self, private_key):
        assert load_private_key(private_key.decode()) == private_key

    # Path: file path
    def test_path(self, private_key, tmp_path):
        key_file = tmp_path / "private.key"
        key_file.write_bytes(private_key)

        assert load_private_key(key_file) == private_key
        assert load_private_key(str(key_file)) == private_key


class TestTokenCache:
    # Happy Path: reused within the TTL
    def test_reuse_within_ttl(self, private_key):
        cache = TokenCache("app", private_key, ttl=900, refresh_margin=30)

        first = cache.get(now=1_000)
        second = cache.get(now=1_000 + 869)

        assert first == second
        assert cache.mint_count == 1

    # Boundary: re-minted once inside the refresh margin
    def test_remint_near_expiry(self, private_key):
        cache = TokenCache("app", private_key, ttl=900, refresh_margin=30)

        first = cache.get(now=1_000)
        second = cache.get(now=1_000 + 870)

        assert first != second
        assert cache.mint_count == 2

    # Error Path: ttl must exceed the margin
    def test_ttl_must_exceed_margin(self, private_key):
        with pytest.raises(ValueError):
            TokenCache("app", private_key, ttl=30, refresh_margin=30)

    # Loop: concurrent callers mint once
    def test_concurrent_single_mint(self, private_key):
        cache = TokenCache("app", private_key)
        tokens = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            tokens.append(cache.get(now=1_000))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(tokens)) == 1
        assert cache.mint_count == 1


class TestJwtCredential:
    # Happy Path: bearer header with a minted token
    def test_get_auth(self, jwt_credential, public_key):
        material = jwt_credential.get_auth(_context())
        scheme, token = material.headers["Authorization"].split(" ", 1)

        assert scheme == "Bearer"
        assert jwt.decode(token, public_key, algorithms=["RS256"])["application_id"] == "app-1"

    # Path: minting goes through mint_token once per TTL
    def test_mints_lazily(self, private_key):
        credential = JwtCredential("app-1", private_key)
        with patch.object(jwt_token, "mint_token", wraps=jwt_token.mint_token) as mint:
            credential.get_auth(_context(), now=1_000)
            credential.get_auth(_context(), now=1_100)

        assert mint.call_count == 1
        assert credential.mint_count == 1

    # Error Path: application id required
    def test_requires_application_id(self, private_key):
        with pytest.raises(ValueError):
            JwtCredential("", private_key)
