"""
HMAC request signing.

Outbound requests authenticated by signature carry ``api_key``, ``timestamp``
and ``sig`` query parameters. The signature is computed over a canonical
parameter string: every parameter except ``sig``, sorted by name, rendered as
``&name=value``, with ``=`` and ``&`` inside names and values replaced by
``_``. Parameters with empty values are skipped.

The same routine verifies signed inbound callbacks.
"""
import hashlib
import hmac
import logging
import time
from enum import Enum
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

PARAM_SIGNATURE = "sig"
PARAM_TIMESTAMP = "timestamp"
PARAM_API_KEY = "api_key"

# Signed callbacks older (or newer) than this are rejected
MAX_ALLOWABLE_TIME_DELTA = 5 * 60


class SignatureMethod(str, Enum):
    """Supported signature algorithms."""

    MD5HASH = "md5hash"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"


ParamValue = Optional[Union[str, int, float, bool]]


def _clean(value: str) -> str:
    return value.replace("=", "_").replace("&", "_")


def _render(value: ParamValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def canonical_string(params: Mapping[str, ParamValue]) -> str:
    """Build the string the signature is computed over."""
    parts = []
    for name in sorted(params):
        if name == PARAM_SIGNATURE:
            continue
        value = params[name]
        if value is None or value == "":
            continue
        parts.append(f"&{_clean(name)}={_clean(_render(value))}")
    return "".join(parts)


def compute_signature(
    params: Mapping[str, ParamValue],
    secret: str,
    method: Union[SignatureMethod, str] = SignatureMethod.MD5HASH,
) -> str:
    """Compute the lowercase hex signature for a parameter set."""
    method = SignatureMethod(method)
    canonical = canonical_string(params)

    if method == SignatureMethod.MD5HASH:
        return hashlib.md5((canonical + secret).encode("utf-8")).hexdigest()

    digest = getattr(hashlib, method.value)
    return hmac.new(secret.encode("utf-8"), canonical.encode("utf-8"), digest).hexdigest()


def sign_params(
    params: Mapping[str, ParamValue],
    secret: str,
    method: Union[SignatureMethod, str] = SignatureMethod.MD5HASH,
    now: Optional[float] = None,
) -> dict:
    """
    Return a copy of params with ``timestamp`` and ``sig`` added.

    Any ``sig`` already present is replaced.
    """
    signed = {k: v for k, v in params.items() if k != PARAM_SIGNATURE}
    signed[PARAM_TIMESTAMP] = str(int(time.time() if now is None else now))
    signed[PARAM_SIGNATURE] = compute_signature(signed, secret, method)
    return signed


def verify_signature(
    params: Mapping[str, ParamValue],
    secret: str,
    method: Union[SignatureMethod, str] = SignatureMethod.MD5HASH,
    now: Optional[float] = None,
) -> bool:
    """
    Verify a signed parameter set, e.g. an inbound callback.

    Returns False when the signature or timestamp is missing, the timestamp is
    not an integer or is outside the allowed window, or the signature differs.
    """
    provided = params.get(PARAM_SIGNATURE)
    if not provided:
        logger.debug("verify_signature: no signature present")
        return False

    timestamp = params.get(PARAM_TIMESTAMP)
    try:
        timestamp = int(str(timestamp))
    except ValueError:
        logger.debug(f"verify_signature: invalid timestamp {timestamp!r}")
        return False

    current = time.time() if now is None else now
    if abs(current - timestamp) > MAX_ALLOWABLE_TIME_DELTA:
        logger.debug(f"verify_signature: timestamp {timestamp} outside window (now={int(current)})")
        return False

    expected = compute_signature(params, secret, method)
    return hmac.compare_digest(expected.lower(), str(provided).lower())
