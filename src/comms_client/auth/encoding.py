import base64
from typing import Any, Dict


def _base64_encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("utf-8")


def encode_auth(auth_type: str, **kwargs: Any) -> Dict[str, str]:
    """
    Encodes credentials into an Authorization header.

    Args:
        auth_type: 'basic' or 'bearer'.
        **kwargs: username/password for basic, token for bearer.

    Returns:
        A dictionary containing the HTTP header.
    """
    auth_type = auth_type.lower()

    if auth_type == "basic":
        username = kwargs.get("username")
        password = kwargs.get("password")
        if not username or not password:
            raise ValueError("Basic auth requires username and password")
        return {"Authorization": f"Basic {_base64_encode(f'{username}:{password}')}"}

    if auth_type == "bearer":
        token = kwargs.get("token")
        if not token:
            raise ValueError("bearer requires token")
        return {"Authorization": f"Bearer {token}"}

    raise ValueError(f"Unsupported auth type: {auth_type}")
