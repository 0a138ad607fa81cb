"""
Account API client.

The account endpoints live on the REST base URI and accept either the API
key/secret pair or an HMAC-signed request, preferring key/secret.
"""
from typing import Any, Optional

from pydantic import Field

from ..auth.credentials import CredentialKind
from ..core.endpoint import EndpointDescriptor
from ..errors import AccountApiError
from ..wire.model import WireModel


class Balance(WireModel):
    value: float
    auto_reload: Optional[bool] = Field(default=None, alias="autoReload")


GET_BALANCE = EndpointDescriptor(
    method="GET",
    path="/account/get-balance",
    auth=(CredentialKind.API_KEY_SECRET, CredentialKind.HMAC_SIGNED),
    response_type=Balance,
    error_type=AccountApiError,
    base="rest",
    name="get_balance",
)


class AccountClient:
    def __init__(self, dispatcher: Any):
        self._dispatcher = dispatcher

    def get_balance(self) -> Any:
        return self._dispatcher.execute(GET_BALANCE)
