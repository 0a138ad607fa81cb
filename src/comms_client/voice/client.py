"""
Voice API client. All operations authenticate with an application JWT.
"""
from typing import Any, Dict, Optional, Union

from ..auth.credentials import CredentialKind
from ..core.endpoint import EndpointDescriptor
from ..core.path import path_template
from ..errors import VoiceApiError
from .requests import CallAction, CallEvent, CallInfo, CallRef, CreateCallRequest, ModifyCallRequest


def _call_path(request: Any) -> str:
    return path_template("/v1/calls/{uuid}", uuid=request.uuid)


CREATE_CALL = EndpointDescriptor(
    method="POST",
    path="/v1/calls",
    auth=(CredentialKind.BEARER_TOKEN,),
    response_type=CallEvent,
    error_type=VoiceApiError,
    name="create_call",
)

MODIFY_CALL = EndpointDescriptor(
    method="PUT",
    path=_call_path,
    auth=(CredentialKind.BEARER_TOKEN,),
    response_type=None,
    error_type=VoiceApiError,
    name="modify_call",
)

GET_CALL = EndpointDescriptor(
    method="GET",
    path=_call_path,
    auth=(CredentialKind.BEARER_TOKEN,),
    response_type=CallInfo,
    error_type=VoiceApiError,
    name="get_call",
)


class VoiceClient:
    def __init__(self, dispatcher: Any):
        self._dispatcher = dispatcher

    def create_call(self, request: CreateCallRequest) -> Any:
        return self._dispatcher.execute(CREATE_CALL, request)

    def modify_call(
        self,
        uuid: str,
        action: Union[CallAction, str],
        destination: Optional[Dict[str, Any]] = None,
    ) -> Any:
        fields: Dict[str, Any] = {"uuid": uuid, "action": action}
        if destination is not None:
            fields["destination"] = destination
        return self._dispatcher.execute(MODIFY_CALL, ModifyCallRequest.create(**fields))

    def get_call(self, uuid: str) -> Any:
        return self._dispatcher.execute(GET_CALL, CallRef.create(uuid=uuid))
