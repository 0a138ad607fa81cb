"""
Voice API: outbound calls.
"""
from .client import CREATE_CALL, GET_CALL, MODIFY_CALL, VoiceClient
from .requests import CallAction, CallEvent, CallInfo, CallStatus, CreateCallRequest, MachineDetection, ModifyCallRequest

__all__ = [
    "CREATE_CALL",
    "GET_CALL",
    "MODIFY_CALL",
    "VoiceClient",
    "CallAction",
    "CallEvent",
    "CallInfo",
    "CallStatus",
    "CreateCallRequest",
    "MachineDetection",
    "ModifyCallRequest",
]
