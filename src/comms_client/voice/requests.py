"""
Voice API request and response models.

Call endpoints reuse the channel variants (phone, sip, websocket, vbc, app).
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, SerializeAsAny, field_validator, model_validator

from ..conversations.channels import Channel, PhoneChannel, decode_channel
from ..wire.model import FieldConstraintError, WireModel


class CallAction(str, Enum):
    HANGUP = "hangup"
    MUTE = "mute"
    UNMUTE = "unmute"
    EARMUFF = "earmuff"
    UNEARMUFF = "unearmuff"
    TRANSFER = "transfer"


class MachineDetection(str, Enum):
    CONTINUE = "continue"
    HANGUP = "hangup"


class CallStatus(str, Enum):
    STARTED = "started"
    RINGING = "ringing"
    ANSWERED = "answered"
    MACHINE = "machine"
    COMPLETED = "completed"
    BUSY = "busy"
    CANCELLED = "cancelled"
    FAILED = "failed"
    REJECTED = "rejected"
    TIMEOUT = "timeout"
    UNANSWERED = "unanswered"


def _decode_endpoint(value: Any) -> Any:
    if value is None or isinstance(value, Channel):
        return value
    return decode_channel(value)


class CreateCallRequest(WireModel):
    """
    Outbound call.

    Exactly one of ``from_`` and ``random_from_number=True`` must be given,
    and exactly one of ``ncco`` and ``answer_url``.
    """

    to: List[SerializeAsAny[Channel]] = Field(min_length=1)
    from_: Optional[PhoneChannel] = Field(default=None, alias="from")
    random_from_number: Optional[bool] = None
    ncco: Optional[List[Dict[str, Any]]] = None
    answer_url: Optional[List[str]] = None
    answer_method: Optional[Literal["GET", "POST"]] = None
    event_url: Optional[List[str]] = None
    event_method: Optional[Literal["GET", "POST"]] = None
    machine_detection: Optional[MachineDetection] = None
    length_timer: Optional[int] = Field(default=None, ge=1, le=7200)
    ringing_timer: Optional[int] = Field(default=None, ge=1, le=120)

    @field_validator("to", mode="before")
    @classmethod
    def _decode_to(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [_decode_endpoint(item) for item in value]
        return value

    @field_validator("from_", mode="before")
    @classmethod
    def _phone_from(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"number": value}
        return value

    @model_validator(mode="after")
    def _caller_and_instructions(self) -> "CreateCallRequest":
        if self.random_from_number and self.from_ is not None:
            raise FieldConstraintError("from", "not allowed when random_from_number is true")
        if not self.random_from_number and self.from_ is None:
            raise FieldConstraintError("from", "required unless random_from_number is true")
        if self.ncco is not None and self.answer_url is not None:
            raise FieldConstraintError("answer_url", "not allowed together with ncco")
        if self.ncco is None and self.answer_url is None:
            raise FieldConstraintError("ncco", "one of ncco or answer_url is required")
        return self


class CallEvent(WireModel):
    """Response to create call."""

    uuid: Optional[str] = None
    status: Optional[CallStatus] = None
    direction: Optional[str] = None
    conversation_uuid: Optional[str] = None


class CallInfo(WireModel):
    uuid: Optional[str] = None
    conversation_uuid: Optional[str] = None
    to: Optional[SerializeAsAny[Channel]] = None
    from_: Optional[SerializeAsAny[Channel]] = Field(default=None, alias="from")
    status: Optional[CallStatus] = None
    direction: Optional[str] = None
    rate: Optional[str] = None
    price: Optional[str] = None
    duration: Optional[int] = None
    network: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @field_validator("to", "from_", mode="before")
    @classmethod
    def _decode(cls, value: Any) -> Any:
        return _decode_endpoint(value)


class ModifyCallRequest(WireModel):
    uuid: str = Field(exclude=True, min_length=1)
    action: CallAction
    destination: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _destination_for_transfer(self) -> "ModifyCallRequest":
        if self.action == CallAction.TRANSFER and self.destination is None:
            raise FieldConstraintError("destination", "required when action is transfer")
        if self.action != CallAction.TRANSFER and self.destination is not None:
            raise FieldConstraintError("destination", "only allowed when action is transfer")
        return self


class CallRef(WireModel):
    uuid: str = Field(exclude=True, min_length=1)
