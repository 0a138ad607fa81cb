"""
Event body shapes.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from ..wire.model import FieldConstraintError, WireModel
from .channels import MemberChannel


class DtmfBody(WireModel):
    digit: str
    duration: Optional[int] = None
    method: Optional[str] = None


class ChannelBody(WireModel):
    """Body of media state events (mute, earmuff, speaking, call status)."""

    channel: Optional[MemberChannel] = None
    direction: Optional[str] = None


class AudioPlayBody(WireModel):
    stream_url: List[str] = Field(min_length=1)
    level: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    loop: Optional[int] = Field(default=None, ge=0)
    play_id: Optional[str] = None


class AudioPlayStopBody(WireModel):
    play_id: str


class AudioPlayDoneBody(WireModel):
    play_id: str


class AudioSayBody(WireModel):
    text: str = Field(min_length=1)
    level: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    loop: Optional[int] = Field(default=None, ge=0)
    queue: Optional[bool] = None
    style: Optional[int] = Field(default=None, ge=0)
    language: Optional[str] = None
    premium: Optional[bool] = None
    ssml: Optional[bool] = None
    say_id: Optional[str] = None


class AudioSayStopBody(WireModel):
    say_id: str


class AudioSayDoneBody(WireModel):
    say_id: str


class Transcription(WireModel):
    language: Optional[str] = None
    sentiment_analysis: Optional[bool] = None


class AudioRecordBody(WireModel):
    format: Optional[str] = None
    validity: Optional[int] = Field(default=None, ge=0)
    channels: Optional[int] = Field(default=None, ge=1, le=32)
    streamed: Optional[bool] = None
    split: Optional[bool] = None
    multitrack: Optional[bool] = None
    detect_speech: Optional[bool] = None
    beep_start: Optional[bool] = None
    beep_stop: Optional[bool] = None
    transcription: Optional[Transcription] = None


class AudioRecordStopBody(WireModel):
    record_id: str


class RecordingBody(WireModel):
    """Body of record:done and asr:record:done."""

    recording_id: Optional[str] = None
    destination_url: Optional[str] = None
    format: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    size: Optional[int] = None
    media_service_id: Optional[str] = None


class AsrDoneBody(WireModel):
    asr: Optional[Dict[str, Any]] = None


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FILE = "file"
    VCARD = "vcard"
    TEMPLATE = "template"
    CUSTOM = "custom"
    LOCATION = "location"


class MediaUrl(WireModel):
    url: str


class Location(WireModel):
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    name: Optional[str] = None
    address: Optional[str] = None


class Template(WireModel):
    name: str
    parameters: Optional[List[str]] = None
    whatsapp: Optional[Dict[str, Any]] = None


_PAYLOAD_KEYS = tuple(t.value for t in MessageType)


class MessageBody(WireModel):
    """
    A message. Exactly one payload key is set, and it is the key named by
    ``message_type``.
    """

    message_type: MessageType
    text: Optional[str] = None
    image: Optional[MediaUrl] = None
    audio: Optional[MediaUrl] = None
    video: Optional[MediaUrl] = None
    file: Optional[MediaUrl] = None
    vcard: Optional[MediaUrl] = None
    template: Optional[Template] = None
    custom: Optional[Dict[str, Any]] = None
    location: Optional[Location] = None

    @model_validator(mode="after")
    def _payload_matches_type(self) -> "MessageBody":
        expected = self.message_type.value
        present = [key for key in _PAYLOAD_KEYS if getattr(self, key) is not None]
        if expected not in present:
            raise FieldConstraintError(expected, f"required when message_type is '{expected}'")
        others = [key for key in present if key != expected]
        if others:
            raise FieldConstraintError(others[0], f"not allowed when message_type is '{expected}'")
        return self

    @property
    def payload(self) -> Any:
        return getattr(self, self.message_type.value)


class MessageStatusBody(WireModel):
    event_id: int


class ConversationUpdatedBody(WireModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    image_url: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class UserRef(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None


class MemberEventBody(WireModel):
    """Body of member:invited, member:joined, member:left and member:media."""

    member_id: Optional[str] = None
    user: Optional[UserRef] = None
    channel: Optional[MemberChannel] = None
    media: Optional[Dict[str, Any]] = None
    state: Optional[str] = None
    timestamp: Optional[Dict[str, Any]] = None


class HangupQuality(WireModel):
    mos_score: Optional[float] = None
    quality_percentage: Optional[float] = None
    jitter_min_var: Optional[float] = None
    jitter_max_var: Optional[float] = None
    jitter_loss_rate: Optional[float] = None
    jitter_burst_rate: Optional[float] = None
    flaw_total: Optional[float] = None
    packet_cnt: Optional[int] = None
    packet_loss_perc: Optional[float] = None


class Bandwidth(WireModel):
    byte_in: Optional[int] = None
    byte_out: Optional[int] = None


class HangupReason(WireModel):
    text: Optional[str] = None
    code: Optional[str] = None
    sip_code: Optional[str] = None


class HangupBody(WireModel):
    direction: Optional[str] = None
    quality: Optional[HangupQuality] = None
    bandwidth: Optional[Bandwidth] = None
    channel: Optional[MemberChannel] = None
    reason: Optional[HangupReason] = None


class MachineDetectionBody(WireModel):
    channel: Optional[MemberChannel] = None
    status: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class RtcTransferBody(WireModel):
    transferred_from: str
    transferred_to: Optional[str] = None
    was_member: Optional[str] = None
    user: Optional[UserRef] = None


class RtcAnswerBody(WireModel):
    answer: str
    session_id: Optional[str] = None


class LegStatusBody(WireModel):
    leg_id: str
    status: Optional[str] = None
    direction: Optional[str] = None
    conversation_id: Optional[str] = None
    statuses: Optional[List[Dict[str, Any]]] = None


class EventDeleteBody(WireModel):
    event_id: int
