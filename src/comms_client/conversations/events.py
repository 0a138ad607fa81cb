"""
Conversation events.

Every event shares ``id``, ``from``, ``timestamp`` and ``_embedded``; each
variant adds a typed ``body``. ``id``, ``timestamp`` and ``_embedded`` are
assigned by the server: they are present on decoded events and cannot be set
when an event is built.

EVENT_VARIANTS is the single tag -> class table used by the codec.
"""
import copy
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Type, TypeVar

from pydantic import Field

from ..errors import MalformedPayloadError, PreconditionError
from ..wire.model import Builder, WireModel, WirePayload
from ..wire.registry import Resolution, VariantRegistry
from .bodies import (
    AsrDoneBody,
    AudioPlayBody,
    AudioPlayDoneBody,
    AudioPlayStopBody,
    AudioRecordBody,
    AudioRecordStopBody,
    AudioSayBody,
    AudioSayDoneBody,
    AudioSayStopBody,
    ChannelBody,
    ConversationUpdatedBody,
    DtmfBody,
    EventDeleteBody,
    HangupBody,
    LegStatusBody,
    MachineDetectionBody,
    MemberEventBody,
    MessageBody,
    MessageStatusBody,
    RecordingBody,
    RtcAnswerBody,
    RtcTransferBody,
)
from .event_types import CUSTOM_NAMESPACE, EventType, wire_to_tag

E = TypeVar("E", bound="Event")

SERVER_FIELDS = frozenset({"id", "timestamp", "embedded", "_embedded"})
COMMON_WIRE_KEYS = frozenset({"type", "id", "from", "timestamp", "_embedded", "body"})


class EmbeddedUser(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    image_url: Optional[str] = None


class EmbeddedMember(WireModel):
    id: Optional[str] = None


class Embedded(WireModel):
    from_user: Optional[EmbeddedUser] = None
    from_member: Optional[EmbeddedMember] = None


class Event(WireModel):
    """Base for all conversation events."""

    event_type: ClassVar[Optional[EventType]] = None
    body_type: ClassVar[Optional[type]] = None
    wire_exclude: ClassVar[FrozenSet[str]] = frozenset()

    id: Optional[int] = None
    from_: Optional[str] = Field(default=None, alias="from")
    timestamp: Optional[datetime] = None
    embedded: Optional[Embedded] = Field(default=None, alias="_embedded")

    @property
    def discriminator(self) -> str:
        """Wire spelling of this event's ``type``."""
        if self.event_type is None:
            raise TypeError(f"{type(self).__name__} has no event type")
        return self.event_type.value

    @property
    def from_user(self) -> Optional[EmbeddedUser]:
        return self.embedded.from_user if self.embedded else None

    @property
    def from_member(self) -> Optional[EmbeddedMember]:
        return self.embedded.from_member if self.embedded else None

    @classmethod
    def wire_fields(cls, payload: Mapping[str, Any], resolution: Optional[Resolution] = None) -> Dict[str, Any]:
        return {k: v for k, v in payload.items() if k != "type"}

    @classmethod
    def from_wire(cls: Type[E], data: WirePayload) -> E:
        """Decode any event payload through the codec; subclasses also check the variant."""
        from .codec import EVENT_CODEC

        event = EVENT_CODEC.decode(data)
        if not isinstance(event, cls):
            raise MalformedPayloadError(
                f"Expected {cls.__name__}, got {type(event).__name__} ({event.discriminator})",
                field="type",
            )
        return event

    @classmethod
    def build_from(cls: Type[E], fields: Mapping[str, Any]) -> E:
        """Caller-side construction. Server-assigned fields are refused here, never on decode."""
        server = sorted(k for k in fields if k in SERVER_FIELDS)
        if server:
            raise PreconditionError(
                f"{cls.__name__}: {', '.join(server)} are assigned by the server",
                field=server[0],
                constraint="server-assigned",
            )
        return super().build_from(fields)

    @classmethod
    def builder(cls: Type[E], **fields: Any) -> "EventBuilder[E]":
        if cls.event_type is None and not issubclass(cls, CustomEvent):
            raise TypeError(f"{cls.__name__} cannot be built; use a concrete event class")
        return EventBuilder(cls, **fields)

    @classmethod
    def builder_fields(cls) -> frozenset:
        names = {"from_"}
        if "body" in cls.model_fields:
            names.add("body")
        if cls.body_type is not None and issubclass(cls.body_type, WireModel):
            names.update(cls.body_type.model_fields)
        return frozenset(names)

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.discriminator}
        data.update(self.model_dump(by_alias=True, exclude_none=True, mode="json", exclude=set(self.wire_exclude)))
        return data

    def to_request_body(self) -> Dict[str, Any]:
        return self.to_wire()


class EventBuilder(Builder[E]):
    """
    Flat builder for one event variant.

    Common fields and the variant's body fields are set side by side and
    split into the event and its body at build time.
    """

    def build(self) -> E:
        model = self._model
        fields = dict(self._fields)
        own = {k: fields.pop(k) for k in list(fields) if k in ("from_", "body", "custom_type", "extra_fields")}
        body_type = model.body_type

        if fields:
            if "body" in own:
                raise PreconditionError(
                    f"{model.__name__}: set either body or its fields ({', '.join(sorted(fields))})",
                    field="body",
                    constraint="exclusive",
                )
            own["body"] = body_type.build_from(fields)
        elif "body" not in own and body_type is not None and issubclass(body_type, WireModel):
            if any(f.is_required() for f in body_type.model_fields.values()):
                own["body"] = body_type.build_from({})

        return model.build_from(own)


# --- registered variants ---------------------------------------------------


class DtmfEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_DTMF
    body_type: ClassVar[Optional[type]] = DtmfBody
    body: Optional[DtmfBody] = None


class AudioEarmuffOnEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_EARMUFF_ON
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class AudioEarmuffOffEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_EARMUFF_OFF
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class AudioMuteOnEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_MUTE_ON
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class AudioMuteOffEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_MUTE_OFF
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class AudioPlayEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_PLAY
    body_type: ClassVar[Optional[type]] = AudioPlayBody
    body: Optional[AudioPlayBody] = None


class AudioPlayStopEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_PLAY_STOP
    body_type: ClassVar[Optional[type]] = AudioPlayStopBody
    body: Optional[AudioPlayStopBody] = None


class AudioPlayDoneEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_PLAY_DONE
    body_type: ClassVar[Optional[type]] = AudioPlayDoneBody
    body: Optional[AudioPlayDoneBody] = None


class AudioSayEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_SAY
    body_type: ClassVar[Optional[type]] = AudioSayBody
    body: Optional[AudioSayBody] = None


class AudioSayStopEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_SAY_STOP
    body_type: ClassVar[Optional[type]] = AudioSayStopBody
    body: Optional[AudioSayStopBody] = None


class AudioSayDoneEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_SAY_DONE
    body_type: ClassVar[Optional[type]] = AudioSayDoneBody
    body: Optional[AudioSayDoneBody] = None


class AudioRecordEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_RECORD
    body_type: ClassVar[Optional[type]] = AudioRecordBody
    body: Optional[AudioRecordBody] = None


class AudioRecordStopEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_RECORD_STOP
    body_type: ClassVar[Optional[type]] = AudioRecordStopBody
    body: Optional[AudioRecordStopBody] = None


class AudioRecordDoneEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_RECORD_DONE
    body_type: ClassVar[Optional[type]] = RecordingBody
    body: Optional[RecordingBody] = None


class AudioSpeakingOnEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_SPEAKING_ON
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class AudioSpeakingOffEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_SPEAKING_OFF
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class AsrDoneEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_ASR_DONE
    body_type: ClassVar[Optional[type]] = AsrDoneBody
    body: Optional[AsrDoneBody] = None


class AsrRecordDoneEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.AUDIO_ASR_RECORD_DONE
    body_type: ClassVar[Optional[type]] = RecordingBody
    body: Optional[RecordingBody] = None


class EphemeralEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.EPHEMERAL
    body: Optional[Dict[str, Any]] = None


class MessageEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MESSAGE
    body_type: ClassVar[Optional[type]] = MessageBody
    body: Optional[MessageBody] = None


class MessageSubmittedEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MESSAGE_SUBMITTED
    body_type: ClassVar[Optional[type]] = MessageStatusBody
    body: Optional[MessageStatusBody] = None


class MessageRejectedEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MESSAGE_REJECTED
    body_type: ClassVar[Optional[type]] = MessageStatusBody
    body: Optional[MessageStatusBody] = None


class MessageUndeliverableEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MESSAGE_UNDELIVERABLE
    body_type: ClassVar[Optional[type]] = MessageStatusBody
    body: Optional[MessageStatusBody] = None


class MessageSeenEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MESSAGE_SEEN
    body_type: ClassVar[Optional[type]] = MessageStatusBody
    body: Optional[MessageStatusBody] = None


class MessageDeliveredEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MESSAGE_DELIVERED
    body_type: ClassVar[Optional[type]] = MessageStatusBody
    body: Optional[MessageStatusBody] = None


class ConversationUpdatedEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.CONVERSATION_UPDATED
    body_type: ClassVar[Optional[type]] = ConversationUpdatedBody
    body: Optional[ConversationUpdatedBody] = None


class MemberInvitedEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MEMBER_INVITED
    body_type: ClassVar[Optional[type]] = MemberEventBody
    body: Optional[MemberEventBody] = None


class MemberJoinedEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MEMBER_JOINED
    body_type: ClassVar[Optional[type]] = MemberEventBody
    body: Optional[MemberEventBody] = None


class MemberLeftEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MEMBER_LEFT
    body_type: ClassVar[Optional[type]] = MemberEventBody
    body: Optional[MemberEventBody] = None


class MemberMediaEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.MEMBER_MEDIA
    body_type: ClassVar[Optional[type]] = MemberEventBody
    body: Optional[MemberEventBody] = None


class SipStatusEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.SIP_STATUS
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class SipHangupEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.SIP_HANGUP
    body_type: ClassVar[Optional[type]] = HangupBody
    body: Optional[HangupBody] = None


class SipRingingEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.SIP_RINGING
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class SipAnsweredEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.SIP_ANSWERED
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class SipMachineEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.SIP_MACHINE
    body_type: ClassVar[Optional[type]] = MachineDetectionBody
    body: Optional[MachineDetectionBody] = None


class SipAmdMachineEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.SIP_AMD_MACHINE
    body_type: ClassVar[Optional[type]] = MachineDetectionBody
    body: Optional[MachineDetectionBody] = None


class RtcStatusEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.RTC_STATUS
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class RtcTransferEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.RTC_TRANSFER
    body_type: ClassVar[Optional[type]] = RtcTransferBody
    body: Optional[RtcTransferBody] = None


class RtcHangupEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.RTC_HANGUP
    body_type: ClassVar[Optional[type]] = HangupBody
    body: Optional[HangupBody] = None


class RtcAnsweredEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.RTC_ANSWERED
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class RtcRingingEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.RTC_RINGING
    body_type: ClassVar[Optional[type]] = ChannelBody
    body: Optional[ChannelBody] = None


class RtcAnswerEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.RTC_ANSWER
    body_type: ClassVar[Optional[type]] = RtcAnswerBody
    body: Optional[RtcAnswerBody] = None


class LegStatusEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.LEG_STATUS
    body_type: ClassVar[Optional[type]] = LegStatusBody
    body: Optional[LegStatusBody] = None


class EventDeleteEvent(Event):
    event_type: ClassVar[Optional[EventType]] = EventType.EVENT_DELETE
    body_type: ClassVar[Optional[type]] = EventDeleteBody
    body: Optional[EventDeleteBody] = None


# --- namespaced and fallback variants --------------------------------------


class CustomEvent(Event):
    """
    Application-defined ``custom:<suffix>`` event.

    The suffix is kept verbatim and is part of the event's identity. A bare
    ``custom`` discriminator decodes with ``custom_type`` None. Top-level keys
    other than the common event fields are kept in ``extra_fields`` and
    written back beside them on encode.
    """

    wire_exclude: ClassVar[FrozenSet[str]] = frozenset({"custom_type", "extra_fields"})

    custom_type: Optional[str] = None
    body: Optional[Dict[str, Any]] = None
    extra_fields: Dict[str, Any] = Field(default_factory=dict)

    @property
    def discriminator(self) -> str:
        if self.custom_type is None:
            return CUSTOM_NAMESPACE
        return f"{CUSTOM_NAMESPACE}:{self.custom_type}"

    @classmethod
    def wire_fields(cls, payload: Mapping[str, Any], resolution: Optional[Resolution] = None) -> Dict[str, Any]:
        data = super().wire_fields(payload, resolution)
        data["custom_type"] = resolution.suffix if resolution is not None else None
        data["extra_fields"] = {k: copy.deepcopy(v) for k, v in payload.items() if k not in COMMON_WIRE_KEYS}
        return data

    @classmethod
    def builder_fields(cls) -> frozenset:
        return frozenset({"from_", "body", "custom_type", "extra_fields"})

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.discriminator}
        data.update(copy.deepcopy(self.extra_fields))
        data.update(self.model_dump(by_alias=True, exclude_none=True, mode="json", exclude=set(self.wire_exclude)))
        return data


class UnknownEvent(Event):
    """
    Event whose ``type`` this client does not recognize.

    The full payload is kept so encoding reproduces it exactly.
    """

    wire_type: str
    payload: Dict[str, Any]

    @property
    def discriminator(self) -> str:
        return self.wire_type

    @classmethod
    def wire_fields(cls, payload: Mapping[str, Any], resolution: Optional[Resolution] = None) -> Dict[str, Any]:
        data = super().wire_fields(payload, resolution)
        data["wire_type"] = resolution.discriminator if resolution is not None else payload.get("type")
        data["payload"] = copy.deepcopy(dict(payload))
        return data

    @classmethod
    def builder(cls, **fields: Any):
        raise TypeError("UnknownEvent is produced by decoding only")

    def to_wire(self) -> Dict[str, Any]:
        return copy.deepcopy(self.payload)

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]


REGISTERED_EVENTS = (
    DtmfEvent,
    AudioEarmuffOnEvent,
    AudioEarmuffOffEvent,
    AudioMuteOnEvent,
    AudioMuteOffEvent,
    AudioPlayEvent,
    AudioPlayStopEvent,
    AudioPlayDoneEvent,
    AudioSayEvent,
    AudioSayStopEvent,
    AudioSayDoneEvent,
    AudioRecordEvent,
    AudioRecordStopEvent,
    AudioRecordDoneEvent,
    AudioSpeakingOnEvent,
    AudioSpeakingOffEvent,
    AsrDoneEvent,
    AsrRecordDoneEvent,
    EphemeralEvent,
    MessageEvent,
    MessageSubmittedEvent,
    MessageRejectedEvent,
    MessageUndeliverableEvent,
    MessageSeenEvent,
    MessageDeliveredEvent,
    ConversationUpdatedEvent,
    MemberInvitedEvent,
    MemberJoinedEvent,
    MemberLeftEvent,
    MemberMediaEvent,
    SipStatusEvent,
    SipHangupEvent,
    SipRingingEvent,
    SipAnsweredEvent,
    SipMachineEvent,
    SipAmdMachineEvent,
    RtcStatusEvent,
    RtcTransferEvent,
    RtcHangupEvent,
    RtcAnsweredEvent,
    RtcRingingEvent,
    RtcAnswerEvent,
    LegStatusEvent,
    EventDeleteEvent,
)

EVENT_VARIANTS: VariantRegistry[Event] = VariantRegistry(
    "event",
    {cls.event_type.tag: cls for cls in REGISTERED_EVENTS},
    fallback=UnknownEvent,
    normalize=wire_to_tag,
    namespaces={CUSTOM_NAMESPACE: CustomEvent},
)


def event_class(event_type: EventType) -> Type[Event]:
    """Registered class for an event type."""
    return EVENT_VARIANTS.variants[event_type.tag]


def parse_event_list(data: Any) -> list:
    """Decode a list of event payloads (a bare array or a HAL ``_embedded.events`` page)."""
    from .codec import EVENT_CODEC

    if isinstance(data, Mapping):
        data = (data.get("_embedded") or {}).get("events", [])
    if not isinstance(data, list):
        raise MalformedPayloadError(f"Expected a list of events, got {type(data).__name__}")
    return [EVENT_CODEC.decode(item) for item in data]
