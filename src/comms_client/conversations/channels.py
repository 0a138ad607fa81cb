"""
Channel variants and MemberChannel.

A MemberChannel's ``from`` and ``to`` are themselves polymorphic, keyed by
their own ``type``. When a child omits ``type`` it takes the enclosing
MemberChannel's ``type``, passed explicitly into ``decode_channel``.
"""
from enum import Enum
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional

from pydantic import ConfigDict, Field, SerializeAsAny, field_validator, model_validator

from ..wire.model import FieldConstraintError, WireModel
from ..wire.registry import Resolution, VariantRegistry, decode_variant


class ChannelType(str, Enum):
    APP = "app"
    PHONE = "phone"
    SIP = "sip"
    WEBSOCKET = "websocket"
    VBC = "vbc"
    SMS = "sms"
    MMS = "mms"
    WHATSAPP = "whatsapp"
    VIBER = "viber"
    MESSENGER = "messenger"


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class Channel(WireModel):
    """Base for channel variants. ``type`` is always rendered on the wire."""

    channel_type: ClassVar[Optional[ChannelType]] = None

    type: str

    def model_post_init(self, __context: Any) -> None:
        # type is always sent, even when left at its default
        self.__pydantic_fields_set__.add("type")

    @classmethod
    def wire_fields(cls, payload: Mapping[str, Any], resolution: Optional[Resolution] = None) -> Dict[str, Any]:
        data = dict(payload)
        if resolution is not None:
            data["type"] = resolution.discriminator
        return data


class AppChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.APP
    type: Literal["app"] = "app"
    user: Optional[str] = None


class PhoneChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.PHONE
    type: Literal["phone"] = "phone"
    number: str


class SipChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.SIP
    type: Literal["sip"] = "sip"
    uri: str
    username: Optional[str] = None
    password: Optional[str] = None


class WebsocketChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.WEBSOCKET
    type: Literal["websocket"] = "websocket"
    uri: str
    content_type: Optional[str] = Field(default=None, alias="content-type")
    headers: Optional[Dict[str, Any]] = None


class VbcChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.VBC
    type: Literal["vbc"] = "vbc"
    extension: str


class SmsChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.SMS
    type: Literal["sms"] = "sms"
    number: str


class MmsChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.MMS
    type: Literal["mms"] = "mms"
    number: str


class WhatsappChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.WHATSAPP
    type: Literal["whatsapp"] = "whatsapp"
    number: str


class ViberChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.VIBER
    type: Literal["viber"] = "viber"
    id: str


class MessengerChannel(Channel):
    channel_type: ClassVar[Optional[ChannelType]] = ChannelType.MESSENGER
    type: Literal["messenger"] = "messenger"
    id: str


class GenericChannel(Channel):
    """Channel of a type this client does not know; all fields are kept."""

    model_config = ConfigDict(extra="allow")


CHANNEL_VARIANTS: VariantRegistry[Channel] = VariantRegistry(
    "channel",
    {
        cls.channel_type.value: cls
        for cls in (
            AppChannel,
            PhoneChannel,
            SipChannel,
            WebsocketChannel,
            VbcChannel,
            SmsChannel,
            MmsChannel,
            WhatsappChannel,
            ViberChannel,
            MessengerChannel,
        )
    },
    fallback=GenericChannel,
)


def decode_channel(payload: Any, inherited_type: Optional[str] = None) -> Channel:
    """Decode one channel object, falling back to ``inherited_type`` for its discriminator."""
    return decode_variant(CHANNEL_VARIANTS, payload, inherited_type=_plain(inherited_type))


class MemberChannel(WireModel):
    id: Optional[str] = None
    type: Optional[str] = None
    from_: Optional[SerializeAsAny[Channel]] = Field(default=None, alias="from")
    to: Optional[SerializeAsAny[Channel]] = None
    headers: Optional[Dict[str, Any]] = None

    @field_validator("type", mode="before")
    @classmethod
    def _enum_to_wire(cls, value: Any) -> Any:
        return _plain(value)

    @model_validator(mode="before")
    @classmethod
    def _decode_endpoints(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        parent_type = _plain(data.get("type"))
        if not isinstance(parent_type, str):
            parent_type = None

        for key, wire_key in (("from", "from"), ("from_", "from"), ("to", "to")):
            child = data.get(key)
            if child is None or isinstance(child, Channel):
                continue
            try:
                data[key] = decode_channel(child, inherited_type=parent_type)
            except FieldConstraintError as exc:
                field = f"{wire_key}.{exc.field}" if exc.field else wire_key
                raise FieldConstraintError(field, exc.constraint) from exc
        return data
