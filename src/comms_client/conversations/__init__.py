"""
Conversations API: events, channels, members and the polymorphic event codec.
"""
from .channels import CHANNEL_VARIANTS, Channel, ChannelType, GenericChannel, MemberChannel, decode_channel
from .client import ConversationsClient
from .codec import EVENT_CODEC, PolymorphicEventCodec, decode_event, encode_event
from .event_types import EventType, tag_to_wire, wire_to_tag
from .events import EVENT_VARIANTS, CustomEvent, Event, UnknownEvent, event_class, parse_event_list
from .requests import (
    Conversation,
    ConversationRequest,
    ConversationsPage,
    CreateMemberRequest,
    Member,
    MembersPage,
    MemberState,
    UpdateMemberRequest,
    validate_id,
)

__all__ = [
    "CHANNEL_VARIANTS",
    "Channel",
    "ChannelType",
    "GenericChannel",
    "MemberChannel",
    "decode_channel",
    "ConversationsClient",
    "EVENT_CODEC",
    "PolymorphicEventCodec",
    "decode_event",
    "encode_event",
    "EventType",
    "tag_to_wire",
    "wire_to_tag",
    "EVENT_VARIANTS",
    "CustomEvent",
    "Event",
    "UnknownEvent",
    "event_class",
    "parse_event_list",
    "Conversation",
    "ConversationRequest",
    "ConversationsPage",
    "CreateMemberRequest",
    "Member",
    "MembersPage",
    "MemberState",
    "UpdateMemberRequest",
    "validate_id",
]
