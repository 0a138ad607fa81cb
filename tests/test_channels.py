"""
Tests for conversations/channels.py
Logic testing: Path, Boundary, Error Path coverage
"""
import pytest

from comms_client.conversations.channels import (
    AppChannel,
    ChannelType,
    GenericChannel,
    MemberChannel,
    PhoneChannel,
    SipChannel,
    WebsocketChannel,
    decode_channel,
)
from comms_client.errors import MalformedPayloadError, PreconditionError
from comms_client.wire.model import FieldConstraintError


class TestDecodeChannel:
    # Happy Path: own discriminator selects the variant
    def test_known_type(self):
        channel = decode_channel({"type": "sip", "uri": "sip:bob@example.com", "username": "bob"})

        assert isinstance(channel, SipChannel)
        assert channel.username == "bob"

    # Path: inherited discriminator used when the object has none
    def test_inherited_type(self):
        channel = decode_channel({"number": "447700900000"}, inherited_type="phone")

        assert isinstance(channel, PhoneChannel)
        assert channel.type == "phone"

    # Path: enum accepted as inherited discriminator
    def test_inherited_enum(self):
        assert isinstance(decode_channel({"user": "alice"}, inherited_type=ChannelType.APP), AppChannel)

    # Path: unknown type keeps every field
    def test_unknown_type_generic(self):
        channel = decode_channel({"type": "pigeon", "loft": "north", "ring": 7})

        assert isinstance(channel, GenericChannel)
        assert channel.to_wire() == {"type": "pigeon", "loft": "north", "ring": 7}

    # Error Path: no discriminator anywhere
    def test_missing_type(self):
        with pytest.raises(FieldConstraintError) as exc_info:
            decode_channel({"number": "447700900000"})
        assert exc_info.value.field == "type"

    # Error Path: non-string discriminator
    def test_non_string_type(self):
        with pytest.raises(FieldConstraintError) as exc_info:
            decode_channel({"type": 3})
        assert exc_info.value.field == "type"

    # Error Path: variant shape mismatch names the field
    def test_shape_mismatch(self):
        with pytest.raises(FieldConstraintError) as exc_info:
            decode_channel({"type": "phone"})
        assert exc_info.value.field == "number"


class TestMemberChannel:
    # Happy Path: children inherit the enclosing type
    def test_children_inherit_type(self):
        channel = MemberChannel.from_wire(
            {"type": "phone", "from": {"number": "447700900001"}, "to": {"number": "447700900000"}}
        )

        assert isinstance(channel.from_, PhoneChannel)
        assert isinstance(channel.to, PhoneChannel)
        assert channel.to.number == "447700900000"

    # Path: a child's own type wins over the enclosing one
    def test_own_type_wins(self):
        channel = MemberChannel.from_wire(
            {"type": "app", "from": {"type": "phone", "number": "447700900001"}, "to": {"user": "alice"}}
        )

        assert isinstance(channel.from_, PhoneChannel)
        assert isinstance(channel.to, AppChannel)

    # Path: mixed websocket leg
    def test_websocket_child(self):
        channel = MemberChannel.from_wire(
            {"type": "websocket", "to": {"uri": "wss://example.com/ws", "content-type": "audio/l16;rate=16000"}}
        )

        assert isinstance(channel.to, WebsocketChannel)
        assert channel.to.content_type == "audio/l16;rate=16000"

    # Path: unknown enclosing type decodes children generically
    def test_unknown_type_keeps_extras(self):
        channel = MemberChannel.from_wire({"type": "pigeon", "to": {"loft": "north"}})

        assert isinstance(channel.to, GenericChannel)
        assert channel.to_wire() == {"type": "pigeon", "to": {"type": "pigeon", "loft": "north"}}

    # Error Path: child without any discriminator
    def test_missing_type(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            MemberChannel.from_wire({"to": {"number": "447700900000"}})
        assert exc_info.value.field == "to.type"

    # Error Path: child is not an object
    def test_non_object_child(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            MemberChannel.from_wire({"type": "phone", "from": "447700900001"})
        assert exc_info.value.field == "from"

    # Error Path: child shape mismatch is reported under the child key
    def test_child_shape_mismatch(self):
        with pytest.raises(MalformedPayloadError) as exc_info:
            MemberChannel.from_wire({"type": "phone", "to": {"type": "sip"}})
        assert exc_info.value.field == "to.uri"

    # Error Path: caller-built channel reports a precondition
    def test_construct_error(self):
        with pytest.raises(PreconditionError) as exc_info:
            MemberChannel.create(type="phone", to={})
        assert exc_info.value.field == "to.number"

    # Path: enum type rendered as its wire string
    def test_enum_type(self):
        channel = MemberChannel(type=ChannelType.PHONE, to={"number": "447700900000"})

        assert channel.type == "phone"
        assert channel.to_request_body() == {"type": "phone", "to": {"type": "phone", "number": "447700900000"}}

    # Path: absent fields are not rendered
    def test_empty(self):
        assert MemberChannel().to_wire() == {}


class TestChannelRendering:
    # Happy Path: type is always rendered, even when defaulted
    def test_type_rendered(self):
        assert PhoneChannel(number="447700900000").to_request_body() == {"type": "phone", "number": "447700900000"}

    # Path: aliases used on output
    def test_alias_output(self):
        channel = WebsocketChannel(uri="wss://example.com/ws", content_type="audio/l16;rate=8000")
        assert channel.to_wire() == {"type": "websocket", "uri": "wss://example.com/ws", "content-type": "audio/l16;rate=8000"}

    # Error Path: a fixed variant rejects a different type
    def test_wrong_literal(self):
        with pytest.raises(PreconditionError) as exc_info:
            PhoneChannel.create(type="sip", number="1")
        assert exc_info.value.field == "type"
