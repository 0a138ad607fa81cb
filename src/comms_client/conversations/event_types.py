"""
Conversation event types and discriminator normalization.

Member names are the normalized tags (upper-case, ``:`` -> ``_``); values are
the wire spellings. ``sip:amd_machine`` is the one wire spelling that does not
follow the general rule in the tag -> wire direction.
"""
from enum import Enum

CUSTOM_NAMESPACE = "custom"


class EventType(str, Enum):
    AUDIO_DTMF = "audio:dtmf"
    AUDIO_EARMUFF_ON = "audio:earmuff:on"
    AUDIO_EARMUFF_OFF = "audio:earmuff:off"
    AUDIO_MUTE_ON = "audio:mute:on"
    AUDIO_MUTE_OFF = "audio:mute:off"
    AUDIO_PLAY = "audio:play"
    AUDIO_PLAY_STOP = "audio:play:stop"
    AUDIO_PLAY_DONE = "audio:play:done"
    AUDIO_SAY = "audio:say"
    AUDIO_SAY_STOP = "audio:say:stop"
    AUDIO_SAY_DONE = "audio:say:done"
    AUDIO_RECORD = "audio:record"
    AUDIO_RECORD_STOP = "audio:record:stop"
    AUDIO_RECORD_DONE = "audio:record:done"
    AUDIO_SPEAKING_ON = "audio:speaking:on"
    AUDIO_SPEAKING_OFF = "audio:speaking:off"
    AUDIO_ASR_DONE = "audio:asr:done"
    AUDIO_ASR_RECORD_DONE = "audio:asr:record:done"
    EPHEMERAL = "ephemeral"
    MESSAGE = "message"
    MESSAGE_SUBMITTED = "message:submitted"
    MESSAGE_REJECTED = "message:rejected"
    MESSAGE_UNDELIVERABLE = "message:undeliverable"
    MESSAGE_SEEN = "message:seen"
    MESSAGE_DELIVERED = "message:delivered"
    CONVERSATION_UPDATED = "conversation:updated"
    MEMBER_INVITED = "member:invited"
    MEMBER_JOINED = "member:joined"
    MEMBER_LEFT = "member:left"
    MEMBER_MEDIA = "member:media"
    SIP_STATUS = "sip:status"
    SIP_HANGUP = "sip:hangup"
    SIP_RINGING = "sip:ringing"
    SIP_ANSWERED = "sip:answered"
    SIP_MACHINE = "sip:machine"
    SIP_AMD_MACHINE = "sip:amd_machine"
    RTC_STATUS = "rtc:status"
    RTC_TRANSFER = "rtc:transfer"
    RTC_HANGUP = "rtc:hangup"
    RTC_ANSWERED = "rtc:answered"
    RTC_RINGING = "rtc:ringing"
    RTC_ANSWER = "rtc:answer"
    LEG_STATUS = "leg:status"
    EVENT_DELETE = "event:delete"

    @property
    def tag(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.value


# Wire spellings that do not follow the general ':' <-> '_' rule
_IRREGULAR_WIRE_TO_TAG = {
    EventType.SIP_AMD_MACHINE.value: EventType.SIP_AMD_MACHINE.name,
}
_IRREGULAR_TAG_TO_WIRE = {tag: wire for wire, tag in _IRREGULAR_WIRE_TO_TAG.items()}


def wire_to_tag(wire: str) -> str:
    """Normalize a wire discriminator to its tag."""
    irregular = _IRREGULAR_WIRE_TO_TAG.get(wire)
    if irregular is not None:
        return irregular
    return wire.upper().replace(":", "_")


def tag_to_wire(tag: str) -> str:
    """Render a tag back to its wire spelling."""
    irregular = _IRREGULAR_TAG_TO_WIRE.get(tag)
    if irregular is not None:
        return irregular
    return tag.lower().replace("_", ":")
