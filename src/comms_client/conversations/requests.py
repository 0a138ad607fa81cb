"""
Conversations API request and resource models.

Path parameters are declared with ``Field(exclude=True)`` so they are used to
build the URL but never serialized into the query string or body.
"""
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from ..errors import PreconditionError
from ..wire.model import FieldConstraintError, WireModel
from .channels import MemberChannel
from .event_types import EventType
from .events import Event

CONVERSATION_PREFIX = "CON-"
MEMBER_PREFIX = "MEM-"
USER_PREFIX = "USR-"

_UUID_LENGTH = 36


def validate_id(prefix: str, value: Any, field: str = "id") -> str:
    """
    Check that ``value`` is ``prefix`` followed by a UUID.

    Raises:
        PreconditionError: wrong type, length, prefix or UUID
    """
    expected = len(prefix) + _UUID_LENGTH
    if not isinstance(value, str) or len(value) != expected:
        raise PreconditionError(
            f"Invalid ID: {value!r} is not {expected} characters in length",
            field=field,
            constraint=f"length {expected}",
        )
    if not value.startswith(prefix):
        raise PreconditionError(
            f"Invalid ID: expected prefix '{prefix}' but got '{value[:len(prefix)]}'",
            field=field,
            constraint=f"prefix {prefix}",
        )
    try:
        parsed = uuid.UUID(value[len(prefix):])
    except ValueError as exc:
        raise PreconditionError(f"Invalid ID: {value!r} does not end in a UUID", field=field, constraint="uuid") from exc
    return f"{prefix}{parsed}"


def validate_conversation_id(value: Any) -> str:
    return validate_id(CONVERSATION_PREFIX, value, "conversation_id")


def validate_member_id(value: Any) -> str:
    return validate_id(MEMBER_PREFIX, value, "member_id")


def validate_user_id(value: Any) -> str:
    return validate_id(USER_PREFIX, value, "user_id")


class MemberState(str, Enum):
    INVITED = "INVITED"
    JOINED = "JOINED"
    LEFT = "LEFT"
    UNKNOWN = "UNKNOWN"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# --- shared shapes -----------------------------------------------------------


class CallbackParams(WireModel):
    application_id: Optional[str] = Field(default=None, alias="applicationId")
    ncco_url: Optional[str] = None


class Callback(WireModel):
    url: Optional[str] = None
    event_mask: Optional[str] = None
    params: Optional[CallbackParams] = None
    method: Optional[Literal["GET", "POST"]] = None


class ConversationProperties(WireModel):
    ttl: Optional[int] = Field(default=None, ge=0)
    type: Optional[str] = None
    custom_sort_key: Optional[str] = None
    custom_data: Optional[Dict[str, Any]] = None


class PageLinks(WireModel):
    first: Optional[Dict[str, Any]] = None
    self_: Optional[Dict[str, Any]] = Field(default=None, alias="self")
    next: Optional[Dict[str, Any]] = None
    prev: Optional[Dict[str, Any]] = None


class PageFilter(WireModel):
    """Cursor pagination parameters."""

    page_size: Optional[int] = Field(default=None, ge=1, le=100)
    order: Optional[SortOrder] = None
    cursor: Optional[str] = None


# --- conversations -----------------------------------------------------------


class Conversation(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    image_url: Optional[str] = None
    state: Optional[str] = None
    sequence_number: Optional[int] = None
    properties: Optional[ConversationProperties] = None
    numbers: Optional[List[Dict[str, Any]]] = None
    callback: Optional[Callback] = None
    timestamp: Optional[Dict[str, Any]] = None


class ConversationsEmbedded(WireModel):
    conversations: List[Conversation] = Field(default_factory=list)


class ConversationsPage(WireModel):
    page_size: Optional[int] = None
    embedded: Optional[ConversationsEmbedded] = Field(default=None, alias="_embedded")
    links: Optional[PageLinks] = Field(default=None, alias="_links")

    @property
    def conversations(self) -> List[Conversation]:
        return list(self.embedded.conversations) if self.embedded else []


class ListConversationsRequest(PageFilter):
    date_start: Optional[datetime] = None
    date_end: Optional[datetime] = None


class ListUserConversationsRequest(PageFilter):
    user_id: str = Field(exclude=True)
    state: Optional[MemberState] = None
    order_by: Optional[str] = None
    include_custom_data: Optional[bool] = None
    date_start: Optional[datetime] = None


class ConversationRequest(WireModel):
    """Body of create (POST) and update (PUT) conversation."""

    conversation_id: Optional[str] = Field(default=None, exclude=True)
    name: Optional[str] = Field(default=None, max_length=100)
    display_name: Optional[str] = Field(default=None, max_length=50)
    image_url: Optional[str] = None
    properties: Optional[ConversationProperties] = None
    numbers: Optional[List[Dict[str, Any]]] = None
    callback: Optional[Callback] = None


# --- members -----------------------------------------------------------------


class MemberUser(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None


class Member(WireModel):
    id: Optional[str] = None
    conversation_id: Optional[str] = None
    state: Optional[MemberState] = None
    user: Optional[MemberUser] = Field(default=None, alias="_embedded_user")
    channel: Optional[MemberChannel] = None
    media: Optional[Dict[str, Any]] = None
    knocking_id: Optional[str] = None
    member_id_inviting: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    invited_by: Optional[str] = None
    initiator: Optional[Dict[str, Any]] = None
    timestamp: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _embedded_user(cls, data: Any) -> Any:
        # The API nests the member's user under _embedded.user
        if isinstance(data, dict) and "_embedded" in data:
            data = dict(data)
            embedded = data.pop("_embedded") or {}
            if isinstance(embedded, dict) and "user" in embedded:
                data.setdefault("_embedded_user", embedded["user"])
        return data

    @field_validator("state", mode="before")
    @classmethod
    def _unknown_state(cls, value: Any) -> Any:
        if isinstance(value, str) and value.upper() not in MemberState.__members__:
            return MemberState.UNKNOWN
        return value.upper() if isinstance(value, str) else value


class MembersEmbedded(WireModel):
    members: List[Member] = Field(default_factory=list)


class MembersPage(WireModel):
    page_size: Optional[int] = None
    embedded: Optional[MembersEmbedded] = Field(default=None, alias="_embedded")
    links: Optional[PageLinks] = Field(default=None, alias="_links")

    @property
    def members(self) -> List[Member]:
        return list(self.embedded.members) if self.embedded else []


class ListMembersRequest(PageFilter):
    conversation_id: str = Field(exclude=True)


class CreateMemberRequest(WireModel):
    """
    Invite or join a user to a conversation.

    ``user`` accepts a user ID (``USR-<uuid>``) or a user name.
    """

    conversation_id: str = Field(exclude=True)
    state: MemberState
    user: MemberUser
    channel: MemberChannel
    media: Optional[Dict[str, Any]] = None
    knocking_id: Optional[str] = None
    member_id_inviting: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")

    @field_validator("user", mode="before")
    @classmethod
    def _user_name_or_id(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                raise FieldConstraintError(None, "user name or ID must not be empty")
            if value.startswith(USER_PREFIX) and len(value) == len(USER_PREFIX) + _UUID_LENGTH:
                return {"id": value}
            return {"name": value}
        return value

    @field_validator("state")
    @classmethod
    def _invite_or_join(cls, value: MemberState) -> MemberState:
        if value not in (MemberState.INVITED, MemberState.JOINED):
            raise FieldConstraintError(None, "must be INVITED or JOINED")
        return value


class MemberLeaveReason(WireModel):
    code: Optional[str] = None
    text: Optional[str] = None


class UpdateMemberRequest(WireModel):
    """PATCH body: only the fields that were set are sent."""

    conversation_id: str = Field(exclude=True)
    member_id: str = Field(exclude=True)
    state: MemberState
    from_: Optional[str] = Field(default=None, alias="from")
    reason: Optional[MemberLeaveReason] = None

    @model_validator(mode="after")
    def _reason_only_when_leaving(self) -> "UpdateMemberRequest":
        if self.reason is not None and self.state != MemberState.LEFT:
            raise FieldConstraintError("reason", "only allowed when state is LEFT")
        return self


# --- events ------------------------------------------------------------------


class ListEventsRequest(PageFilter):
    conversation_id: str = Field(exclude=True)
    start_id: Optional[int] = None
    end_id: Optional[int] = None
    event_type: Optional[EventType] = None
    exclude_deleted_events: Optional[bool] = None


class ResourceRef(WireModel):
    """A resource under a conversation (member or event); path-only."""

    conversation_id: str = Field(exclude=True)
    resource_id: str = Field(exclude=True)


class ConversationRef(WireModel):
    conversation_id: str = Field(exclude=True)


@dataclass(frozen=True)
class CreateEventRequest:
    conversation_id: str
    event: Event

    def to_request_body(self) -> Dict[str, Any]:
        return self.event.to_wire()


def normalize_event_id(value: Any) -> str:
    """Event IDs are sequence numbers; accept ``7`` or ``"7"``."""
    if isinstance(value, bool) or not re.fullmatch(r"\d+", str(value)):
        raise PreconditionError(f"Invalid event ID: {value!r}", field="event_id", constraint="non-negative integer")
    return str(int(value))
