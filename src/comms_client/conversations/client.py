"""
Conversations API client.

Every operation authenticates with an application JWT. IDs are checked for
their ``CON-``/``MEM-``/``USR-`` prefix before anything is sent.

Each method returns ``dispatcher.execute(...)`` so the same client works over
the sync dispatcher (returns the result) and the async one (returns an
awaitable).
"""
import logging
from typing import Any, List, Optional, Union

from ..auth.credentials import CredentialKind
from ..core.endpoint import EndpointDescriptor
from ..core.path import path_template
from ..errors import ConversationsApiError
from .events import Event, parse_event_list
from .requests import (
    Conversation,
    ConversationRef,
    ConversationRequest,
    ConversationsPage,
    CreateEventRequest,
    CreateMemberRequest,
    ListConversationsRequest,
    ListEventsRequest,
    ListMembersRequest,
    ListUserConversationsRequest,
    Member,
    MembersPage,
    ResourceRef,
    UpdateMemberRequest,
    normalize_event_id,
    validate_conversation_id,
    validate_member_id,
    validate_user_id,
)

logger = logging.getLogger(__name__)

JWT_ONLY = (CredentialKind.BEARER_TOKEN,)

CONVERSATIONS_PATH = "/v1/conversations"


def _conversation_path(request: Any) -> str:
    return path_template("/v1/conversations/{conversation_id}", conversation_id=request.conversation_id)


def _user_conversations_path(request: Any) -> str:
    return path_template("/v1/users/{user_id}/conversations", user_id=request.user_id)


def _members_path(request: Any) -> str:
    return path_template("/v1/conversations/{conversation_id}/members", conversation_id=request.conversation_id)


def _member_path(request: Any) -> str:
    member_id = getattr(request, "member_id", None) or request.resource_id
    return path_template(
        "/v1/conversations/{conversation_id}/members/{member_id}",
        conversation_id=request.conversation_id,
        member_id=member_id,
    )


def _events_path(request: Any) -> str:
    return path_template("/v1/conversations/{conversation_id}/events", conversation_id=request.conversation_id)


def _event_path(request: Any) -> str:
    return path_template(
        "/v1/conversations/{conversation_id}/events/{event_id}",
        conversation_id=request.conversation_id,
        event_id=request.resource_id,
    )


def _endpoint(method: str, path: Any, response_type: Any = None, name: Optional[str] = None) -> EndpointDescriptor:
    return EndpointDescriptor(
        method=method,
        path=path,
        auth=JWT_ONLY,
        response_type=response_type,
        error_type=ConversationsApiError,
        name=name,
    )


LIST_CONVERSATIONS = _endpoint("GET", CONVERSATIONS_PATH, ConversationsPage, "list_conversations")
CREATE_CONVERSATION = _endpoint("POST", CONVERSATIONS_PATH, Conversation, "create_conversation")
GET_CONVERSATION = _endpoint("GET", _conversation_path, Conversation, "get_conversation")
UPDATE_CONVERSATION = _endpoint("PUT", _conversation_path, Conversation, "update_conversation")
DELETE_CONVERSATION = _endpoint("DELETE", _conversation_path, None, "delete_conversation")
LIST_USER_CONVERSATIONS = _endpoint("GET", _user_conversations_path, ConversationsPage, "list_user_conversations")

LIST_MEMBERS = _endpoint("GET", _members_path, MembersPage, "list_members")
GET_MEMBER = _endpoint("GET", _member_path, Member, "get_member")
CREATE_MEMBER = _endpoint("POST", _members_path, Member, "create_member")
UPDATE_MEMBER = _endpoint("PATCH", _member_path, Member, "update_member")

LIST_EVENTS = _endpoint("GET", _events_path, parse_event_list, "list_events")
GET_EVENT = _endpoint("GET", _event_path, Event, "get_event")
CREATE_EVENT = _endpoint("POST", _events_path, Event, "create_event")
DELETE_EVENT = _endpoint("DELETE", _event_path, None, "delete_event")


class ConversationsClient:
    """Conversations, members and events."""

    def __init__(self, dispatcher: Any):
        self._dispatcher = dispatcher

    # Conversations

    def list_conversations(self, request: Optional[ListConversationsRequest] = None, **filters: Any) -> Any:
        if request is None:
            request = ListConversationsRequest.create(**filters)
        return self._dispatcher.execute(LIST_CONVERSATIONS, request)

    def create_conversation(self, request: Optional[ConversationRequest] = None) -> Any:
        # An empty body is valid: the server assigns a name
        return self._dispatcher.execute(CREATE_CONVERSATION, request or ConversationRequest.create())

    def get_conversation(self, conversation_id: str) -> Any:
        ref = ConversationRef.create(conversation_id=validate_conversation_id(conversation_id))
        return self._dispatcher.execute(GET_CONVERSATION, ref)

    def update_conversation(self, conversation_id: str, request: ConversationRequest) -> Any:
        request = request.model_copy(update={"conversation_id": validate_conversation_id(conversation_id)})
        return self._dispatcher.execute(UPDATE_CONVERSATION, request)

    def delete_conversation(self, conversation_id: str) -> Any:
        ref = ConversationRef.create(conversation_id=validate_conversation_id(conversation_id))
        return self._dispatcher.execute(DELETE_CONVERSATION, ref)

    def list_user_conversations(self, user_id: str, **filters: Any) -> Any:
        request = ListUserConversationsRequest.create(user_id=validate_user_id(user_id), **filters)
        return self._dispatcher.execute(LIST_USER_CONVERSATIONS, request)

    # Members

    def list_members(self, conversation_id: str, **filters: Any) -> Any:
        request = ListMembersRequest.create(conversation_id=validate_conversation_id(conversation_id), **filters)
        return self._dispatcher.execute(LIST_MEMBERS, request)

    def get_member(self, conversation_id: str, member_id: str) -> Any:
        ref = ResourceRef.create(
            conversation_id=validate_conversation_id(conversation_id),
            resource_id=validate_member_id(member_id),
        )
        return self._dispatcher.execute(GET_MEMBER, ref)

    def create_member(self, request: CreateMemberRequest) -> Any:
        validate_conversation_id(request.conversation_id)
        return self._dispatcher.execute(CREATE_MEMBER, request)

    def update_member(self, request: UpdateMemberRequest) -> Any:
        validate_conversation_id(request.conversation_id)
        validate_member_id(request.member_id)
        return self._dispatcher.execute(UPDATE_MEMBER, request)

    # Events

    def list_events(self, conversation_id: str, **filters: Any) -> Any:
        request = ListEventsRequest.create(conversation_id=validate_conversation_id(conversation_id), **filters)
        return self._dispatcher.execute(LIST_EVENTS, request)

    def get_event(self, conversation_id: str, event_id: Union[int, str]) -> Any:
        ref = ResourceRef.create(
            conversation_id=validate_conversation_id(conversation_id),
            resource_id=normalize_event_id(event_id),
        )
        return self._dispatcher.execute(GET_EVENT, ref)

    def create_event(self, conversation_id: str, event: Event) -> Any:
        if not isinstance(event, Event):
            raise TypeError(f"Expected an Event, got {type(event).__name__}")
        request = CreateEventRequest(conversation_id=validate_conversation_id(conversation_id), event=event)
        logger.debug(f"ConversationsClient.create_event: {event.discriminator} -> {conversation_id}")
        return self._dispatcher.execute(CREATE_EVENT, request)

    def delete_event(self, conversation_id: str, event_id: Union[int, str]) -> Any:
        ref = ResourceRef.create(
            conversation_id=validate_conversation_id(conversation_id),
            resource_id=normalize_event_id(event_id),
        )
        return self._dispatcher.execute(DELETE_EVENT, ref)


__all__: List[str] = [
    "ConversationsClient",
    "LIST_CONVERSATIONS",
    "CREATE_CONVERSATION",
    "GET_CONVERSATION",
    "UPDATE_CONVERSATION",
    "DELETE_CONVERSATION",
    "LIST_USER_CONVERSATIONS",
    "LIST_MEMBERS",
    "GET_MEMBER",
    "CREATE_MEMBER",
    "UPDATE_MEMBER",
    "LIST_EVENTS",
    "GET_EVENT",
    "CREATE_EVENT",
    "DELETE_EVENT",
]
