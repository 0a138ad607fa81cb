"""
Polymorphic event codec.

decode:
    1. the payload must be a JSON object with a string ``type``
    2. ``custom`` / ``custom:<suffix>`` routes to CustomEvent with the suffix kept verbatim
    3. otherwise the normalized tag is looked up in EVENT_VARIANTS
    4. unrecognized tags decode to UnknownEvent, keeping the whole payload
    5. a field that does not match the variant's shape fails the whole decode

encode is the inverse and renders the wire spelling of the variant back.
"""
import logging
from typing import Any, Dict

from ..errors import MalformedPayloadError
from ..wire.model import FieldConstraintError, WirePayload, load_json_object
from ..wire.registry import VariantRegistry, decode_variant
from .events import EVENT_VARIANTS, Event

logger = logging.getLogger(__name__)


class PolymorphicEventCodec:
    """Decode/encode conversation events through a variant registry."""

    def __init__(self, registry: VariantRegistry[Event] = EVENT_VARIANTS):
        self.registry = registry

    def decode(self, payload: WirePayload) -> Event:
        data = load_json_object(payload)
        try:
            event = decode_variant(self.registry, data)
        except FieldConstraintError as exc:
            raise MalformedPayloadError(
                f"Malformed event payload (type={data.get('type')!r}): {exc.field or '<event>'}: {exc.constraint}",
                field=exc.field,
            ) from exc
        logger.debug(f"PolymorphicEventCodec.decode: {data.get('type')!r} -> {type(event).__name__}")
        return event

    def encode(self, event: Event) -> Dict[str, Any]:
        if not isinstance(event, Event):
            raise TypeError(f"Expected an Event, got {type(event).__name__}")
        return event.to_wire()


EVENT_CODEC = PolymorphicEventCodec()


def decode_event(payload: WirePayload) -> Event:
    return EVENT_CODEC.decode(payload)


def encode_event(event: Event) -> Dict[str, Any]:
    return EVENT_CODEC.encode(event)
