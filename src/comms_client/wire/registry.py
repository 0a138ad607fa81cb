"""
Discriminator -> variant tables.

A VariantRegistry is one explicit, read-only table built at import time. The
event codec and the member channel decoder share it, together with
``decode_variant``, so nested polymorphism follows the same lookup rules as
top-level events.
"""
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Iterator, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from .model import FieldConstraintError, WireModel, describe_validation_error

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=WireModel)


def _identity(value: str) -> str:
    return value


@dataclass(frozen=True)
class Resolution(Generic[V]):
    """Outcome of looking up a discriminator."""

    discriminator: str
    variant: Type[V]
    tag: Optional[str] = None
    namespace: Optional[str] = None
    suffix: Optional[str] = None


class VariantRegistry(Generic[V]):
    """
    Read-only mapping from normalized discriminator tags to variant classes.

    Args:
        name: Registry name used in log and error messages
        variants: Normalized tag -> variant class
        fallback: Variant used for unrecognized discriminators
        normalize: Maps a wire discriminator to its tag
        namespaces: Wire prefix -> variant class. ``prefix`` and
            ``prefix:<suffix>`` resolve to that class with the suffix kept verbatim.
    """

    def __init__(
        self,
        name: str,
        variants: Mapping[str, Type[V]],
        fallback: Type[V],
        normalize: Callable[[str], str] = _identity,
        namespaces: Optional[Mapping[str, Type[V]]] = None,
    ):
        self.name = name
        self._variants = MappingProxyType(dict(variants))
        self._namespaces = MappingProxyType(dict(namespaces or {}))
        self.fallback = fallback
        self._normalize = normalize

    def __len__(self) -> int:
        return len(self._variants)

    def __iter__(self) -> Iterator[str]:
        return iter(self._variants)

    def __contains__(self, tag: object) -> bool:
        return tag in self._variants

    @property
    def variants(self) -> Mapping[str, Type[V]]:
        return self._variants

    def resolve(self, discriminator: str) -> Resolution[V]:
        for prefix, variant in self._namespaces.items():
            if discriminator == prefix:
                return Resolution(discriminator, variant, namespace=prefix)
            if discriminator.startswith(prefix + ":"):
                suffix = discriminator[len(prefix) + 1:]
                return Resolution(discriminator, variant, namespace=prefix, suffix=suffix)

        tag = self._normalize(discriminator)
        variant = self._variants.get(tag)
        if variant is None:
            logger.debug(f"{self.name}: unrecognized discriminator '{discriminator}', using {self.fallback.__name__}")
            return Resolution(discriminator, self.fallback)
        return Resolution(discriminator, variant, tag=tag)


def decode_variant(
    registry: VariantRegistry[V],
    payload: Any,
    inherited_type: Optional[str] = None,
    key: str = "type",
) -> V:
    """
    Decode one polymorphic object.

    The discriminator is read from ``payload[key]``. When the object omits it,
    ``inherited_type`` (the enclosing object's discriminator) is used instead.
    Each variant turns the payload into its constructor fields through its
    ``wire_fields(payload, resolution)`` classmethod.

    Raises:
        FieldConstraintError: The payload is not an object, has no usable
            discriminator, or does not match the variant's shape. ``field``
            names the offending path.
    """
    if not isinstance(payload, Mapping):
        raise FieldConstraintError(None, f"expected an object, got {type(payload).__name__}")

    discriminator = payload.get(key)
    if discriminator is None:
        discriminator = inherited_type
    if discriminator is None:
        raise FieldConstraintError(key, f"missing {registry.name} discriminator")
    if not isinstance(discriminator, str):
        raise FieldConstraintError(key, f"discriminator must be a string, got {type(discriminator).__name__}")

    resolution = registry.resolve(discriminator)
    fields: Dict[str, Any] = resolution.variant.wire_fields(payload, resolution)
    try:
        return resolution.variant.model_validate(fields)
    except ValidationError as exc:
        field, constraint = describe_validation_error(exc)
        raise FieldConstraintError(field, constraint) from exc
