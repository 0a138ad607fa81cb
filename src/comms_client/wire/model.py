"""
Wire model base and staged builder.

Every value that crosses the wire is an immutable pydantic model with two
explicit factories:

- ``Model.from_wire(data)`` for payloads received from the server.
  Shape errors surface as MalformedPayloadError.
- ``Model.builder().<field>(value)....build()`` (or ``Model.create(...)``) for
  values the caller creates. Validation runs once at build time and errors
  surface as PreconditionError naming the field and constraint.
"""
import json
import logging
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import MalformedPayloadError, PreconditionError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="WireModel")

WirePayload = Union[bytes, bytearray, str, Mapping[str, Any]]


class FieldConstraintError(ValueError):
    """
    Validator failure that knows which field it concerns.

    Raised from inside pydantic validators; the field path is recovered from
    the validation error context when it is converted into a client error.
    """

    def __init__(self, field: Optional[str], constraint: str):
        super().__init__(f"{field}: {constraint}" if field else constraint)
        self.field = field
        self.constraint = constraint


def describe_validation_error(exc: ValidationError) -> Tuple[Optional[str], str]:
    """Return (field path, constraint) for the first validation error."""
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    cause = (err.get("ctx") or {}).get("error")
    inner = getattr(cause, "field", None)
    if inner:
        field = f"{loc}.{inner}" if loc else inner
    else:
        field = loc or None
    constraint = getattr(cause, "constraint", None) or err.get("msg", "invalid value")
    return field, constraint


def precondition_from_validation(exc: ValidationError, model: Optional[type] = None) -> PreconditionError:
    field, constraint = describe_validation_error(exc)
    name = model.__name__ if model else exc.title
    return PreconditionError(f"Invalid {name}: {field or '<model>'}: {constraint}", field=field, constraint=constraint)


def malformed_from_validation(exc: ValidationError, model: Optional[type] = None) -> MalformedPayloadError:
    field, constraint = describe_validation_error(exc)
    name = model.__name__ if model else exc.title
    return MalformedPayloadError(f"Malformed {name} payload: {field or '<model>'}: {constraint}", field=field)


def load_json(data: WirePayload) -> Any:
    """Parse raw JSON bytes/text; mappings are returned as a plain dict."""
    if isinstance(data, Mapping):
        return dict(data)
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError(f"Payload is not valid UTF-8: {exc}") from exc
    if not isinstance(data, str):
        raise MalformedPayloadError(f"Unsupported payload type: {type(data).__name__}")
    try:
        return json.loads(data)
    except ValueError as exc:
        raise MalformedPayloadError(f"Invalid JSON: {exc}") from exc


def load_json_object(data: WirePayload) -> Dict[str, Any]:
    payload = load_json(data)
    if not isinstance(payload, dict):
        raise MalformedPayloadError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


class WireModel(BaseModel):
    """Immutable wire value. Python field names on input, wire aliases on output."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @classmethod
    def from_wire(cls: Type[M], data: WirePayload) -> M:
        """Decode a server payload."""
        payload = load_json_object(data)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise malformed_from_validation(exc, cls) from exc

    @classmethod
    def wire_fields(cls, payload: Mapping[str, Any], resolution: Any = None) -> Dict[str, Any]:
        """Constructor fields for a decoded payload. Variants override to inject context."""
        return dict(payload)

    @classmethod
    def build_from(cls: Type[M], fields: Mapping[str, Any]) -> M:
        """Validate accumulated builder fields into an instance."""
        try:
            return cls.model_validate(dict(fields))
        except ValidationError as exc:
            raise precondition_from_validation(exc, cls) from exc

    @classmethod
    def create(cls: Type[M], **fields: Any) -> M:
        """Construct a caller-side value directly; same checks as build_from."""
        return cls.build_from(fields)

    @classmethod
    def builder(cls: Type[M], **fields: Any) -> "Builder[M]":
        return Builder(cls, **fields)

    @classmethod
    def builder_fields(cls) -> frozenset:
        """Field names a builder for this model accepts."""
        return frozenset(cls.model_fields)

    def to_wire(self) -> Dict[str, Any]:
        """Render the full wire object, omitting absent values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def to_request_body(self) -> Dict[str, Any]:
        """Render only the fields the caller set (PATCH semantics)."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True, mode="json")


class Builder(Generic[M]):
    """
    Flat staged builder.

    Setters accumulate values and never validate; ``build()`` validates once.
    Setters are exposed both as fluent methods (``builder.level(0.5)``) and
    as ``builder.set(level=0.5)``.
    """

    def __init__(self, model: Type[M], **fields: Any):
        self._model = model
        self._fields: Dict[str, Any] = {}
        self.set(**fields)

    def _accepts(self, name: str) -> bool:
        return name in self._model.builder_fields()

    def set(self, **fields: Any) -> "Builder[M]":
        for name, value in fields.items():
            if not self._accepts(name):
                raise TypeError(f"{self._model.__name__} builder has no field '{name}'")
            self._fields[name] = value
        return self

    def __getattr__(self, name: str):
        if name.startswith("_") or not self._accepts(name):
            raise AttributeError(f"{type(self).__name__} for {self._model.__name__} has no field '{name}'")

        def setter(value: Any) -> "Builder[M]":
            self._fields[name] = value
            return self

        return setter

    @property
    def staged_fields(self) -> Dict[str, Any]:
        return dict(self._fields)

    def build(self) -> M:
        logger.debug(f"Builder.build: model={self._model.__name__}, fields={sorted(self._fields)}")
        return self._model.build_from(self._fields)
