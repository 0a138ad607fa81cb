"""
Wire models, staged builders and discriminator registries.
"""
from .model import (
    Builder,
    FieldConstraintError,
    WireModel,
    load_json,
    load_json_object,
)
from .registry import Resolution, VariantRegistry, decode_variant

__all__ = [
    "Builder",
    "FieldConstraintError",
    "WireModel",
    "load_json",
    "load_json_object",
    "Resolution",
    "VariantRegistry",
    "decode_variant",
]
