"""Template runtime for Sabre."""

from .attributes import write_attribute_to
from .base import Template
from .context import ExecutionContext
from .types import (
    EMPTY_FRAGMENT,
    AttributeSegment,
    DynamicModel,
    Fragment,
    ModelBinding,
    PositionTagged,
    TypedModel,
    ViewBag,
)
from .writer import raw, write_literal_to, write_to

__all__ = [
    "Template",
    "ExecutionContext",
    "Fragment",
    "EMPTY_FRAGMENT",
    "AttributeSegment",
    "PositionTagged",
    "ViewBag",
    "TypedModel",
    "DynamicModel",
    "ModelBinding",
    "raw",
    "write_to",
    "write_literal_to",
    "write_attribute_to",
]
