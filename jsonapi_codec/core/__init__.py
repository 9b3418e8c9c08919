"""Core JSON:API codec types."""

from .context import RequestContext
from .document import JSONAPIDocumentBuilder, build_error_document
from .errors import (
    InvalidFieldError,
    InvalidPageError,
    InvalidRelationshipError,
    InvalidSortError,
    JSONAPIError,
    JSONAPIErrorBuilder,
    MalformedDocumentError,
    MissingFilterStrategyError,
    RequiredFieldError,
    ValidationError,
)
from .resource import Loaded, LoadedMany, NotLoaded, Null, ResourceAccessor, is_loaded
from .schema import Attribute, Relationship, ResourceSchema, SchemaRegistry
from .transform import FieldTransform

__all__ = [
    "Attribute",
    "FieldTransform",
    "InvalidFieldError",
    "InvalidPageError",
    "InvalidRelationshipError",
    "InvalidSortError",
    "JSONAPIDocumentBuilder",
    "JSONAPIError",
    "JSONAPIErrorBuilder",
    "Loaded",
    "LoadedMany",
    "MalformedDocumentError",
    "MissingFilterStrategyError",
    "NotLoaded",
    "Null",
    "Relationship",
    "RequestContext",
    "RequiredFieldError",
    "ResourceAccessor",
    "ResourceSchema",
    "SchemaRegistry",
    "ValidationError",
    "build_error_document",
    "is_loaded",
]
