"""JSON:API document codec and query normalizer for FastAPI applications."""

from .config import JSONAPIConfig
from .core.context import RequestContext
from .core.document import JSONAPIDocumentBuilder, build_error_document
from .core.errors import JSONAPIError, JSONAPIErrorBuilder, ValidationError
from .core.resource import NotLoaded, ResourceAccessor
from .core.schema import Attribute, Relationship, ResourceSchema, SchemaRegistry
from .deserializers.base import JSONAPIDeserializer
from .query.normalizer import QueryNormalizer
from .serializers.base import JSONAPISerializer

__all__ = [
    "Attribute",
    "JSONAPIConfig",
    "JSONAPIDeserializer",
    "JSONAPIDocumentBuilder",
    "JSONAPIError",
    "JSONAPIErrorBuilder",
    "JSONAPISerializer",
    "NotLoaded",
    "QueryNormalizer",
    "Relationship",
    "RequestContext",
    "ResourceAccessor",
    "ResourceSchema",
    "SchemaRegistry",
    "ValidationError",
    "build_error_document",
]
