"""Query parameter normalization strategies."""

from .base import QueryParser
from .fields import FieldsParser
from .filter import FilterParser
from .include import IncludeParser
from .normalizer import QueryNormalizer
from .page import PAGE_KEYS, PageParser
from .sort import ASC, DESC, SortParser

__all__ = [
    "ASC",
    "DESC",
    "FieldsParser",
    "FilterParser",
    "IncludeParser",
    "PAGE_KEYS",
    "PageParser",
    "QueryNormalizer",
    "QueryParser",
    "SortParser",
]
