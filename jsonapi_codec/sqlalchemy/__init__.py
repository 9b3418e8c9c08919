"""SQLAlchemy integration for the JSON:API codec."""

from .accessor import SQLAlchemyResourceAccessor
from .filter import FILTER_OPERATORS, SQLAlchemyFilterParser

__all__ = ["FILTER_OPERATORS", "SQLAlchemyFilterParser", "SQLAlchemyResourceAccessor"]
