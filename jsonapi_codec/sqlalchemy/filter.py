"""Filter strategy for SQLAlchemy models."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.inspection import inspect

from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import ValidationError
from jsonapi_codec.query.base import QueryParser

FILTER_OPERATORS = frozenset(
    {
        # Comparison operators
        "eq", "ne", "neq", "!=", "gt", "gte", "ge", "lt", "lte", "le",
        # Pattern matching
        "ilike", "like",
        # Membership operators
        "in", "not_in", "nin",
        # Null checks
        "is_null", "null", "is_not_null", "not_null",
        # Range operator
        "between",
    }
)


class SQLAlchemyFilterParser(QueryParser):
    """Check ``filter[field]`` and ``filter[field][op]`` against a mapped model.

    ``field`` may be a dotted path through relationships (``author.name``).
    The result keeps the ``{field: value}`` / ``{field: {"op": op, "val": value}}``
    shape with internal field names.
    """

    parameter = "filter"
    model: Any = None

    def __init__(self, *args: Any, model: Any = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        if model is not None:
            self.model = model
        if self.model is None:
            raise ValueError("SQLAlchemyFilterParser needs a mapped model")

    @classmethod
    def for_model(cls, model: Any) -> type:
        """Return a subclass bound to ``model``, for use as a normalizer strategy."""
        return type(f"{model.__name__}FilterParser", (cls,), {"model": model})

    def parse(self, context: RequestContext, value: Any) -> Any:
        if value is None:
            return context.filter
        if not isinstance(value, Mapping):
            raise ValidationError(
                "Filters must be given as filter[FIELD]=VALUE",
                parameter=self.parameter,
                value=value,
            )
        normalized: dict[str, Any] = {}
        for raw_field, condition in value.items():
            field = ".".join(self.transform.to_internal(part) for part in raw_field.split("."))
            self._check_field(field, raw_field)
            if isinstance(condition, Mapping) and "op" in condition:
                if condition["op"] not in FILTER_OPERATORS:
                    raise ValidationError(
                        f"Unsupported filter operator '{condition['op']}'",
                        parameter=f"filter[{raw_field}][{condition['op']}]",
                        value=condition.get("val"),
                    )
                condition = {"op": condition["op"], "val": condition.get("val")}
            normalized[field] = condition
        return normalized

    def _check_field(self, field: str, raw_field: str) -> None:
        mapper = inspect(self.model)
        *relationships, column = field.split(".")
        for name in relationships:
            prop = mapper.relationships.get(name)
            if prop is None:
                break
            mapper = prop.mapper
        else:
            if column in mapper.column_attrs:
                return
        raise ValidationError(
            f"Cannot filter '{self.model.__name__}' by '{raw_field}'",
            parameter=f"filter[{raw_field}]",
            value=raw_field,
        )
