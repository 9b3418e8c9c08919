"""Sparse fieldsets: ``fields[type]=a,b``."""

from __future__ import annotations

from typing import Any, FrozenSet, Mapping

from jsonapi_codec.core.context import RequestContext
from jsonapi_codec.core.errors import InvalidFieldError, ValidationError
from jsonapi_codec.query.base import QueryParser
from jsonapi_codec.utils.query_params import split_csv


class FieldsParser(QueryParser):
    """Validate the requested type's fieldset against its schema.

    Fieldsets of other types are converted to internal names but not checked;
    relationships of registered types are matched by their wire name.
    """

    parameter = "fields"

    def parse(self, context: RequestContext, value: Any) -> dict[str, FrozenSet[str]]:
        if value is None:
            return context.fields
        if not isinstance(value, Mapping):
            raise ValidationError(
                "Sparse fieldsets must be given per type, as fields[TYPE]=a,b",
                parameter=self.parameter,
                value=value,
            )
        schema = context.view
        fields: dict[str, FrozenSet[str]] = {}
        for type_, raw_names in value.items():
            names = raw_names if isinstance(raw_names, (list, tuple)) else split_csv(str(raw_names))
            if schema is not None and type_ == schema.type:
                internal = []
                for name in names:
                    field = self.field_name(schema, name)
                    if not schema.has_field(field):
                        raise InvalidFieldError(name, type_)
                    internal.append(field)
            elif type_ in self.registry:
                other = self.registry.get(type_)
                internal = [self.field_name(other, name) for name in names]
            else:
                internal = [self.transform.to_internal(name) for name in names]
            fields[type_] = frozenset(internal)
        return fields
