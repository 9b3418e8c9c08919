"""Resource accessor for SQLAlchemy mapped instances."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.inspection import inspect
from sqlalchemy.orm.attributes import NO_VALUE
from sqlalchemy.orm.interfaces import MANYTOONE

from jsonapi_codec.core.resource import (
    NotLoaded,
    Null,
    RelationshipValue,
    ResourceAccessor,
    relationship_value,
)
from jsonapi_codec.core.schema import Relationship

logger = logging.getLogger(__name__)


class SQLAlchemyResourceAccessor(ResourceAccessor):
    """Read mapped instances without triggering lazy loads.

    A relationship that has not been loaded becomes
    :class:`~jsonapi_codec.core.resource.NotLoaded`. For a many-to-one
    relationship the id is taken from the local foreign key column, so the
    reference still renders as linkage.
    """

    def relationship_value(self, resource: Any, relationship: Relationship) -> RelationshipValue:
        try:
            state = inspect(resource)
        except NoInspectionAvailable:
            return super().relationship_value(resource, relationship)
        attr_state = state.attrs.get(relationship.name)
        if attr_state is None:
            return super().relationship_value(resource, relationship)
        if attr_state.loaded_value is NO_VALUE:
            return self._not_loaded(resource, relationship)
        return relationship_value(attr_state.loaded_value, many=relationship.many)

    def _not_loaded(self, resource: Any, relationship: Relationship) -> RelationshipValue:
        mapper = inspect(type(resource))
        prop = mapper.relationships.get(relationship.name)
        if prop is None or prop.direction is not MANYTOONE or len(prop.local_columns) != 1:
            return NotLoaded(type=relationship.target)
        (column,) = prop.local_columns
        foreign_key = getattr(resource, mapper.get_property_by_column(column).key, None)
        if foreign_key is None:
            return Null()
        logger.debug("%s.%s is not loaded", mapper.class_.__name__, relationship.name)
        return NotLoaded(type=relationship.target, id=str(foreign_key))
