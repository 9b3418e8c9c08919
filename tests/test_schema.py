import pydantic
import pytest

from jsonapi_codec.core.resource import (
    Loaded,
    LoadedMany,
    NotLoaded,
    Null,
    ResourceAccessor,
    is_loaded,
)
from jsonapi_codec.core.errors import RequiredFieldError
from jsonapi_codec.core.schema import Attribute, Relationship, ResourceSchema, SchemaRegistry
from tests.factories import COMMENT, POST, USER, make_post


def test_type_is_required() -> None:
    with pytest.raises(pydantic.ValidationError):
        ResourceSchema(type="")


def test_attribute_and_relationship_shorthands() -> None:
    assert POST.attribute("title") == Attribute(name="title")
    assert POST.attribute("secret").serialize is False
    assert POST.relationship("comments") == Relationship(name="comments", target="comment", many=True)
    assert POST.relationship("nope") is None
    assert POST.has_field("best_comment")
    assert not POST.has_field("nope")
    assert POST.url_path == "post"


def test_attributes_as_mapping() -> None:
    schema = ResourceSchema(type="x", attributes={"a": None, "b": {"serialize": False}})

    assert schema.attribute_names == ("a", "b")
    assert schema.attribute("b").serialize is False


def test_registry_resolves_cycles() -> None:
    a = ResourceSchema(type="a", relationships={"b": {"target": "b"}})
    b = ResourceSchema(type="b", relationships={"a": {"target": "a"}})
    registry = SchemaRegistry([a, b])

    registry.validate()
    assert registry.target(a.relationship("b")) is b
    assert registry.target(b.relationship("a")) is a
    assert registry.resolve("a") is a
    assert registry.for_related_type(a, "b") is b
    assert registry.for_related_type(a, "c") is None
    assert len(registry) == 2 and "b" in registry


def test_registry_validate_reports_missing_targets() -> None:
    registry = SchemaRegistry([POST, USER])

    with pytest.raises(ValueError, match="comment"):
        registry.validate()


def test_registry_rejects_conflicting_schemas() -> None:
    registry = SchemaRegistry([USER])
    registry.register(USER)

    with pytest.raises(ValueError):
        registry.register(ResourceSchema(type="user"))
    with pytest.raises(KeyError):
        registry.get("missing")


def test_accessor_reads_objects_and_mappings() -> None:
    accessor = ResourceAccessor()

    assert accessor.id(make_post(3), POST) == "3"
    assert accessor.id({"id": 4}) == "4"
    assert accessor.type({"id": 4, "type": "user"}) == "user"
    assert accessor.type({}, COMMENT) == "comment"
    assert accessor.attribute_value({"title": "t"}, "title") == "t"
    assert accessor.attribute_value({}, "title") is None


def test_accessor_requires_ids() -> None:
    accessor = ResourceAccessor()

    with pytest.raises(RequiredFieldError):
        accessor.id({"name": "x"}, USER)
    with pytest.raises(RequiredFieldError):
        accessor.type({"id": 1})
    assert not accessor.matches({"id": 1}, "1", "user")
    assert accessor.matches({"id": 1, "type": "user"}, "1", "user")


def test_relationship_values() -> None:
    accessor = ResourceAccessor()
    author = Relationship(name="author", target="user")
    comments = Relationship(name="comments", target="comment", many=True)
    sentinel = NotLoaded(id="5", type="user")

    assert accessor.relationship_value({"author": None}, author) == Null()
    assert accessor.relationship_value({"author": "u"}, author) == Loaded(resource="u")
    assert accessor.relationship_value({"author": sentinel}, author) is sentinel
    assert accessor.relationship_value({}, comments) == LoadedMany()
    assert accessor.relationship_value({"comments": ["c"]}, comments) == LoadedMany(resources=("c",))
    assert not is_loaded(sentinel)
    assert is_loaded(LoadedMany())
    assert sentinel.identifier().key == ("user", "5")
    assert NotLoaded(type="user").identifier() is None
