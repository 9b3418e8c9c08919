import pytest

from jsonapi_codec.core.document import JSONAPIDocumentBuilder, build_error_document
from jsonapi_codec.core.errors import (
    InvalidSortError,
    JSONAPIErrorBuilder,
    RequiredFieldError,
    status_title,
)
from jsonapi_codec.schemas.resource import (
    JSONAPIDocument,
    JSONAPIErrorObject,
    JSONAPIRelationship,
    JSONAPIResource,
    JSONAPIResourceIdentifier,
)


def test_build_single_and_collection() -> None:
    builder = JSONAPIDocumentBuilder()
    resource = JSONAPIResource(type="post", id="1", attributes={"title": "t"})

    single = builder.build_single(resource, links={"self": "/post/1"})
    collection = builder.build_collection([resource], meta={"count": 1})

    assert single.to_wire() == {
        "data": {"type": "post", "id": "1", "attributes": {"title": "t"}},
        "links": {"self": "/post/1"},
    }
    assert collection.to_wire() == {
        "data": [{"type": "post", "id": "1", "attributes": {"title": "t"}}],
        "meta": {"count": 1},
    }


def test_build_error_document_stamps_status_and_title() -> None:
    document = build_error_document(
        404,
        [
            {"detail": "no such post", "status": "500"},
            JSONAPIErrorObject(code="gone"),
            RequiredFieldError("id", pointer="/data/id"),
        ],
    )

    errors = document.to_wire()["errors"]
    assert all(error["status"] == "404" and error["title"] == "Not Found" for error in errors)
    assert errors[0]["detail"] == "no such post"
    assert errors[1]["code"] == "gone"
    assert errors[2]["source"] == {"pointer": "/data/id"}
    assert "data" not in document.to_wire()


def test_data_and_errors_are_exclusive() -> None:
    with pytest.raises(ValueError):
        JSONAPIDocument(data=None, errors=[JSONAPIErrorObject(title="x")])


def test_relationship_without_data_member() -> None:
    assert JSONAPIRelationship(links={"related": "/x"}).to_wire() == {"links": {"related": "/x"}}
    assert JSONAPIRelationship(data=None).to_wire() == {"data": None}
    assert JSONAPIRelationship(data=[]).to_wire() == {"data": []}


def test_identifier_key() -> None:
    assert JSONAPIResourceIdentifier(type="user", id="5").key == ("user", "5")


def test_validation_error_object() -> None:
    error = InvalidSortError("nope", "post").to_error_object()

    assert error == {
        "status": "400",
        "code": "invalid_sort",
        "title": "Bad Request",
        "detail": "Cannot sort type 'post' by unknown attribute 'nope'",
        "source": {"parameter": "sort"},
    }


def test_error_builder() -> None:
    builder = JSONAPIErrorBuilder()

    with pytest.raises(ValueError):
        builder.error_object()
    assert builder.error_document([{"title": "x"}]) == {"errors": [{"title": "x"}]}
    assert builder.stamp_status(403, [{"detail": "d"}]) == [
        {"detail": "d", "status": "403", "title": "Forbidden"}
    ]


def test_status_title() -> None:
    assert status_title(400) == "Bad Request"
    assert status_title(599) == "Unknown Error"


def test_error_document_from_exception() -> None:
    document = JSONAPIErrorBuilder().from_exception(RequiredFieldError("id", pointer="/data/id"))

    assert document == {
        "errors": [
            {
                "status": "400",
                "code": "required_field",
                "title": "Bad Request",
                "detail": "Required field 'id' is missing",
                "source": {"pointer": "/data/id"},
            }
        ]
    }
