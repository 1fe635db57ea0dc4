import json
from typing import Optional

import pytest
import respx
from httpx import Response
from simplyrestful_client import APICollection, APIResource, Link, SimplyRESTfulClient
from simplyrestful_client.errors import ModelValidationError
from simplyrestful_client.models import ServiceDocument, SortOrder, resource_self_href

MEDIA_TYPE = "application/x.testresource-v1+json"
SELF_LINK = "http://localhost/testresources/1"


class TestResource(APIResource):
    __test__ = False

    additional_field: Optional[str] = None
    some_number: Optional[int] = None


class ExampleResource(APIResource):
    description: str


def test_api_resource_parses_self_link_and_keeps_extra_fields():
    resource = APIResource.model_validate(
        {"self": {"href": SELF_LINK, "type": MEDIA_TYPE}, "custom": [1, 2]}
    )
    assert resource.self_href() == SELF_LINK
    assert resource.self_link.type == MEDIA_TYPE
    assert resource.model_dump(by_alias=True)["custom"] == [1, 2]


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({}, -1),
        ({"total": "12"}, -1),
        ({"total": True}, -1),
        ({"total": 17.5}, -1),
        ({"total": 12}, 12),
        ({"total": 12.0}, 12),
    ],
)
def test_collection_declared_total(payload, expected):
    total = APICollection.model_validate(payload).declared_total
    assert total == expected
    assert type(total) is int


def test_collection_links_are_parsed_not_followed():
    collection = APICollection.model_validate(
        {
            "total": 20,
            "item": [{"a": 1}],
            "first": {"href": "/things/?pageStart=0"},
            "next": {"href": "/things/?pageStart=10"},
        }
    )
    assert collection.items == [{"a": 1}]
    assert collection.next == Link(href="/things/?pageStart=10")
    assert collection.prev is None


def test_service_document_requires_described_by():
    doc = ServiceDocument.model_validate({"describedBy": {"href": "/openapi.json"}})
    assert doc.described_by.href == "/openapi.json"


def test_sort_order_param():
    assert SortOrder("name").to_param() == "name:asc"
    assert SortOrder("name", ascending=False).to_param() == "name:desc"


def test_resource_self_href_for_dicts_and_models():
    assert resource_self_href({"self": {"href": SELF_LINK}}) == SELF_LINK
    assert resource_self_href({"self": {}}) is None
    assert resource_self_href({}) is None
    assert resource_self_href(TestResource(self_link=Link(href=SELF_LINK))) == SELF_LINK
    assert resource_self_href(TestResource()) is None


@pytest.fixture
def typed_client():
    cl = SimplyRESTfulClient(
        "http://localhost/", MEDIA_TYPE, resource_model=ExampleResource
    )
    cl.set_resource_uri_template("http://localhost/testresources/{id}")
    return cl


@pytest.mark.asyncio
@respx.mock
async def test_typed_client_validates_resources(typed_client):
    respx.get("http://localhost/testresources/").mock(
        return_value=Response(
            200,
            json={
                "total": 1,
                "item": [{"self": {"href": SELF_LINK}, "description": "first"}],
            },
        )
    )

    async with typed_client:
        resources = await typed_client.list()

    assert isinstance(resources[0], ExampleResource)
    assert resources[0].description == "first"
    assert resources[0].self_href() == SELF_LINK


@pytest.mark.asyncio
@respx.mock
async def test_typed_client_rejects_mismatching_payload(typed_client):
    respx.get(SELF_LINK).mock(return_value=Response(200, json={"unexpected": True}))

    async with typed_client:
        with pytest.raises(ModelValidationError) as exc:
            await typed_client.read(SELF_LINK)

    assert "ExampleResource" in str(exc.value)


@pytest.mark.asyncio
@respx.mock
async def test_typed_client_serializes_by_alias(typed_client):
    route = respx.put(SELF_LINK).mock(return_value=Response(204))
    resource = ExampleResource(self_link=Link(href=SELF_LINK), description="changed")

    async with typed_client:
        await typed_client.update(resource)

    body = json.loads(route.calls[0].request.content)
    assert body == {"self": {"href": SELF_LINK}, "description": "changed"}


@pytest.mark.asyncio
@respx.mock
async def test_typed_client_keeps_explicit_nulls_in_update_body():
    route = respx.put(SELF_LINK).mock(return_value=Response(204))
    client = SimplyRESTfulClient(
        "http://localhost/", MEDIA_TYPE, resource_model=TestResource
    )
    client.set_resource_uri_template("http://localhost/testresources/{id}")
    resource = TestResource.model_validate(
        {"self": {"href": SELF_LINK}, "additional_field": None}
    )

    async with client:
        await client.update(resource)

    body = json.loads(route.calls[0].request.content)
    assert body == {"self": {"href": SELF_LINK}, "additional_field": None}
