from simplyrestful_client.links import get_link, get_link_href, get_link_type


def test_get_link_basic_cases():
    assert get_link({"id": 1}, "self") is None
    assert get_link({}, "self") is None
    payload = {"self": {"href": "/testresources/1", "type": "application/x.test+json"}}
    assert get_link(payload, "self") == {
        "href": "/testresources/1",
        "type": "application/x.test+json",
    }
    assert get_link({"self": "not-a-link"}, "self") is None


def test_get_link_href_and_type():
    payload = {
        "self": {"href": "/testresources/1"},
        "describedBy": {"href": "/openapi.json", "type": "application/json"},
    }
    assert get_link_href(payload, "self") == "/testresources/1"
    assert get_link_type(payload, "describedBy") == "application/json"
    assert get_link_type(payload, "self") is None
    assert get_link_href(payload, "nope") is None
    assert get_link_href({"self": {"href": ""}}, "self") is None
