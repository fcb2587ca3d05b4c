import pytest

from cimedia_sdk.directory import AssetDirectory
from cimedia_sdk.errors import NotFoundError, TransportError
from cimedia_sdk.transport import JSON

from conftest import WORKSPACE_ID


def test_get_detail(directory, transport):
    transport.routes[("GET", "/assets/abc")] = {"id": "abc", "name": "a.txt"}
    assert directory.get_detail("abc") == {"id": "abc", "name": "a.txt"}


def test_get_detail_not_found(directory, transport):
    def missing(call):
        raise NotFoundError("not found", code=404)

    transport.routes[("GET", "/assets/gone")] = missing
    with pytest.raises(NotFoundError):
        directory.get_detail("gone")


def test_get_details_bulk(directory, transport):
    transport.routes[("POST", "/assets/details/bulk")] = {
        "items": [{"id": "a", "name": "a.txt"}, {"id": "b", "name": "b.txt"}]
    }
    result = directory.get_details_bulk(["a", "b"], ["name"])
    assert result == {"a": {"id": "a", "name": "a.txt"}, "b": {"id": "b", "name": "b.txt"}}
    call = transport.calls[0]
    assert call.body == {"assetIds": ["a", "b"], "fields": ["name"]}
    assert call.content_type == JSON


def test_get_details_bulk_list_response(directory, transport):
    transport.routes[("POST", "/assets/details/bulk")] = [{"id": "a", "size": 1}]
    assert directory.get_details_bulk(("a",), ("size",)) == {"a": {"id": "a", "size": 1}}


@pytest.mark.parametrize("response", ["not json", {"assetId": "a"}, None])
def test_get_details_bulk_rejects_unkeyed_response(directory, transport, response):
    transport.routes[("POST", "/assets/details/bulk")] = response
    with pytest.raises(TransportError):
        directory.get_details_bulk(["a"], ["name"])


def test_delete(directory, transport):
    assert directory.delete("abc") is None
    assert (transport.calls[0].method, transport.calls[0].url) == ("DELETE", "/assets/abc")


def test_delete_propagates_errors(directory, transport):
    transport.fail_on = lambda c: c.method == "DELETE"
    with pytest.raises(TransportError):
        directory.delete("abc")


def test_list_page(directory, transport):
    transport.routes[("GET", f"/workspaces/{WORKSPACE_ID}/contents")] = {"items": [{"name": "x"}], "count": 1}
    assert directory.list_page(10, 20) == [{"name": "x"}]
    assert transport.calls[0].params == {"limit": 10, "offset": 20}


def test_list_page_without_items(directory, transport):
    transport.routes[("GET", f"/workspaces/{WORKSPACE_ID}/contents")] = {"count": 0}
    assert directory.list_page(5, 0) == []


@pytest.mark.parametrize("limit,offset", [(-1, 0), (5, -1), (1.5, 0), ("5", 0), (True, 0)])
def test_list_page_rejects_bad_window(directory, transport, limit, offset):
    with pytest.raises(ValueError):
        directory.list_page(limit, offset)
    assert transport.calls == []


def test_download_url_is_cached(transport, session):
    now = [1000.0]
    directory = AssetDirectory(transport, session, download_url_ttl=60, clock=lambda: now[0])
    transport.routes[("GET", "/assets/abc/download")] = {"location": "https://cdn.test/abc"}

    assert directory.download_url("abc") == "https://cdn.test/abc"
    now[0] += 59
    assert directory.download_url("abc") == "https://cdn.test/abc"
    assert len(transport.calls) == 1

    now[0] += 2
    directory.download_url("abc")
    assert len(transport.calls) == 2


def test_download_url_without_location(directory, transport):
    transport.routes[("GET", "/assets/abc/download")] = {}
    with pytest.raises(TransportError):
        directory.download_url("abc")
