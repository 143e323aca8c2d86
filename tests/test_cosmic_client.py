"""Cosmic REST client — request shape and status mapping."""

import json

import httpx
import pytest

from app.core.cosmic_client import ContentNotFoundError, ContentStoreError, CosmicClient


def make_client(handler) -> CosmicClient:
    return CosmicClient(
        bucket_slug="prompt-shop",
        read_key="read-key",
        base_url="https://api.example.test/v3",
        transport=httpx.MockTransport(handler),
    )


def test_find_builds_query():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"objects": [{"id": "1"}], "total": 1})

    client = make_client(handler)
    objects = client.find(
        "prompts",
        {"metadata.is_featured": True},
        props=["id", "title"],
        depth=1,
    )

    assert objects == [{"id": "1"}]
    assert seen["path"] == "/v3/buckets/prompt-shop/objects"
    assert seen["params"]["read_key"] == "read-key"
    assert seen["params"]["props"] == "id,title"
    assert seen["params"]["depth"] == "1"
    assert json.loads(seen["params"]["query"]) == {
        "type": "prompts",
        "metadata.is_featured": True,
    }


def test_find_one_limits_to_one():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["limit"] == "1"
        return httpx.Response(200, json={"objects": [{"id": "a"}]})

    assert make_client(handler).find_one("prompts", {"slug": "a"}, props=["id"]) == {"id": "a"}


def test_find_one_with_no_objects_is_not_found():
    client = make_client(lambda request: httpx.Response(200, json={"objects": []}))
    with pytest.raises(ContentNotFoundError):
        client.find_one("prompts", {"slug": "a"}, props=["id"])


def test_404_is_not_found():
    client = make_client(lambda request: httpx.Response(404, json={"message": "No objects found"}))
    with pytest.raises(ContentNotFoundError):
        client.find("prompts", props=["id"])


def test_server_error_is_store_error():
    client = make_client(lambda request: httpx.Response(503))
    with pytest.raises(ContentStoreError) as info:
        client.find("prompts", props=["id"])
    assert not isinstance(info.value, ContentNotFoundError)
    assert info.value.status_code == 503


def test_transport_error_is_store_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ContentStoreError):
        make_client(handler).find("prompts", props=["id"])


def test_close_cosmic_client_closes_shared_client(monkeypatch):
    from app.core import cosmic_client as module
    from app.core.config import Settings

    settings = Settings(COSMIC_BUCKET_SLUG="prompt-shop", COSMIC_READ_KEY="read-key")
    monkeypatch.setattr(module, "get_settings", lambda: settings)
    module.cosmic_client.cache_clear()

    shared = module.cosmic_client()
    module.close_cosmic_client()

    assert shared._http.is_closed
    assert module.cosmic_client.cache_info().currsize == 0
    module.close_cosmic_client()
