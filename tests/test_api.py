"""
End-to-end tests for the caching proxy API.
"""

import dataclasses

import httpx
import pytest
from fastapi.testclient import TestClient

from caching_proxy.api.app import create_app
from caching_proxy.exceptions import ConfigurationError
from caching_proxy.repositories import FileEntryStore, HttpxForwarder
from caching_proxy.services import derive_key

from fakes import ORIGIN_URL, InMemoryStore, gzip_response

PAYLOAD = b'{"items": [{"id": 1}, {"id": 2}]}'


@pytest.fixture
def file_store(settings):
    """A file store in the temporary cache directory."""
    return FileEntryStore.create(settings)


@pytest.fixture
def client(settings, file_store, forwarder):
    """Create a test client backed by a file store and the fake origin."""
    app = create_app(settings, store=file_store, forwarder=forwarder)
    with TestClient(app) as test_client:
        yield test_client


def test_round_trip_with_gzip(client, origin, file_store):
    """A gzip miss is stored decompressed and replayed gzipped to gzip clients."""
    origin.queue(gzip_response(PAYLOAD))

    first = client.get("/items", headers={"accept-encoding": "gzip"})
    assert first.status_code == 200
    assert first.headers["x-cache"] == "MISS"
    assert first.headers["content-encoding"] == "gzip"
    assert first.content == PAYLOAD

    second = client.get("/items", headers={"accept-encoding": "gzip"})
    assert second.status_code == 200
    assert second.headers["x-cache"] == "HIT"
    assert second.headers["content-encoding"] == "gzip"
    assert second.content == PAYLOAD

    assert len(origin.requests) == 1
    assert file_store.get(derive_key("GET", "/items", "")) is not None


def test_round_trip_without_client_gzip(client, origin):
    """Clients that do not accept gzip get the plain payload on a hit."""
    origin.queue(gzip_response(PAYLOAD))
    client.get("/items", headers={"accept-encoding": "gzip"})

    hit = client.get("/items", headers={"accept-encoding": "identity"})

    assert hit.headers["x-cache"] == "HIT"
    assert "content-encoding" not in hit.headers
    assert hit.content == PAYLOAD
    assert hit.headers["content-length"] == str(len(PAYLOAD))
    assert hit.headers["content-type"] == "application/json"


def test_plain_response_is_replayed_with_its_content_type(client, origin):
    origin.queue(httpx.Response(200, text="hello", headers={"content-type": "text/plain"}))
    assert client.get("/greeting").headers["x-cache"] == "MISS"

    hit = client.get("/greeting")

    assert hit.headers["x-cache"] == "HIT"
    assert hit.text == "hello"
    assert hit.headers["content-type"].startswith("text/plain")
    assert "content-encoding" not in hit.headers


def test_query_string_is_part_of_the_key(client, origin):
    origin.queue(
        httpx.Response(200, json={"page": 1}),
        httpx.Response(200, json={"page": 2}),
    )
    assert client.get("/items?page=1").json() == {"page": 1}
    assert client.get("/items?page=2").json() == {"page": 2}

    again = client.get("/items?page=1")
    assert again.headers["x-cache"] == "HIT"
    assert again.json() == {"page": 1}
    assert str(origin.requests[1].url) == f"{ORIGIN_URL}/items?page=2"


def test_post_is_never_cached(client, origin, file_store):
    """Non-idempotent requests always go upstream and never touch the store."""
    for _ in range(3):
        response = client.post("/items", json={"name": "widget"})
        assert response.status_code == 200
        assert response.headers["x-cache"] == "SKIP"

    assert len(origin.requests) == 3
    assert list(file_store.cache_dir.iterdir()) == []


@pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
def test_other_mutating_methods_skip_the_cache(client, origin, method):
    response = client.request(method, "/items/1")
    assert response.headers["x-cache"] == "SKIP"
    assert origin.requests[0].method == method


@pytest.mark.parametrize("method", ["PROPFIND", "PURGE", "TRACE"])
def test_unlisted_methods_are_forwarded_uncached(client, origin, method):
    """Any method token reaches the origin, not only the common ones."""
    response = client.request(method, "/dav/folder")

    assert response.status_code == 200
    assert response.headers["x-cache"] == "SKIP"
    assert len(origin.requests) == 1
    assert origin.requests[0].method == method
    assert origin.requests[0].url.path == "/dav/folder"


def test_non_200_is_not_cached(client, origin, file_store):
    """A 404 is passed through and the next request still misses."""
    origin.default = lambda: httpx.Response(404, json={"detail": "not found"})

    first = client.get("/missing")
    second = client.get("/missing")

    assert first.status_code == 404
    assert first.headers["x-cache"] == "MISS"
    assert second.headers["x-cache"] == "MISS"
    assert len(origin.requests) == 2
    assert list(file_store.cache_dir.iterdir()) == []


def test_head_is_cached_separately(client, origin):
    origin.default = lambda: httpx.Response(200, headers={"content-type": "application/json"})

    assert client.head("/items").headers["x-cache"] == "MISS"
    assert client.head("/items").headers["x-cache"] == "HIT"
    assert origin.requests[0].method == "HEAD"
    assert len(origin.requests) == 1


def test_head_passes_origin_content_length_through(client, origin):
    headers = {"content-type": "application/json", "content-length": "1234"}
    origin.default = lambda: httpx.Response(200, headers=headers)

    miss = client.head("/report")
    assert miss.headers["x-cache"] == "MISS"
    assert miss.headers["content-length"] == "1234"

    hit = client.head("/report")
    assert hit.headers["x-cache"] == "HIT"
    assert "content-length" not in hit.headers
    assert hit.headers["content-type"] == "application/json"


def test_identity_hit_of_gzipped_entry_varies_on_accept_encoding(client, origin):
    origin.queue(gzip_response(PAYLOAD))
    client.get("/items", headers={"accept-encoding": "gzip"})

    hit = client.get("/items", headers={"accept-encoding": "identity"})

    assert hit.headers["x-cache"] == "HIT"
    assert hit.headers["vary"] == "Accept-Encoding"


def test_corrupt_entry_falls_through_and_is_overwritten(client, origin, file_store):
    """Last write wins: a new miss replaces the entry served afterwards."""
    origin.queue(
        httpx.Response(200, json={"version": 1}),
        httpx.Response(200, json={"version": 2}),
    )
    key = derive_key("GET", "/config", "")

    assert client.get("/config").json() == {"version": 1}
    file_store.path_for(key).write_bytes(b"{not json")

    refetched = client.get("/config")
    assert refetched.headers["x-cache"] == "MISS"
    assert refetched.json() == {"version": 2}

    hit = client.get("/config")
    assert hit.headers["x-cache"] == "HIT"
    assert hit.json() == {"version": 2}


def test_store_write_failure_still_serves_upstream_bytes(settings, origin, forwarder):
    store = InMemoryStore(fail_put=True)
    origin.queue(httpx.Response(200, json={"ok": True}))

    with TestClient(create_app(settings, store=store, forwarder=forwarder)) as client:
        response = client.get("/items")

    assert response.status_code == 200
    assert response.headers["x-cache"] == "MISS"
    assert response.json() == {"ok": True}


def test_store_read_failure_forwards(settings, origin, forwarder):
    store = InMemoryStore(fail_get=True)

    with TestClient(create_app(settings, store=store, forwarder=forwarder)) as client:
        response = client.get("/items")

    assert response.headers["x-cache"] == "MISS"
    assert len(origin.requests) == 1


def test_upstream_failure_returns_bad_gateway(client, origin, file_store):
    origin.error = httpx.ConnectError("connection refused")

    response = client.get("/items")

    assert response.status_code == 502
    assert response.headers["x-cache"] == "MISS"
    assert list(file_store.cache_dir.iterdir()) == []


def test_disposition_is_logged(client, origin, capsys):
    client.get("/items?page=1")
    client.get("/items?page=1")
    client.post("/items")

    out = capsys.readouterr().out
    assert "Cache MISS: GET /items?page=1" in out
    assert "Cache HIT: GET /items?page=1" in out
    assert "No cache (non-idempotent): POST /items" in out


def test_custom_status_header(settings, origin, forwarder, store):
    settings = dataclasses.replace(settings, cache_status_header="X-Proxy-Cache")

    with TestClient(create_app(settings, store=store, forwarder=forwarder)) as client:
        response = client.get("/items")

    assert response.headers["x-proxy-cache"] == "MISS"
    assert "x-cache" not in response.headers


def test_origin_paths_are_not_shadowed(client, origin):
    """Framework docs routes are disabled so every path reaches the origin."""
    client.get("/docs")
    client.get("/openapi.json")
    assert [r.url.path for r in origin.requests] == ["/docs", "/openapi.json"]


def test_default_lifespan_builds_file_store_and_forwarder(settings):
    app = create_app(settings)
    with TestClient(app):
        assert isinstance(app.state.store, FileEntryStore)
        assert isinstance(app.state.forwarder, HttpxForwarder)
        assert app.state.cache_service.store is app.state.store
        assert str(app.state.store.cache_dir) == settings.cache_dir


def test_create_app_rejects_malformed_target(settings):
    bad = dataclasses.replace(settings, target_url="ftp:/nowhere")
    with pytest.raises(ConfigurationError):
        create_app(bad)
