#!/usr/bin/env python3
"""
Demo script for the caching proxy.

Runs the proxy in-process against a simulated gzip-speaking origin and shows
the MISS / HIT / SKIP flow and gzip renegotiation. No network access needed.
"""

import gzip
import json
import tempfile
from collections.abc import AsyncIterator

import httpx
from fastapi.testclient import TestClient

from caching_proxy.api.app import create_app
from caching_proxy.config import Settings
from caching_proxy.repositories import FileEntryStore, HttpxForwarder

ORIGIN_URL = "http://origin.demo"


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


class OriginBody(httpx.AsyncByteStream):
    """An origin response body, sent as one chunk."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield self._data


def origin_handler(request: httpx.Request) -> httpx.Response:
    """A tiny origin: gzips JSON for clients that ask for it."""
    body = json.dumps({"path": request.url.path, "method": request.method}).encode()
    headers = {"content-type": "application/json"}
    if "gzip" in request.headers.get("accept-encoding", ""):
        body = gzip.compress(body)
        headers["content-encoding"] = "gzip"
    headers["content-length"] = str(len(body))
    return httpx.Response(200, headers=headers, stream=OriginBody(body))


def show(label: str, response: httpx.Response) -> None:
    print(
        f"  {label:<32} status={response.status_code} "
        f"x-cache={response.headers.get('x-cache')} "
        f"content-encoding={response.headers.get('content-encoding', '-')}"
    )


def main() -> None:
    with tempfile.TemporaryDirectory() as cache_dir:
        settings = Settings(target_url=ORIGIN_URL, cache_dir=cache_dir, cache_backend="file")
        forwarder = HttpxForwarder(target_url=ORIGIN_URL, transport=httpx.MockTransport(origin_handler))
        app = create_app(settings, store=FileEntryStore(cache_dir), forwarder=forwarder)

        with TestClient(app) as client:
            print_section("Cacheable requests")
            show("GET /items (gzip)", client.get("/items", headers={"accept-encoding": "gzip"}))
            show("GET /items (gzip)", client.get("/items", headers={"accept-encoding": "gzip"}))
            show("GET /items (identity)", client.get("/items", headers={"accept-encoding": "identity"}))

            print_section("Non-idempotent requests")
            show("POST /items", client.post("/items", json={"name": "widget"}))
            show("POST /items", client.post("/items", json={"name": "widget"}))

        print_section("Cache directory")
        store = FileEntryStore(cache_dir)
        for path in sorted(store.cache_dir.iterdir()):
            print(f"  {path.name}: {path.read_text()}")


if __name__ == "__main__":
    main()
