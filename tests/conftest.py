"""Shared fixtures for uup_iso tests.

Provides an in-memory catalog that answers the three lookup endpoints,
usable either directly (as a CatalogClient stand-in) or as a respx side
effect behind a real CatalogClient.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
import respx

from uup_iso.catalog.client import CatalogClient
from uup_iso.config import DEFAULT_API_BASE_URL

API_HOST = "api.uupdump.net"


@dataclass
class FakeBuild:
    """One build known to the fake catalog."""

    uuid: str
    build: str
    title: str
    langs: list[str] = field(default_factory=lambda: ["en-us"])
    ring: str | None = "RETAIL"
    editions: list[str] = field(default_factory=lambda: ["PROFESSIONAL", "CORE"])
    langs_build: str | None = None


class FakeCatalog:
    """In-memory catalog answering listid, listlangs and listeditions."""

    def __init__(self, builds: list[FakeBuild] | None = None) -> None:
        self.builds = builds or []
        self.calls: list[tuple[str, dict[str, str]]] = []

    def _build(self, build_id: str) -> FakeBuild:
        for b in self.builds:
            if b.uuid == build_id:
                return b
        raise KeyError(build_id)

    # CatalogClient-compatible interface

    def list_builds(self, search: str) -> dict[str, Any]:
        self.calls.append(("listid", {"search": search}))
        return {
            "apiVersion": "1.0",
            "builds": {
                b.uuid: {"uuid": b.uuid, "build": b.build, "title": b.title}
                for b in self.builds
            },
        }

    def list_languages(self, build_id: str) -> dict[str, Any]:
        self.calls.append(("listlangs", {"id": build_id}))
        b = self._build(build_id)
        return {
            "langList": list(b.langs),
            "langFancyNames": {lang: lang.upper() for lang in b.langs},
            "updateInfo": {
                "build": b.langs_build if b.langs_build is not None else b.build,
                "ring": b.ring,
                "title": b.title,
            },
        }

    def list_editions(self, build_id: str, lang: str) -> dict[str, Any]:
        self.calls.append(("listeditions", {"id": build_id, "lang": lang}))
        b = self._build(build_id)
        return {
            "editionList": list(b.editions),
            "editionFancyNames": {e: e.title() for e in b.editions},
        }

    def endpoint_calls(self, endpoint: str) -> list[dict[str, str]]:
        """Return the params of every call made to one endpoint."""
        return [params for name, params in self.calls if name == endpoint]

    # respx side effect

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        endpoint = request.url.path.strip("/").removesuffix(".php")
        if endpoint == "listid":
            body = self.list_builds(params["search"])
        elif endpoint == "listlangs":
            body = self.list_languages(params["id"])
        elif endpoint == "listeditions":
            body = self.list_editions(params["id"], params["lang"])
        else:
            return httpx.Response(404)
        return httpx.Response(200, json={"response": body})


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    """Empty fake catalog; tests append builds."""
    return FakeCatalog()


@pytest.fixture
def catalog_client():
    """CatalogClient pointed at the default API host with no retry delay."""
    with CatalogClient(
        base_url=DEFAULT_API_BASE_URL,
        max_attempts=3,
        retry_delay=0,
    ) as client:
        yield client


@pytest.fixture(autouse=True)
def no_leaked_routes():
    """Fail any test that leaves routes on the global respx router."""
    yield
    leaked = list(respx.routes)
    respx.routes.clear()
    assert not leaked, f"routes left on the global respx router: {leaked}"
