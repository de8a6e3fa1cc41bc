import asyncio
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import httpx
import pytest

from taxonpreview.config.models import HoverTiming, PreviewConfig, SourceEndpoints
from taxonpreview.preview.sources import ReferenceSourceClient
from taxonpreview.system.path_resolver import PathResolver

SUMMARY_PREFIX = "/api/rest_v1/page/summary/"

LION_ARTICLE_HTML = """
<div class="mw-parser-output">
  <table class="infobox"><tr><td>Conservation status: Vulnerable</td></tr></table>
  <p><b>Panthera leo</b> is a large cat of the genus <a href="/wiki/Panthera">Panthera</a>.<sup class="reference">[1]</sup> It has a muscular, broad-chested body. It is native to Africa and India.</p>
  <p>Lions live in groups called prides.</p>
</div>
"""


class FakeWikimedia:
    """In-memory stand-in for the Wikipedia and Wikidata endpoints.

    Responses are looked up from the dicts below. Endpoints listed in
    ``failures`` answer 503, and requests whose (endpoint, key) pair has a
    gate wait for that event before answering.
    """

    def __init__(self) -> None:
        self.articles: dict[str, dict[str, Any]] = {}
        self.summaries: dict[str, dict[str, Any]] = {}
        self.search_hits: dict[str, list[str]] = {}
        self.entities: dict[str, dict[str, Any]] = {}
        self.failures: set[str] = set()
        self.gates: dict[tuple[str, str], asyncio.Event] = {}
        self.calls: list[tuple[str, str]] = []

    def add_article(self, title: str, html: str, thumbnail: str | None = None) -> None:
        self.articles[title] = {"title": title, "pageid": 1, "text": html}
        summary: dict[str, Any] = {"title": title, "extract": "..."}
        if thumbnail:
            summary["thumbnail"] = {"source": thumbnail, "width": 320, "height": 213}
        self.summaries[title] = summary

    def gate(self, endpoint: str, key: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[(endpoint, key)] = event
        return event

    def calls_to(self, endpoint: str) -> list[str]:
        return [key for name, key in self.calls if name == endpoint]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint, key = self._route(request)
        self.calls.append((endpoint, key))

        gate = self.gates.get((endpoint, key))
        if gate is not None:
            await gate.wait()

        if endpoint in self.failures:
            return httpx.Response(503, json={"error": "unavailable"})
        return self._respond(endpoint, key)

    def _route(self, request: httpx.Request) -> tuple[str, str]:
        params = request.url.params
        if request.url.path.startswith(SUMMARY_PREFIX):
            return "summary", unquote(request.url.path[len(SUMMARY_PREFIX) :])
        action = params.get("action")
        if action == "parse":
            return "article", params["page"]
        if action == "wbsearchentities":
            return "entity_search", params["search"]
        if action == "wbgetentities":
            return "entity", params["ids"]
        raise AssertionError(f"Unexpected request: {request.url}")

    def _respond(self, endpoint: str, key: str) -> httpx.Response:
        if endpoint == "article":
            if key in self.articles:
                return httpx.Response(200, json={"parse": self.articles[key]})
            return httpx.Response(
                200, json={"error": {"code": "missingtitle", "info": "The page doesn't exist."}}
            )
        if endpoint == "summary":
            if key in self.summaries:
                return httpx.Response(200, json=self.summaries[key])
            return httpx.Response(404, json={"type": "not_found"})
        if endpoint == "entity_search":
            hits = [{"id": entity_id} for entity_id in self.search_hits.get(key, [])]
            return httpx.Response(200, json={"searchinfo": {"search": key}, "search": hits})
        entity = self.entities.get(key, {"id": key, "missing": ""})
        return httpx.Response(200, json={"entities": {key: entity}})


@pytest.fixture
def wikimedia() -> FakeWikimedia:
    """Provide an empty fake Wikimedia backend."""
    return FakeWikimedia()


@pytest.fixture
def lion_wikimedia(wikimedia: FakeWikimedia) -> FakeWikimedia:
    """Provide a fake backend that knows the Panthera leo article."""
    wikimedia.add_article(
        "Panthera leo",
        LION_ARTICLE_HTML,
        thumbnail="https://upload.wikimedia.org/lion.jpg",
    )
    return wikimedia


@pytest.fixture
def endpoints() -> SourceEndpoints:
    return SourceEndpoints()


@pytest.fixture
async def source_client(wikimedia: FakeWikimedia, endpoints: SourceEndpoints):
    """Provide a ReferenceSourceClient wired to the fake backend."""
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(wikimedia.handler), follow_redirects=True
    )
    client = ReferenceSourceClient(endpoints, client=http_client)
    yield client
    await http_client.aclose()


@pytest.fixture
def fast_timing() -> HoverTiming:
    """Short delays so hide transitions complete quickly in tests."""
    return HoverTiming(anchor_grace_ms=30, popup_grace_ms=10, collapse_ms=10)


@pytest.fixture
def test_config() -> PreviewConfig:
    return PreviewConfig()


@pytest.fixture
def path_resolver(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PathResolver:
    """Provide a PathResolver whose writable paths live under tmp_path."""
    monkeypatch.setenv("TAXONPREVIEW_DATA", str(tmp_path / "data"))
    monkeypatch.delenv("TAXONPREVIEW_CONFIG", raising=False)
    return PathResolver()
