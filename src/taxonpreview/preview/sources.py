"""HTTP client for the reference sources used by the resolution chain.

All four calls are read-only GET requests parameterised only by the escaped
subject text or an entity id:

- article markup by title (MediaWiki parse API)
- article summary and thumbnail by title (REST summary API)
- entity search by free text (Wikidata wbsearchentities)
- entity detail by id (Wikidata wbgetentities)
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from taxonpreview.config.models import SourceEndpoints
from taxonpreview.preview.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)


def quote_title(title: str) -> str:
    """Escape a page title for use as a single URL path segment."""
    return quote(title, safe="")


class ReferenceSourceClient:
    """Async client for Wikipedia and Wikidata lookups."""

    def __init__(
        self,
        endpoints: SourceEndpoints | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the source client.

        Args:
            endpoints: Source URLs and request settings
            client: Optional pre-built HTTP client; one is created on start() otherwise
        """
        self.endpoints = endpoints or SourceEndpoints()
        self.client = client
        self._owns_client = client is None

    async def start(self) -> None:
        """Create the HTTP client if none was supplied."""
        if self.client is not None:
            return

        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.endpoints.request_timeout),
            follow_redirects=True,
            headers={"User-Agent": self.endpoints.user_agent},
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
        )
        self._owns_client = True
        logger.info("Reference source client started")

    async def stop(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None
            logger.info("Reference source client stopped")

    async def __aenter__(self) -> "ReferenceSourceClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def fetch_article(self, title: str) -> dict[str, Any] | None:
        """Fetch rendered article markup, following redirects.

        Returns:
            The ``parse`` payload (``title`` and ``text``) or None if there is no article
        """
        data = await self._get_json(
            "article",
            self.endpoints.article_api_url,
            params={
                "action": "parse",
                "page": title,
                "prop": "text",
                "redirects": 1,
                "formatversion": 2,
                "format": "json",
            },
        )
        parsed = data.get("parse") if isinstance(data, dict) else None
        if not isinstance(parsed, dict) or not parsed.get("text"):
            return None
        return parsed

    async def fetch_summary(self, title: str) -> dict[str, Any] | None:
        """Fetch the short page summary, which carries the thumbnail."""
        data = await self._get_json("summary", self.endpoints.summary_api_url + quote_title(title))
        return data if isinstance(data, dict) else None

    async def search_entities(self, text: str) -> list[str]:
        """Search entities by free-text title match.

        Returns:
            Candidate entity ids, best match first
        """
        data = await self._get_json(
            "entity_search",
            self.endpoints.entity_api_url,
            params={
                "action": "wbsearchentities",
                "search": text,
                "language": self.endpoints.language,
                "format": "json",
            },
        )
        hits = data.get("search") if isinstance(data, dict) else None
        if not hits:
            return []
        return [hit["id"] for hit in hits if isinstance(hit, dict) and hit.get("id")]

    async def fetch_entity(self, entity_id: str) -> dict[str, Any] | None:
        """Fetch labels, descriptions and claims for one entity."""
        data = await self._get_json(
            "entity",
            self.endpoints.entity_api_url,
            params={
                "action": "wbgetentities",
                "ids": entity_id,
                "props": "labels|descriptions|claims",
                "languages": self.endpoints.language,
                "format": "json",
            },
        )
        entities = data.get("entities") if isinstance(data, dict) else None
        entity = entities.get(entity_id) if isinstance(entities, dict) else None
        if not isinstance(entity, dict) or "missing" in entity:
            return None
        return entity

    async def _get_json(
        self, endpoint: str, url: str, params: dict[str, Any] | None = None
    ) -> Any:
        """GET a JSON document, mapping every transport problem to SourceUnavailableError."""
        if self.client is None:
            await self.start()
        assert self.client is not None

        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise SourceUnavailableError(endpoint, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise SourceUnavailableError(
                endpoint, f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailableError(endpoint, "invalid JSON body") from e
