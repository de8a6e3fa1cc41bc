"""Fallback chain turning a scientific name into a preview.

Stages are tried strictly in order and the first that produces a result wins:

1. Article: article markup and summary fetched concurrently; the markup is
   reduced to a snippet, the summary only contributes the thumbnail.
2. Entity search: free-text search of the knowledge base.
3. Entity detail: label, description and image of the first search hit.
4. No entry: link to the companion species site. Always succeeds, so the popup
   never stays in a loading or error state.

A failing stage is logged and falls through. A cancelled attempt never falls
through: the caller has already moved on to a newer request.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from taxonpreview.config.models import SourceEndpoints
from taxonpreview.preview.coordinator import CancellationToken, RequestCoordinator
from taxonpreview.preview.exceptions import SourceUnavailableError
from taxonpreview.preview.extractor import extract_snippet
from taxonpreview.preview.models import (
    ArticleSummary,
    EntitySummary,
    NoEntry,
    PreviewSubject,
    ResolutionResult,
)
from taxonpreview.preview.sources import ReferenceSourceClient, quote_title

logger = logging.getLogger(__name__)

T = TypeVar("T")

IMAGE_PROPERTY = "P18"
DEFAULT_LABEL = "Unknown"
DEFAULT_DESCRIPTION = "No description available."


class SourceResolver:
    """Runs the fallback chain for one subject at a time."""

    def __init__(
        self,
        client: ReferenceSourceClient,
        coordinator: RequestCoordinator | None = None,
    ) -> None:
        self.client = client
        self.coordinator = coordinator or RequestCoordinator()

    @property
    def endpoints(self) -> SourceEndpoints:
        return self.client.endpoints

    async def resolve(
        self, subject: PreviewSubject, token: CancellationToken | None = None
    ) -> ResolutionResult | None:
        """Resolve ``subject`` through the fallback chain.

        Args:
            subject: Scientific name, used literally as page title and search text
            token: Generation token for this attempt; a new one is begun if omitted

        Returns:
            The first successful stage's result, or None if the attempt was
            superseded before it finished.
        """
        if token is None:
            token = self.coordinator.begin()

        article = await self._article_stage(subject)
        if not self.coordinator.is_live(token):
            return None
        if article is not None:
            return article

        entity_id = await self._entity_search_stage(subject)
        if not self.coordinator.is_live(token):
            return None

        if entity_id is not None:
            entity = await self._entity_detail_stage(entity_id)
            if not self.coordinator.is_live(token):
                return None
            if entity is not None:
                return entity

        return self.no_entry(subject)

    async def _article_stage(self, subject: PreviewSubject) -> ArticleSummary | None:
        article, summary = await asyncio.gather(
            self._attempt("article", self.client.fetch_article(subject)),
            self._attempt("summary", self.client.fetch_summary(subject)),
        )
        if article is None:
            return None

        title = article.get("title") or subject
        return ArticleSummary(
            title=title,
            snippet_html=extract_snippet(article["text"], self.endpoints.article_site_url),
            canonical_url=self.endpoints.article_base_url + quote_title(title),
            image_url=self._thumbnail_url(summary),
        )

    async def _entity_search_stage(self, subject: PreviewSubject) -> str | None:
        entity_ids = await self._attempt("entity_search", self.client.search_entities(subject))
        if not entity_ids:
            return None
        return entity_ids[0]

    async def _entity_detail_stage(self, entity_id: str) -> EntitySummary | None:
        entity = await self._attempt("entity", self.client.fetch_entity(entity_id))
        if entity is None:
            return None

        language = self.endpoints.language
        label = _localized(entity.get("labels"), language) or DEFAULT_LABEL
        description = _localized(entity.get("descriptions"), language) or DEFAULT_DESCRIPTION
        return EntitySummary(
            label=label,
            description=description,
            canonical_url=self.endpoints.entity_base_url + entity_id,
            image_url=self._entity_image_url(entity),
        )

    def no_entry(self, subject: PreviewSubject) -> NoEntry:
        """Build the terminal fallback for ``subject``."""
        return NoEntry(
            subject=subject,
            wikispecies_url=self.endpoints.species_base_url + quote_title(subject),
        )

    async def _attempt(self, stage: str, call: Awaitable[T]) -> T | None:
        """Await one source call, turning a transport failure into a fallthrough."""
        try:
            return await call
        except SourceUnavailableError as e:
            logger.warning("Preview source %s failed: %s", stage, e.reason)
            return None

    def _thumbnail_url(self, summary: dict[str, Any] | None) -> str | None:
        if not summary:
            return None
        thumbnail = summary.get("thumbnail")
        if isinstance(thumbnail, dict) and thumbnail.get("source"):
            return thumbnail["source"]
        return None

    def _entity_image_url(self, entity: dict[str, Any]) -> str | None:
        claims = entity.get("claims") or {}
        statements = claims.get(IMAGE_PROPERTY) or []
        if not statements:
            return None

        try:
            filename = statements[0]["mainsnak"]["datavalue"]["value"]
        except (KeyError, TypeError):
            # Statements with "novalue" or "somevalue" snaks carry no datavalue
            return None

        return (
            f"{self.endpoints.media_file_url}{quote_title(filename)}"
            f"?width={self.endpoints.image_width}"
        )


def _localized(values: Any, language: str) -> str | None:
    if not isinstance(values, dict):
        return None
    entry = values.get(language)
    if isinstance(entry, dict):
        return entry.get("value") or None
    return None
