"""Preview API request and response models."""

from pydantic import BaseModel, Field

from taxonpreview.preview.models import (
    ArticleSummary,
    EntitySummary,
    NoEntry,
    ResolutionResult,
    ResultKind,
)
from taxonpreview.preview.surface import ARTICLE_LINK_TEXT, ENTITY_LINK_TEXT, SPECIES_LINK_TEXT


class OutboundLink(BaseModel):
    """Labelled link shown below or inside the preview."""

    text: str = Field(..., description="Link label")
    url: str = Field(..., description="Link destination")


class PreviewResponse(BaseModel):
    """Resolved preview for one scientific name."""

    subject: str = Field(..., description="Scientific name that was resolved")
    kind: ResultKind = Field(..., description="Which stage of the fallback chain answered")
    heading: str = Field(..., description="Article title, entity label or the subject itself")
    body_html: str = Field(..., description="Snippet or description markup")
    image_url: str | None = Field(None, description="Thumbnail URL if one is available")
    footer_link: OutboundLink | None = Field(
        None, description="Outbound link; absent for the no-entry fallback"
    )
    inline_link: OutboundLink | None = Field(
        None, description="Companion site link embedded in the body for the no-entry fallback"
    )

    @classmethod
    def from_result(cls, subject: str, result: ResolutionResult) -> "PreviewResponse":
        """Build the response for a resolution result."""
        if isinstance(result, ArticleSummary):
            return cls(
                subject=subject,
                kind=result.kind,
                heading=result.title,
                body_html=result.snippet_html,
                image_url=result.image_url,
                footer_link=OutboundLink(text=ARTICLE_LINK_TEXT, url=result.canonical_url),
            )
        if isinstance(result, EntitySummary):
            return cls(
                subject=subject,
                kind=result.kind,
                heading=result.label,
                body_html=result.description,
                image_url=result.image_url,
                footer_link=OutboundLink(text=ENTITY_LINK_TEXT, url=result.canonical_url),
            )
        if isinstance(result, NoEntry):
            return cls(
                subject=subject,
                kind=result.kind,
                heading=result.subject,
                body_html="",
                inline_link=OutboundLink(
                    text=SPECIES_LINK_TEXT, url=result.wikispecies_url
                ),
            )
        raise TypeError(f"Unsupported resolution result: {result!r}")


class AugmentRequest(BaseModel):
    """Page markup to add preview links to."""

    html: str = Field(..., description="HTML document or fragment")


class InjectedLink(BaseModel):
    """One link added by the augment endpoint."""

    name: str
    href: str
    layout: str
    inline: bool


class AugmentResponse(BaseModel):
    """Augmented markup and the links that were added."""

    html: str
    links: list[InjectedLink] = Field(default_factory=list)
