"""Preview endpoints used by pages to fill hover popups."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import HTMLResponse
from jinja2 import Environment
from structlog.contextvars import bound_contextvars

from taxonpreview.preview.models import ResolutionResult
from taxonpreview.preview.resolver import SourceResolver
from taxonpreview.preview.sources import ReferenceSourceClient
from taxonpreview.preview.surface import PopupSurface
from taxonpreview.web.core.container import Container
from taxonpreview.web.models.preview import (
    AugmentRequest,
    AugmentResponse,
    InjectedLink,
    PreviewResponse,
)
from taxonpreview.wiring.links import LinkInjector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/preview")
pages_router = APIRouter(prefix="/pages")


def clean_subject(
    subject: Annotated[str, Path(min_length=1, max_length=200, description="Scientific name")],
) -> str:
    """Reject names that are blank once surrounding whitespace is removed."""
    subject = subject.strip()
    if not subject:
        raise HTTPException(status_code=422, detail="Scientific name must not be blank")
    return subject


Subject = Annotated[str, Depends(clean_subject)]


async def _resolve(client: ReferenceSourceClient, subject: str) -> ResolutionResult:
    # Each request is a single attempt with its own coordinator, so it is never superseded
    resolver = SourceResolver(client)
    with bound_contextvars(subject=subject):
        result = await resolver.resolve(subject)
    if result is None:
        return resolver.no_entry(subject)
    return result


@router.get("/{subject}", response_model=PreviewResponse)
@inject
async def get_preview(
    subject: Subject,
    client: Annotated[ReferenceSourceClient, Depends(Provide[Container.source_client])],
) -> PreviewResponse:
    """Resolve the preview for a scientific name.

    Unknown names resolve to the no-entry fallback rather than an error.
    """
    result = await _resolve(client, subject)
    logger.info("Resolved %s preview for %s", result.kind.value, subject)
    return PreviewResponse.from_result(subject, result)


@router.get("/{subject}/card", response_class=HTMLResponse)
@inject
async def get_preview_card(
    subject: Subject,
    client: Annotated[ReferenceSourceClient, Depends(Provide[Container.source_client])],
    templates: Annotated[Environment, Depends(Provide[Container.templates])],
) -> HTMLResponse:
    """Render the popup card markup for a scientific name."""
    result = await _resolve(client, subject)

    surface = PopupSurface(environment=templates)
    surface.attach()
    surface.render(result)
    return HTMLResponse(surface.to_html())


@pages_router.post("/augment", response_model=AugmentResponse)
@inject
async def augment_page(
    request: AugmentRequest,
    injector: Annotated[LinkInjector, Depends(Provide[Container.link_injector])],
) -> AugmentResponse:
    """Add preview links to the taxon names in a page."""
    augmented = injector.augment(request.html)
    return AugmentResponse(
        html=augmented.html,
        links=[
            InjectedLink(
                name=link.name, href=link.href, layout=link.layout.value, inline=link.inline
            )
            for link in augmented.links
        ],
    )
