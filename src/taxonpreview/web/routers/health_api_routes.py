"""Health check endpoints for monitoring service status."""

from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response

from taxonpreview import __version__
from taxonpreview.preview.sources import ReferenceSourceClient
from taxonpreview.web.core.container import Container
from taxonpreview.web.models.health import LivenessProbeResponse, ReadinessProbeResponse

router = APIRouter(prefix="/health")


@router.get("/live", response_model=LivenessProbeResponse)
async def liveness_probe() -> LivenessProbeResponse:
    """Liveness probe: the process is serving requests."""
    return LivenessProbeResponse(status="alive", version=__version__)


@router.get("/ready", response_model=ReadinessProbeResponse)
@inject
async def readiness_probe(
    response: Response,
    client: Annotated[ReferenceSourceClient, Depends(Provide[Container.source_client])],
) -> ReadinessProbeResponse:
    """Readiness probe: previews can be resolved once the shared client is open.

    Returns 503 until the application lifespan has started the client. The
    reference sources themselves are not contacted.
    """
    endpoints = client.endpoints
    started = client.client is not None
    if not started:
        response.status_code = 503

    return ReadinessProbeResponse(
        status="ready" if started else "not_ready",
        client_started=started,
        sources={
            "article": endpoints.article_api_url,
            "summary": endpoints.summary_api_url,
            "entity": endpoints.entity_api_url,
            "no_entry": endpoints.species_base_url,
        },
    )
