"""Health probe response models."""

from pydantic import BaseModel, Field


class LivenessProbeResponse(BaseModel):
    """Response for the liveness probe."""

    status: str = Field(..., description="Liveness status (alive)")
    version: str = Field(..., description="taxonpreview version")


class ReadinessProbeResponse(BaseModel):
    """Response for the readiness probe."""

    status: str = Field(..., description="Readiness status (ready/not_ready)")
    client_started: bool = Field(..., description="Whether the shared HTTP client is open")
    sources: dict[str, str] = Field(
        ..., description="Endpoint queried by each stage of the resolution chain"
    )
