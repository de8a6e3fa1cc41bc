"""Configuration models for taxonpreview.

This module contains all configuration-related Pydantic models used throughout the application.
"""

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "taxonpreview"})


class SourceEndpoints(BaseModel):
    """External reference sources queried by the resolution chain."""

    article_api_url: str = "https://en.wikipedia.org/w/api.php"
    summary_api_url: str = "https://en.wikipedia.org/api/rest_v1/page/summary/"
    article_base_url: str = "https://en.wikipedia.org/wiki/"
    article_site_url: str = "https://en.wikipedia.org"  # Prefix for relative links in articles
    entity_api_url: str = "https://www.wikidata.org/w/api.php"
    entity_base_url: str = "https://www.wikidata.org/wiki/"
    media_file_url: str = "https://commons.wikimedia.org/wiki/Special:FilePath/"
    species_base_url: str = "https://species.wikimedia.org/wiki/"
    language: str = "en"
    image_width: int = 300  # Thumbnail width requested for entity images
    request_timeout: float = 10.0  # Seconds, applied by the HTTP transport
    user_agent: str = "taxonpreview/1.0 (scientific name hover previews)"

    @field_validator(
        "article_base_url",
        "summary_api_url",
        "entity_base_url",
        "media_file_url",
        "species_base_url",
    )
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Base URLs are joined with a path segment so they must end with a slash."""
        if not v.endswith("/"):
            raise ValueError(f"Base URL '{v}' must end with '/'")
        return v


class HoverTiming(BaseModel):
    """Hide grace periods and collapse delay, in milliseconds."""

    anchor_grace_ms: int = 300  # Wait after leaving the anchor before trying to hide
    popup_grace_ms: int = 100  # Wait after leaving the popup itself
    collapse_ms: int = 150  # Exit transition before the popup is detached

    @field_validator("anchor_grace_ms", "popup_grace_ms", "collapse_ms")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate delays are positive."""
        if v <= 0:
            raise ValueError(f"Delay must be positive, got {v}")
        return v

    @property
    def anchor_grace(self) -> float:
        """Anchor grace period in seconds."""
        return self.anchor_grace_ms / 1000

    @property
    def popup_grace(self) -> float:
        """Popup grace period in seconds."""
        return self.popup_grace_ms / 1000

    @property
    def collapse(self) -> float:
        """Collapse delay in seconds."""
        return self.collapse_ms / 1000


class PlacementConfig(BaseModel):
    """Popup placement constants, in CSS pixels."""

    gap: int = 15  # Distance between anchor and popup
    edge_margin: int = 10  # Space kept free at the right viewport edge
    fallback_width: int = 550  # Used until the popup can be measured
    fallback_height: int = 150


class PreviewConfig(BaseModel):
    """Configuration settings for the taxonpreview application."""

    # Version tracking
    config_version: str = "1.0.0"

    # Logging settings
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Resolution chain
    sources: SourceEndpoints = Field(default_factory=SourceEndpoints)

    # Popup behaviour
    timing: HoverTiming = Field(default_factory=HoverTiming)
    placement: PlacementConfig = Field(default_factory=PlacementConfig)
