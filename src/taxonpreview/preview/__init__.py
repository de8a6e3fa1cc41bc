"""Preview resolution engine.

This package contains the hover preview core:
- HoverSessionController: Hover/visibility state machine
- SourceResolver: Wikipedia -> Wikidata -> Wikispecies fallback chain
- RequestCoordinator: Generation tokens for cancelling superseded requests
- extract_snippet: Article markup to bounded snippet
- compute_placement: Viewport-aware popup positioning
"""

from taxonpreview.preview.controller import HoverSessionController
from taxonpreview.preview.coordinator import CancellationToken, RequestCoordinator
from taxonpreview.preview.exceptions import SourceUnavailableError
from taxonpreview.preview.extractor import extract_snippet
from taxonpreview.preview.models import (
    NO_SUMMARY_MARKER,
    ArticleSummary,
    EntitySummary,
    NoEntry,
    Placement,
    PopupState,
    PreviewSession,
    Rect,
    ResolutionResult,
    Viewport,
)
from taxonpreview.preview.placement import compute_placement
from taxonpreview.preview.resolver import SourceResolver
from taxonpreview.preview.sources import ReferenceSourceClient
from taxonpreview.preview.surface import PopupSurface, RenderSurface

__all__ = [
    "NO_SUMMARY_MARKER",
    "ArticleSummary",
    "CancellationToken",
    "EntitySummary",
    "HoverSessionController",
    "NoEntry",
    "Placement",
    "PopupState",
    "PopupSurface",
    "PreviewSession",
    "Rect",
    "ReferenceSourceClient",
    "RenderSurface",
    "RequestCoordinator",
    "ResolutionResult",
    "SourceResolver",
    "SourceUnavailableError",
    "Viewport",
    "compute_placement",
    "extract_snippet",
]
