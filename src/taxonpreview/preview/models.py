"""Data models for the preview resolution engine.

Resolution results are a tagged union of three immutable shapes, built once per
successful resolution and consumed immediately by the render step:

- ArticleSummary: an encyclopedia article was found and summarised
- EntitySummary: no article, but the knowledge base has a matching entity
- NoEntry: nothing found; link to the companion species site instead
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

# The scientific name a popup is currently resolving or displaying
PreviewSubject = str

NO_SUMMARY_MARKER = "No summary text available."


class ResultKind(str, Enum):
    """Discriminator for the resolution result union."""

    ARTICLE = "article"
    ENTITY = "entity"
    NO_ENTRY = "no_entry"


@dataclass(frozen=True)
class ArticleSummary:
    """Summary built from an encyclopedia article."""

    title: str
    snippet_html: str
    canonical_url: str
    image_url: str | None = None

    kind = ResultKind.ARTICLE

    @property
    def has_summary(self) -> bool:
        """Whether the extractor found any qualifying sentence."""
        return self.snippet_html != NO_SUMMARY_MARKER


@dataclass(frozen=True)
class EntitySummary:
    """Summary built from a structured knowledge base entity."""

    label: str
    description: str
    canonical_url: str
    image_url: str | None = None

    kind = ResultKind.ENTITY


@dataclass(frozen=True)
class NoEntry:
    """Terminal fallback when no reference source knows the subject."""

    subject: PreviewSubject
    wikispecies_url: str

    kind = ResultKind.NO_ENTRY


ResolutionResult = ArticleSummary | EntitySummary | NoEntry


class Rect(NamedTuple):
    """Viewport-relative bounding rectangle of an anchor element."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


class Viewport(NamedTuple):
    """Visible area size and current scroll offsets."""

    width: float
    height: float
    scroll_x: float = 0.0
    scroll_y: float = 0.0


class Placement(NamedTuple):
    """Absolute page coordinates for the popup."""

    left: int
    top: int
    side: str  # "right" or "left" of the anchor


class PopupState(str, Enum):
    """Visibility states of the hover session."""

    HIDDEN = "hidden"
    SHOWING = "showing"
    VISIBLE = "visible"
    HIDE_GRACE = "hide_grace"


@dataclass
class PreviewSession:
    """Mutable hover state owned by exactly one HoverSessionController.

    ``loaded`` is only ever true for the current ``subject``; switching subject
    resets it until a new render completes.
    """

    subject: PreviewSubject | None = None
    loaded: bool = False
    link_hover: bool = False
    popup_hover: bool = False
    pending_hide_timer: asyncio.TimerHandle | None = field(default=None, repr=False)
    pending_show_debounce: asyncio.Handle | None = field(default=None, repr=False)

    @classmethod
    def create(cls) -> "PreviewSession":
        """Create a fresh session for one popup surface."""
        return cls()

    @property
    def hovered(self) -> bool:
        """Whether the pointer is over the anchor or the popup."""
        return self.link_hover or self.popup_hover

    def cancel_hide_timer(self) -> None:
        if self.pending_hide_timer is not None:
            self.pending_hide_timer.cancel()
            self.pending_hide_timer = None

    def cancel_show_debounce(self) -> None:
        if self.pending_show_debounce is not None:
            self.pending_show_debounce.cancel()
            self.pending_show_debounce = None

    def clear_subject(self) -> None:
        """Forget the displayed subject after a full hide."""
        self.subject = None
        self.loaded = False

    def reset_occupancy(self) -> None:
        """Mark neither the anchor nor the popup as hovered."""
        self.link_hover = False
        self.popup_hover = False

    def dispose(self) -> None:
        """Release all timers and reset occupancy."""
        self.cancel_hide_timer()
        self.cancel_show_debounce()
        self.reset_occupancy()
        self.clear_subject()
