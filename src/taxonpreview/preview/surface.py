"""Popup rendering surface.

The controller drives the popup only through the RenderSurface protocol.
PopupSurface is an in-memory model of the popup element: its display and
visibility flags, body markup, image and footer link. Markup is produced from
the Jinja2 templates shipped in ``taxonpreview/templates``.
"""

from typing import Protocol

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from taxonpreview.preview.models import (
    ArticleSummary,
    EntitySummary,
    NoEntry,
    Placement,
    ResolutionResult,
)

LOADING_TEXT = "Loading preview..."
ARTICLE_LINK_TEXT = "Read full article on Wikipedia ↗"
ENTITY_LINK_TEXT = "See more on Wikidata ↗"
SPECIES_LINK_TEXT = "Check for an entry on Wikispecies ↗"


def create_template_environment() -> Environment:
    """Create the Jinja2 environment for popup templates."""
    return Environment(
        loader=PackageLoader("taxonpreview", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


class RenderSurface(Protocol):
    """Outbound interface from the hover controller to the popup."""

    def attach(self) -> None:
        """Make the popup part of the page, still transparent."""

    def show_loading(self) -> None:
        """Replace the content with the loading placeholder."""

    def render(self, result: ResolutionResult) -> None:
        """Display a resolution result."""

    def reveal(self, placement: Placement) -> None:
        """Move the popup to ``placement`` and apply visible styling."""

    def conceal(self) -> None:
        """Remove visible styling so the exit transition can play."""

    def detach(self) -> None:
        """Remove the popup from the page and restore footer defaults."""

    def measure(self) -> tuple[float, float] | None:
        """Rendered (width, height), or None if not measurable yet."""


class PopupSurface:
    """In-memory popup element rendered with Jinja2."""

    def __init__(self, environment: Environment | None = None) -> None:
        self.environment = environment or create_template_environment()
        self.size: tuple[float, float] | None = None
        self.displayed = False
        self.visible = False
        self.placement: Placement | None = None
        self.render_count = 0
        self._reset_content()

    def _reset_content(self) -> None:
        self.content_html = self._render_content(loading=True)
        self.image_url: str | None = None
        self.image_link: str | None = None
        self.footer_visible = True
        self.footer_link_url = "#"
        self.footer_link_text = ARTICLE_LINK_TEXT
        self.scroll_top = 0

    def attach(self) -> None:
        self.displayed = True
        self.visible = False

    def show_loading(self) -> None:
        self._reset_content()

    def render(self, result: ResolutionResult) -> None:
        if isinstance(result, ArticleSummary):
            self._set_footer(ARTICLE_LINK_TEXT, result.canonical_url)
            self._set_image(result.image_url, result.canonical_url)
        elif isinstance(result, EntitySummary):
            self._set_footer(ENTITY_LINK_TEXT, result.canonical_url)
            self._set_image(result.image_url, result.canonical_url)
        elif isinstance(result, NoEntry):
            self._set_image(None, None)
            self.footer_visible = False
        else:
            raise TypeError(f"Unsupported resolution result: {result!r}")

        self.content_html = self._render_content(result=result)
        self.scroll_top = 0
        self.render_count += 1

    def reveal(self, placement: Placement) -> None:
        self.placement = placement
        self.visible = True

    def conceal(self) -> None:
        self.visible = False

    def detach(self) -> None:
        self.displayed = False
        self.visible = False
        self._set_footer(ARTICLE_LINK_TEXT, "#")

    def measure(self) -> tuple[float, float] | None:
        return self.size

    def to_html(self) -> str:
        """Render the complete popup element."""
        template = self.environment.get_template("popup.html.j2")
        return template.render(popup=self)

    def _set_footer(self, text: str, url: str) -> None:
        self.footer_visible = True
        self.footer_link_text = text
        self.footer_link_url = url

    def _set_image(self, image_url: str | None, link: str | None) -> None:
        self.image_url = image_url
        self.image_link = link if image_url else None

    def _render_content(
        self, result: ResolutionResult | None = None, loading: bool = False
    ) -> Markup:
        template = self.environment.get_template("popup_content.html.j2")
        return Markup(
            template.render(
                result=result,
                loading=loading,
                loading_text=LOADING_TEXT,
                species_link_text=SPECIES_LINK_TEXT,
            ).strip()
        )
