"""Forwarding of pointer events on injected links to the hover controller."""

from dataclasses import dataclass

from taxonpreview.preview.controller import HoverSessionController
from taxonpreview.preview.models import Rect, Viewport
from taxonpreview.wiring.links import TaxonLink


@dataclass
class AnchorBinding:
    """Connects one injected link to the popup controller."""

    link: TaxonLink
    controller: HoverSessionController

    def on_enter(self, anchor_rect: Rect, viewport: Viewport) -> None:
        self.controller.anchor_enter(anchor_rect, self.link.name, viewport)

    def on_leave(self) -> None:
        self.controller.anchor_leave()


def bind_links(
    links: list[TaxonLink], controller: HoverSessionController
) -> list[AnchorBinding]:
    """Bind every injected link to the same controller, one popup per page."""
    return [AnchorBinding(link=link, controller=controller) for link in links]
