"""Popup placement next to the hovered anchor."""

import math

from taxonpreview.config.models import PlacementConfig
from taxonpreview.preview.models import Placement, Rect, Viewport


def _round(value: float) -> int:
    # Half-up rounding, matching how browsers round pixel offsets
    return math.floor(value + 0.5)


def compute_placement(
    anchor: Rect,
    popup_size: tuple[float, float] | None,
    viewport: Viewport,
    config: PlacementConfig | None = None,
) -> Placement:
    """Compute page coordinates for the popup.

    The popup goes to the right of the anchor unless its right edge would pass
    ``viewport.width - edge_margin``, in which case it flips to the left. It is
    centred vertically on the anchor with no vertical clamping.

    Args:
        anchor: Viewport-relative anchor rectangle
        popup_size: Measured (width, height); zero or missing values use the fallback size
        viewport: Viewport width and scroll offsets
        config: Gap, edge margin and fallback size

    Returns:
        Placement with absolute page coordinates
    """
    config = config or PlacementConfig()
    width, height = popup_size or (0, 0)
    width = width or config.fallback_width
    height = height or config.fallback_height

    left = anchor.right + viewport.scroll_x + config.gap
    side = "right"
    if anchor.right + config.gap + width > viewport.width - config.edge_margin:
        left = anchor.left + viewport.scroll_x - config.gap - width
        side = "left"

    top = anchor.top + viewport.scroll_y + anchor.height / 2 - height / 2
    return Placement(left=_round(left), top=_round(top), side=side)
