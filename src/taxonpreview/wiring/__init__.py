"""Page wiring package.

This package connects pages to the preview engine:
- clean_scientific_name: Taxon label to scientific name
- LinkInjector: Adds preview links to taxon containers
- AnchorBinding: Forwards link hover events to the controller
"""

from taxonpreview.wiring.binding import AnchorBinding, bind_links
from taxonpreview.wiring.links import AugmentResult, Layout, LinkInjector, TaxonLink
from taxonpreview.wiring.names import clean_scientific_name

__all__ = [
    "AnchorBinding",
    "AugmentResult",
    "Layout",
    "LinkInjector",
    "TaxonLink",
    "bind_links",
    "clean_scientific_name",
]
