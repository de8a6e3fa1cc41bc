"""Injection of preview links into taxon name containers.

Pages list taxa inside ``inat-taxon`` elements or ``.SplitTaxon`` containers.
Each container gets one Wikipedia icon link placed after its name element;
where that element is depends on the layout the container sits in. Injected
links carry ``data-processed="true"`` so augmenting a page twice leaves it
unchanged.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from bs4 import BeautifulSoup, Tag

from taxonpreview.config.models import SourceEndpoints
from taxonpreview.preview.sources import quote_title
from taxonpreview.wiring.names import clean_scientific_name

logger = logging.getLogger(__name__)

LINK_CLASS = "inat-wiki-link"
CONTAINER_SELECTOR = "inat-taxon, .SplitTaxon"
PROCESSED_SELECTOR = f'.{LINK_CLASS}[data-processed="true"]'
NAME_SELECTORS = (".sciname", ".display-name.sciname", ".secondary-name .sciname")
ICON_URL = "https://upload.wikimedia.org/wikipedia/commons/5/5a/Wikipedia%27s_W.svg"


class Layout(str, Enum):
    """Where a taxon container sits on the page."""

    ACTIVITY = "activity"
    GRID = "grid"
    SPLIT_TAXON = "split_taxon"
    DEFAULT = "default"


@dataclass(frozen=True)
class TaxonLink:
    """One injected preview link."""

    name: str
    href: str
    layout: Layout
    inline: bool


@dataclass
class AugmentResult:
    """Augmented page markup and the links added to it."""

    html: str
    links: list[TaxonLink] = field(default_factory=list)


def _has_class(tag: Tag, class_name: str) -> bool:
    return class_name in (tag.get("class") or [])


def _closest(tag: Tag, class_name: str) -> Tag | None:
    """Nearest element, the tag itself included, carrying ``class_name``."""
    if _has_class(tag, class_name):
        return tag
    return tag.find_parent(class_=class_name)


def _add_style(tag: Tag, declarations: str) -> None:
    existing = (tag.get("style") or "").strip()
    if existing and not existing.endswith(";"):
        existing += ";"
    tag["style"] = f"{existing} {declarations}".strip()


def make_inline(tag: Tag) -> None:
    """Keep a name element and the link after it on one line."""
    _add_style(tag, "display: inline; white-space: nowrap;")


def build_anchor(soup: BeautifulSoup, href: str, inline: bool = False) -> Tag:
    """Build the Wikipedia icon link.

    Args:
        soup: Document the link will be inserted into
        href: Article URL opened on click
        inline: Smaller icon without left margin, for inline layouts
    """
    size = "1.4em" if inline else "2.0em"
    margin = "0em" if inline else "0.3em"

    link = soup.new_tag(
        "a",
        href=href,
        target="_blank",
        title="",
        style="text-decoration: none !important; border-bottom: none !important;",
        attrs={"class": [LINK_CLASS], "data-processed": "true"},
    )
    icon = soup.new_tag(
        "span",
        style=(
            f"display: inline-block; width: {size}; height: {size}; background: white; "
            "border: 1.5px solid #3366cc; border-radius: 20%; padding: 0.1em; "
            f"vertical-align: middle; margin-left: {margin}; line-height: 0; "
            "box-sizing: border-box;"
        ),
    )
    icon.append(
        soup.new_tag("img", src=ICON_URL, style="width: 100%; height: 100%; display: block;")
    )
    link.append(icon)
    return link


class LinkInjector:
    """Adds preview links to every unprocessed taxon container in a page."""

    def __init__(self, endpoints: SourceEndpoints | None = None) -> None:
        self.endpoints = endpoints or SourceEndpoints()

    def augment(self, html: str) -> AugmentResult:
        """Return ``html`` with preview links injected."""
        soup = BeautifulSoup(html, "html.parser")
        links = self.inject(soup)
        return AugmentResult(html=str(soup), links=links)

    def inject(self, soup: BeautifulSoup) -> list[TaxonLink]:
        """Inject links into ``soup`` in place.

        Returns:
            The links added, in document order
        """
        links = []
        for container in soup.select(CONTAINER_SELECTOR):
            if container.select_one(PROCESSED_SELECTOR) is not None:
                continue

            name = clean_scientific_name(self._name_text(container))
            if name is None:
                continue

            layout = self._classify(container)
            inline = layout in (Layout.ACTIVITY, Layout.GRID)
            href = self.endpoints.article_base_url + quote_title(name)
            self._place(container, layout, build_anchor(soup, href, inline))
            links.append(TaxonLink(name=name, href=href, layout=layout, inline=inline))

        if links:
            logger.info("Injected %d preview link(s)", len(links))
        return links

    def _name_text(self, container: Tag) -> str | None:
        for selector in NAME_SELECTORS:
            element = container.select_one(selector)
            if element is not None:
                return element.get_text()
        return None

    def _classify(self, container: Tag) -> Layout:
        if _closest(container, "ActivityItem") is not None:
            return Layout.ACTIVITY
        if _has_class(container, "title") and _closest(container, "thumbnail") is not None:
            return Layout.GRID
        if _has_class(container, "SplitTaxon"):
            return Layout.SPLIT_TAXON
        return Layout.DEFAULT

    def _place(self, container: Tag, layout: Layout, link: Tag) -> None:
        if layout == Layout.ACTIVITY:
            target = container.select_one(".sciname.display-name") or container.select_one(
                ".comname"
            )
        elif layout == Layout.GRID:
            target = container.select_one(".display-name.comname") or container.select_one(
                ".display-name.sciname"
            )
            if target is not None:
                make_inline(target)
        elif layout == Layout.SPLIT_TAXON:
            target = container.select_one(".sciname.display-name")
        else:
            target = None

        if target is not None:
            target.insert_after(link)
        else:
            container.append(link)
