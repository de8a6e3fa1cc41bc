"""Article markup to popup snippet extraction.

The popup has room for a couple of sentences, so the extractor takes the first
two prose sentences of the article and caps the visible text at 350 characters.
Sentence splitting is deliberately naive: no abbreviation handling.
"""

import logging
import re

from bs4 import BeautifulSoup

from taxonpreview.preview.models import NO_SUMMARY_MARKER

logger = logging.getLogger(__name__)

MAX_SENTENCES = 2
MAX_CHARS = 350
MIN_PARAGRAPH_CHARS = 20
MIN_SENTENCE_CHARS = 10

# Edit links, footnote markers, maintenance boxes and every table
NOISE_SELECTORS = (
    ".mw-editsection, .reference, sup, .noprint, .infobox, .navbox, "
    ".vertical-navbox, .sidebar, .metadata, table"
)

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
TEMPLATE_MARKER = re.compile(r"\{\{.*?\}\}")
NON_PROSE_PREFIX = re.compile(r"^(Listen|File:|Image:)")
MARKUP_TAG = re.compile(r"<[^>]*>")
RELATIVE_HREF = re.compile(r"""(href=["'])(/(?:wiki|\w)/)""")


def absolutize_links(article_html: str, site_url: str) -> str:
    """Point site-relative article links at the article site."""
    return RELATIVE_HREF.sub(lambda m: f"{m.group(1)}{site_url}{m.group(2)}", article_html)


def strip_markup(html: str) -> str:
    """Remove tags, keeping only the text between them."""
    return MARKUP_TAG.sub("", html)


def _clean_sentence(sentence: str) -> str:
    return TEMPLATE_MARKER.sub("", sentence).strip()


def _is_prose(sentence: str) -> bool:
    return len(sentence) > MIN_SENTENCE_CHARS and not NON_PROSE_PREFIX.match(sentence)


def extract_snippet(article_html: str, site_url: str | None = None) -> str:
    """Extract a bounded snippet from rendered article markup.

    Args:
        article_html: Rendered article body markup
        site_url: Optional site prefix for rewriting relative links

    Returns:
        Up to two sentences of markup-bearing text, or NO_SUMMARY_MARKER if
        no paragraph yielded a qualifying sentence.
    """
    if site_url:
        article_html = absolutize_links(article_html, site_url)

    soup = BeautifulSoup(article_html, "html.parser")
    for element in soup.select(NOISE_SELECTORS):
        element.extract()

    accepted: list[str] = []
    for paragraph in soup.find_all("p"):
        if len(accepted) >= MAX_SENTENCES:
            break

        if len(paragraph.get_text().strip()) < MIN_PARAGRAPH_CHARS:
            continue

        text = paragraph.decode_contents().strip()

        for sentence in SENTENCE_BOUNDARY.split(text):
            if len(accepted) >= MAX_SENTENCES:
                break

            cleaned = _clean_sentence(sentence)
            if not _is_prose(cleaned):
                continue

            candidate = " ".join([*accepted, cleaned])
            # The first sentence is kept whatever its length
            if accepted and len(strip_markup(candidate)) > MAX_CHARS:
                logger.debug("Snippet length cap reached after %d sentence(s)", len(accepted))
                return _join_snippet(accepted)

            accepted.append(cleaned)

    return _join_snippet(accepted)


def _join_snippet(accepted: list[str]) -> str:
    """Join accepted sentences with single spaces, or return the empty-result marker."""
    if not accepted:
        return NO_SUMMARY_MARKER
    return " ".join(accepted)
