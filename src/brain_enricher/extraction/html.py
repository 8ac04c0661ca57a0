"""BeautifulSoup helpers for pulling text and meta tags out of raw HTML."""

import re

from bs4 import BeautifulSoup, Tag

_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def _text(node: Tag) -> str:
    """Plain text of a parsed node.

    ``<br>`` becomes a newline and each ``<p>`` is followed by a paragraph
    break; entities are decoded by the parser.
    """
    for br in node.find_all("br"):
        br.replace_with("\n")
    for paragraph in node.find_all("p"):
        paragraph.append("\n\n")
    text = node.get_text().replace("\xa0", " ")
    text = _EXTRA_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def strip_html(markup: str) -> str:
    """Convert an HTML fragment to plain text."""
    return _text(_soup(markup))


def first_paragraph(markup: str) -> str | None:
    """Plain text of the first ``<p>`` element, or None if there is none."""
    paragraph = _soup(markup).find("p")
    if paragraph is None:
        return None
    return _text(paragraph) or None


def extract_meta(markup: str, key: str) -> str | None:
    """Content of ``<meta property="key">``, falling back to ``<meta name="key">``."""
    soup = _soup(markup)
    for attr in ("property", "name"):
        tag = soup.find("meta", attrs={attr: key})
        if tag and tag.get("content"):
            content = tag["content"].strip()
            if content:
                return content
    return None


def extract_tag(markup: str, tag: str) -> str | None:
    """Text of the first ``<tag>`` element, e.g. ``<title>``."""
    node = _soup(markup).find(tag)
    if node is None:
        return None
    return node.get_text().strip() or None
