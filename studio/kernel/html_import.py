"""
AI Builder Studio Kernel — Imported HTML Normalization

Imported documents (local file or cloned repository) are brought in line with
what the generator produces: an html/head/body skeleton, the Tailwind CDN
script, the Inter web font and a base font-family rule.

The document is parsed with BeautifulSoup. Every insertion is guarded by a
lookup of the existing tag, so normalizing twice gives the same result as once.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Doctype, Tag

TAILWIND_SRC = "https://cdn.tailwindcss.com"
INTER_FONT_HREF = "https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap"
BASE_FONT_CSS = "body { font-family: 'Inter', sans-serif; }"

IMPORTED_PROMPT = "The following code was imported by the user."

_DOCTYPE_PREFIX_RE = re.compile(r"^doctype\s+", re.IGNORECASE)
_INTER_HREF_RE = re.compile(r"family=Inter")


def _take_doctype(soup: BeautifulSoup) -> str:
    """Remove the doctype node from the tree and return its declaration."""
    for node in soup.contents:
        if isinstance(node, Doctype):
            value = _DOCTYPE_PREFIX_RE.sub("", str(node)).strip() or "html"
            node.extract()
            return f"<!DOCTYPE {value}>"
    return "<!DOCTYPE html>"


def _ensure_skeleton(soup: BeautifulSoup) -> Tag:
    """Make sure html, head and body exist, with body a sibling after head. Returns head."""
    root = soup.find("html")
    if root is None:
        root = soup.new_tag("html")
        for child in list(soup.contents):
            root.append(child.extract())
        soup.append(root)

    head = root.find("head")
    if head is None:
        head = soup.new_tag("head")
        root.insert(0, head)

    body = root.find("body")
    if body is None:
        body = soup.new_tag("body")
        for child in [c for c in root.contents if c is not head]:
            body.append(child.extract())
        root.append(body)
    elif body.find_parent("head") is not None:
        # Unclosed <head>: the parser nested body inside it
        head.insert_after(body.extract())

    return head


def _has_base_font(soup: BeautifulSoup) -> bool:
    return any(BASE_FONT_CSS in style.get_text() for style in soup.find_all("style"))


def normalize_imported_html(html: str) -> str:
    """
    Ensure the document skeleton exists and inject framework script, font link
    and base font style where missing.

    Args:
        html: Raw imported document

    Returns:
        Normalized document, starting with a doctype
    """
    soup = BeautifulSoup(html, "html.parser")
    doctype = _take_doctype(soup)
    head = _ensure_skeleton(soup)

    if soup.find("script", src=TAILWIND_SRC) is None:
        head.append(soup.new_tag("script", src=TAILWIND_SRC))
    if soup.find("link", href=_INTER_HREF_RE) is None:
        head.append(soup.new_tag("link", href=INTER_FONT_HREF, rel="stylesheet"))
    if not _has_base_font(soup):
        style = soup.new_tag("style")
        style.string = BASE_FONT_CSS
        head.append(style)

    return f"{doctype}\n{soup.decode().strip()}"
