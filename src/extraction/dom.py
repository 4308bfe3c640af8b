"""
BeautifulSoup helpers shared by the HTML-based strategies.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from src.extraction.text_rules import clean_name, squash

BLOCK_TAGS = ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "dd", "dt", "section", "article"]

CHROME_TAGS = ["nav", "header", "footer", "aside"]

CONTAINER_CLASSES = {
    "entity-result",
    "entity-result__item",
    "reusable-search__result-container",
    "search-result",
    "search-result__wrapper",
    "search-results__result-item",
}

MAX_CONTAINER_DEPTH = 12


def parse_html(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html or "", "html.parser")
    # Screen-reader duplicates ("View Jane Doe's profile", "2nd degree connection")
    for hidden in soup.select(".visually-hidden, .sr-only, .a11y-text"):
        hidden.decompose()
    for junk in soup(["style", "noscript", "svg"]):
        junk.decompose()
    return soup


def in_page_chrome(element: Tag) -> bool:
    """True for links in the global nav, header, footer or sidebars."""
    return element.find_parent(CHROME_TAGS) is not None


def is_result_container(node: Tag) -> bool:
    if node.name == "li" or node.get("role") == "listitem":
        return True
    if node.has_attr("data-chameleon-result-urn"):
        return True
    classes = node.get("class") or []
    return any(cls in CONTAINER_CLASSES for cls in classes)


def find_container(anchor: Tag) -> Optional[Tag]:
    """Nearest ancestor of anchor that is a result card."""
    node = anchor.parent
    depth = 0
    while isinstance(node, Tag) and node.name not in ("body", "html", "[document]"):
        if depth >= MAX_CONTAINER_DEPTH:
            return None
        if is_result_container(node):
            return node
        node = node.parent
        depth += 1
    return None


def leaf_blocks(container: Tag) -> List[str]:
    """
    Text of block elements that contain no other block elements, in
    document order, with consecutive duplicates dropped.
    """
    blocks: List[str] = []
    nodes = [container] + container.find_all(BLOCK_TAGS)
    for node in nodes:
        if node.name not in BLOCK_TAGS:
            continue
        if node.find(BLOCK_TAGS) is not None:
            continue
        text = squash(node.get_text(" ", strip=True))
        if text and (not blocks or blocks[-1] != text):
            blocks.append(text)
    return blocks


def anchor_name(anchor: Tag) -> str:
    """Display name carried by a profile link."""
    preferred = anchor.find("span", attrs={"aria-hidden": "true"})
    if preferred is not None:
        name = clean_name(preferred.get_text(" ", strip=True))
        if name:
            return name

    if anchor.find(BLOCK_TAGS) is not None:
        blocks = leaf_blocks(anchor)
        return clean_name(blocks[0]) if blocks else ""

    return clean_name(anchor.get_text(" ", strip=True))


def select_text(container: Tag, selector: str) -> Optional[str]:
    element = container.select_one(selector)
    if element is None:
        return None
    text = squash(element.get_text(" ", strip=True))
    return text or None
