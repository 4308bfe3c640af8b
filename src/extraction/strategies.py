"""
Extraction strategies.

Each strategy turns a RenderedPage into a list of Candidates and returns an
empty list when it finds nothing it trusts. A malformed record is skipped;
it never aborts the batch.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional

import json5
from bs4 import Tag

from src.core.logging import get_logger
from src.extraction.dom import (
    anchor_name,
    find_container,
    in_page_chrome,
    leaf_blocks,
    parse_html,
    select_text,
)
from src.extraction.models import Candidate, ExtractionSource, RenderedPage
from src.extraction.text_rules import classify_blocks, clean_name, name_from_slug, split_headline
from src.utils.url_utils import normalize_profile_url, slug_of

logger = get_logger(__name__)


class ExtractionStrategy(ABC):
    """One way of reading candidates out of a page."""

    name = "strategy"

    @abstractmethod
    def extract(self, page: RenderedPage) -> List[Candidate]:
        """Return candidates found on the page, or an empty list."""


# ---------------------------------------------------------------------------
# 1. Structured data (schema.org JSON-LD)
# ---------------------------------------------------------------------------

def parse_json_lenient(raw: str) -> Optional[Any]:
    """Strict JSON first, then JSON5 for trailing commas, comments and single quotes."""
    text = (raw or "").strip()
    if text.startswith("<!--"):
        text = text[4:]
    if text.endswith("-->"):
        text = text[:-3]
    text = text.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        pass
    try:
        return json5.loads(text)
    except ValueError as e:
        logger.debug(f"[Extract] Unparseable JSON-LD block: {e}")
        return None


def _walk(node: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(node, dict):
        yield node
        for value in node.values():
            yield from _walk(value)
    elif isinstance(node, list):
        for item in node:
            yield from _walk(item)


def _types(node: Dict[str, Any]) -> List[str]:
    raw = node.get("@type") or []
    if isinstance(raw, str):
        raw = [raw]
    return [str(t).rsplit("/", 1)[-1].lower() for t in raw]


def _first_text(value: Any) -> Optional[str]:
    if isinstance(value, list):
        for item in value:
            text = _first_text(item)
            if text:
                return text
        return None
    if isinstance(value, dict):
        return _first_text(value.get("name"))
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class StructuredDataStrategy(ExtractionStrategy):
    """Person records from embedded application/ld+json blocks."""

    name = "structured-data"

    def extract(self, page: RenderedPage) -> List[Candidate]:
        soup = parse_html(page.html)
        nodes: List[Dict[str, Any]] = []
        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            data = parse_json_lenient(script.string or script.get_text())
            if data is not None:
                nodes.extend(_walk(data))

        organizations = {
            node["@id"]: node
            for node in nodes
            if "organization" in _types(node) and isinstance(node.get("@id"), str)
        }

        candidates: List[Candidate] = []
        for node in nodes:
            if "person" not in _types(node):
                continue
            try:
                candidate = self._person(node, organizations, page.url)
            except Exception as e:
                logger.debug(f"[Extract] Skipping malformed person record: {e}")
                continue
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def _profile_url(self, node: Dict[str, Any], base_url: str) -> Optional[str]:
        links: List[Any] = [node.get("url"), node.get("@id")]
        same_as = node.get("sameAs")
        links.extend(same_as if isinstance(same_as, list) else [same_as])
        for link in links:
            if isinstance(link, str):
                url = normalize_profile_url(link, base_url)
                if url:
                    return url
        return None

    def _employer(self, node: Dict[str, Any], organizations: Dict[str, Dict[str, Any]]) -> Optional[str]:
        works_for = node.get("worksFor")
        if isinstance(works_for, list):
            works_for = works_for[0] if works_for else None
        if isinstance(works_for, dict) and not works_for.get("name"):
            ref = works_for.get("@id")
            if isinstance(ref, str) and ref in organizations:
                works_for = organizations[ref]
        return _first_text(works_for)

    def _location(self, node: Dict[str, Any]) -> Optional[str]:
        address = node.get("address")
        if address is None and isinstance(node.get("homeLocation"), dict):
            home = node["homeLocation"]
            address = home.get("address") or home.get("name")
        if isinstance(address, list):
            address = address[0] if address else None
        if isinstance(address, dict):
            parts = [
                address.get("addressLocality"),
                address.get("addressRegion"),
                _first_text(address.get("addressCountry")),
            ]
            text = ", ".join(str(p).strip() for p in parts if p and str(p).strip())
            return text or None
        return _first_text(address)

    def _person(
        self,
        node: Dict[str, Any],
        organizations: Dict[str, Dict[str, Any]],
        base_url: str,
    ) -> Optional[Candidate]:
        profile_url = self._profile_url(node, base_url)
        if profile_url is None:
            return None
        return Candidate(
            name=clean_name(_first_text(node.get("name"))),
            profile_url=profile_url,
            title=_first_text(node.get("jobTitle")),
            company=self._employer(node, organizations),
            location=self._location(node),
            extraction_source=ExtractionSource.STRUCTURED_DATA,
        )


# ---------------------------------------------------------------------------
# 2. Structural heuristic (profile anchor -> result card -> text rules)
# ---------------------------------------------------------------------------

# Card sub-elements that still carry meaningful class names on some layouts
TITLE_HINTS = (".entity-result__primary-subtitle", ".search-result__truncate.subline-level-1")
LOCATION_HINTS = (".entity-result__secondary-subtitle", ".subline-level-2")
SUMMARY_HINTS = (".entity-result__summary",)


def _hint(container: Tag, selectors) -> Optional[str]:
    for selector in selectors:
        text = select_text(container, selector)
        if text:
            return text
    return None


class StructuralHeuristicStrategy(ExtractionStrategy):
    """Result cards located by walking up from profile links."""

    name = "structural-heuristic"

    def extract(self, page: RenderedPage) -> List[Candidate]:
        soup = parse_html(page.html)
        cards: Dict[int, Dict[str, Any]] = {}

        for anchor in soup.find_all("a", href=True):
            url = normalize_profile_url(anchor["href"], page.url)
            if url is None or in_page_chrome(anchor):
                continue
            container = find_container(anchor)
            if container is None:
                continue
            card = cards.setdefault(id(container), {"container": container, "url": url, "anchors": []})
            # The first profile link in a card is the card's subject
            if card["url"] == url:
                card["anchors"].append(anchor)

        candidates: List[Candidate] = []
        for card in cards.values():
            try:
                candidates.append(self._card(card["container"], card["url"], card["anchors"]))
            except Exception as e:
                logger.debug(f"[Extract] Skipping unreadable result card for {card['url']}: {e}")
        return candidates

    def _card(self, container: Tag, url: str, anchors: List[Tag]) -> Candidate:
        name = ""
        for anchor in anchors:
            name = anchor_name(anchor)
            if name:
                break
        name = name or name_from_slug(slug_of(url))

        title, company, location = classify_blocks(leaf_blocks(container), name)

        hinted_title = _hint(container, TITLE_HINTS)
        if hinted_title:
            title, hinted_company = split_headline(hinted_title)
            company = company or hinted_company
        hinted_location = _hint(container, LOCATION_HINTS)
        if hinted_location:
            location = hinted_location
        summary = _hint(container, SUMMARY_HINTS)
        if summary:
            summary_title, summary_company, _ = classify_blocks([summary], name)
            title = summary_title or title
            company = summary_company or company

        return Candidate(
            name=name,
            profile_url=url,
            title=title,
            company=company,
            location=location,
            extraction_source=ExtractionSource.STRUCTURAL_HEURISTIC,
        )


# ---------------------------------------------------------------------------
# 3. DOM scan fallback
# ---------------------------------------------------------------------------

class DomScanStrategy(ExtractionStrategy):
    """
    Every profile link on the page, with its surrounding text.

    Used when the result-card layout is not recognized. Names fall back to
    the profile slug when the link carries no text.
    """

    name = "dom-scan"
    context_levels = 3

    def extract(self, page: RenderedPage) -> List[Candidate]:
        soup = parse_html(page.html)
        candidates: List[Candidate] = []
        seen = set()

        for anchor in soup.find_all("a", href=True):
            url = normalize_profile_url(anchor["href"], page.url)
            if url is None or url in seen or in_page_chrome(anchor):
                continue
            seen.add(url)
            try:
                candidates.append(self._scan(anchor, url))
            except Exception as e:
                logger.debug(f"[Extract] DOM scan skipped {url}: {e}")
        return candidates

    def _context(self, anchor: Tag) -> List[str]:
        node = anchor
        for _ in range(self.context_levels):
            if not isinstance(node.parent, Tag):
                break
            node = node.parent
            blocks = leaf_blocks(node)
            if len(blocks) >= 2:
                return blocks
        return []

    def _scan(self, anchor: Tag, url: str) -> Candidate:
        name = anchor_name(anchor) or name_from_slug(slug_of(url))
        title, company, location = classify_blocks(self._context(anchor), name)
        return Candidate(
            name=name,
            profile_url=url,
            title=title,
            company=company,
            location=location,
            extraction_source=ExtractionSource.STRUCTURAL_HEURISTIC,
        )


def default_strategies() -> List[ExtractionStrategy]:
    return [StructuredDataStrategy(), StructuralHeuristicStrategy(), DomScanStrategy()]
