"""HTML parsing and selector-fallback utilities.

Everything here operates on an already parsed document; nothing touches the
network. Selector errors and non-matches both resolve to "not found" so that a
single missing element never aborts a whole extraction.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from marketscrape.logging_config import get_logger

__all__ = [
    "FieldRule",
    "parse_html",
    "safe_select",
    "safe_select_all",
    "select_first_of",
    "select_all_first_of",
    "first_match",
    "text_of",
    "attr_of",
    "attr_parser",
    "strip_query",
]

logger = get_logger("html_utils")

Root = Union[BeautifulSoup, Tag]


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML snapshot with the stdlib-backed parser."""
    return BeautifulSoup(html or "", "html.parser")


def safe_select(root: Optional[Root], selector: str) -> Optional[Tag]:
    """``select_one`` that never raises; bad selectors count as no match."""
    if root is None:
        return None
    try:
        return root.select_one(selector)
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        logger.debug(f"Selector failed ({selector!r}): {e}")
        return None


def safe_select_all(root: Optional[Root], selector: str) -> List[Tag]:
    """``select`` that never raises; bad selectors yield an empty list."""
    if root is None:
        return []
    try:
        return list(root.select(selector))
    except (SelectorSyntaxError, NotImplementedError, ValueError) as e:
        logger.debug(f"Selector failed ({selector!r}): {e}")
        return []


def select_first_of(root: Optional[Root], selectors: Iterable[str]) -> Optional[Tag]:
    """Return the first element matched by any selector, tried in order."""
    for selector in selectors:
        element = safe_select(root, selector)
        if element is not None:
            return element
    return None


def select_all_first_of(root: Optional[Root], selectors: Iterable[str]) -> List[Tag]:
    """Return all matches of the first selector that matches anything."""
    for selector in selectors:
        elements = safe_select_all(root, selector)
        if elements:
            return elements
    return []


def text_of(element: Optional[Tag]) -> Optional[str]:
    """Stripped text of an element, ``None`` when missing or blank."""
    if element is None:
        return None
    text = element.get_text(" ", strip=True)
    return text or None


def attr_of(element: Optional[Tag], name: str) -> Optional[str]:
    """String attribute value, ``None`` when missing or blank."""
    if element is None:
        return None
    value = element.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def attr_parser(name: str, then: Optional[Callable[[str], Any]] = None) -> Callable[[Tag], Any]:
    """Build a parse function reading attribute ``name`` (optionally post-processed)."""

    def parse(element: Tag) -> Any:
        value = attr_of(element, name)
        if value is None or then is None:
            return value
        return then(value)

    return parse


def _text_parse(element: Tag) -> Optional[str]:
    return text_of(element)


@dataclass(frozen=True)
class FieldRule:
    """One candidate in a selector-fallback chain.

    ``parse`` receives the matched element and returns the field value or
    ``None``. Without one, the element's stripped text is used.
    """

    selector: str
    parse: Callable[[Tag], Any] = _text_parse

    def apply(self, root: Optional[Root]) -> Any:
        element = safe_select(root, self.selector)
        if element is None:
            return None
        try:
            return self.parse(element)
        except (AttributeError, TypeError, ValueError, IndexError) as e:
            logger.debug(f"Parse failed for {self.selector!r}: {e}")
            return None


def first_match(root: Optional[Root], rules: Sequence[FieldRule]) -> Any:
    """Evaluate rules in order; the first non-``None`` value wins."""
    for rule in rules:
        value = rule.apply(root)
        if value is not None:
            return value
    return None


def strip_query(url: str) -> str:
    """URL without its query string or fragment, used as a dedupe key."""
    return url.split("#", 1)[0].split("?", 1)[0]
