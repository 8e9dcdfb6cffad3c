"""Product and store extraction from a rendered Tokopedia product page.

All site-specific markup knowledge lives in the rule tables below. When the
marketplace ships new markup (or runs an A/B test), add a selector to the
relevant list; the extraction code itself should not need to change.
"""

from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from marketscrape.html_utils import (
    FieldRule,
    attr_of,
    attr_parser,
    first_match,
    safe_select_all,
    select_first_of,
    strip_query,
    text_of,
)
from marketscrape.logging_config import get_logger
from marketscrape.models import ProductInfo, StoreInfo
from marketscrape.numbers import extract_abbreviated_count, extract_float, extract_integer

__all__ = [
    "PRODUCT_RULES",
    "STORE_RULES",
    "STORE_SECTION_SELECTORS",
    "SHIPMENT_SECTION_SELECTORS",
    "PLACEHOLDER_IMAGE_MARKERS",
    "extract_product",
    "extract_store",
    "extract_product_and_store",
    "extract_image_urls",
    "extract_stock",
    "is_usable_image_url",
]

logger = get_logger("extraction")


def _integer_text(element: Tag) -> Optional[int]:
    return extract_integer(text_of(element))


def _float_text(element: Tag) -> Optional[float]:
    return extract_float(text_of(element))


def _rating_before_slash(element: Tag) -> Optional[float]:
    # "4.9/5.0" -> 4.9
    text = text_of(element)
    return extract_float(text.split("/")[0]) if text else None


def _usable_or_none(url: Optional[str]) -> Optional[str]:
    return url if is_usable_image_url(url) else None


def _image_source(img: Tag) -> Optional[str]:
    # Rendered src may still be the lazy-load placeholder
    return _usable_or_none(attr_of(img, "src")) or _usable_or_none(attr_of(img, "data-src"))


# =============================================================================
# Rule tables
# =============================================================================

PRODUCT_RULES = {
    "title": [
        FieldRule('h1[data-testid="lblPDPDetailProductName"]'),
        FieldRule('[data-testid="lblPDPDetailProductName"]'),
        FieldRule('meta[property="og:title"]', attr_parser("content")),
    ],
    "price": [
        FieldRule('.price[data-testid="lblPDPDetailProductPrice"]', _integer_text),
        FieldRule('[data-testid="lblPDPDetailProductPrice"]', _integer_text),
        FieldRule('meta[property="product:price:amount"]', attr_parser("content", extract_integer)),
    ],
    "sold_count": [
        FieldRule(
            'p[data-testid="lblPDPDetailProductSoldCounter"]',
            lambda el: extract_abbreviated_count(text_of(el)),
        ),
        FieldRule(
            '[data-testid="lblPDPDetailProductSoldCounter"]',
            lambda el: extract_abbreviated_count(text_of(el)),
        ),
    ],
    "stock": [
        FieldRule('[data-testid="lblPDPDetailProductStock"] b', _integer_text),
        FieldRule('[data-testid="stock-label"] b', _integer_text),
    ],
}

# Availability badge, used when no explicit stock number is rendered
STOCK_BADGE_SELECTORS = ['[data-testid="lblPDPInfoStock"]', '[data-testid="stock-badge"]']
IN_STOCK_MARKERS = ("tersedia", "available", "in stock")
SOLD_OUT_MARKERS = ("stok habis", "habis", "sold out", "out of stock")

STORE_SECTION_SELECTORS = ["#pdp_comp-shop_credibility", '[data-testid="shop-card"]']
SHIPMENT_SECTION_SELECTORS = ["#pdp_comp-shipment_v4", '[data-testid="compShipment"]']

# Evaluated inside the store section
STORE_RULES = {
    "name": [
        FieldRule('[data-testid="llbPDPFooterShopName"] h2'),
        FieldRule('[data-testid="shopName"]'),
    ],
    "avatar_url": [
        FieldRule('img[data-testid="imgPDPFooterShopBadge"]', attr_parser("src")),
        FieldRule('img[data-testid="shopAvatar"]', attr_parser("src")),
    ],
    "rating": [
        FieldRule(
            ".css-b6ktge .css-1aa4ga7-unf-grid-row:first-child .css-e39d2g p > span:first-child",
            _float_text,
        ),
        FieldRule('[data-testid="shopInfo"] [data-testid="shopRating"] span:first-of-type', _float_text),
        FieldRule('[data-testid="lblShopRating"]', _rating_before_slash),
    ],
}

# Evaluated inside the shipment section
LOCATION_RULES = [
    FieldRule("h2.css-g78l6p-unf-heading b"),
    FieldRule('[data-testid="lblPDPShipmentOrigin"] b'),
    FieldRule('[data-testid="lblPDPShipmentOrigin"]'),
]

MAIN_IMAGE_RULES = [
    FieldRule('img[data-testid="PDPMainImage"]', _image_source),
    FieldRule('[data-testid="PDPImageMain"] img', _image_source),
    FieldRule('meta[property="og:image"]', attr_parser("content", _usable_or_none)),
]
THUMBNAIL_SELECTORS = [
    'button[data-testid="PDPImageThumbnail"] img',
    '[data-testid="PDPImageThumbnail"] img',
]

# Lazy-load spinners and icon sprites that sit where thumbnails will appear
PLACEHOLDER_IMAGE_MARKERS = ("kratos/85cc883d.svg",)


# =============================================================================
# Field extraction
# =============================================================================

def is_usable_image_url(url: Optional[str]) -> bool:
    """False for inline data URIs and known placeholder assets."""
    if not url:
        return False
    if url.startswith("data:"):
        return False
    return not any(marker in url for marker in PLACEHOLDER_IMAGE_MARKERS)


def extract_image_urls(soup: BeautifulSoup) -> List[str]:
    """Main image first, then thumbnails, deduplicated by URL minus query."""
    image_urls: List[str] = []
    seen = set()

    def add(url: Optional[str]) -> None:
        if not is_usable_image_url(url):
            return
        key = strip_query(url)
        if key in seen:
            return
        seen.add(key)
        image_urls.append(url)

    add(first_match(soup, MAIN_IMAGE_RULES))

    for selector in THUMBNAIL_SELECTORS:
        thumbnails = safe_select_all(soup, selector)
        if not thumbnails:
            continue
        for img in thumbnails:
            add(_image_source(img))
        break

    return image_urls


def extract_stock(soup: BeautifulSoup) -> Optional[int]:
    """Explicit stock number, else inferred from the availability badge."""
    stock = first_match(soup, PRODUCT_RULES["stock"])
    if stock is not None:
        return stock

    badge_text = text_of(select_first_of(soup, STOCK_BADGE_SELECTORS))
    if not badge_text:
        return None

    lowered = badge_text.lower()
    if any(marker in lowered for marker in SOLD_OUT_MARKERS):
        return 0
    if any(marker in lowered for marker in IN_STOCK_MARKERS):
        # "Tersedia" with no number still means at least one unit
        number = extract_integer(badge_text)
        return number if number is not None else 1
    return None


def extract_product(soup: BeautifulSoup) -> ProductInfo:
    return ProductInfo(
        title=first_match(soup, PRODUCT_RULES["title"]),
        image_urls=extract_image_urls(soup),
        sold_count=first_match(soup, PRODUCT_RULES["sold_count"]),
        stock=extract_stock(soup),
        price=first_match(soup, PRODUCT_RULES["price"]),
    )


def extract_store(soup: BeautifulSoup) -> StoreInfo:
    store = StoreInfo()

    section = select_first_of(soup, STORE_SECTION_SELECTORS)
    if section is not None:
        store.name = first_match(section, STORE_RULES["name"])
        store.avatar_url = first_match(section, STORE_RULES["avatar_url"])
        store.rating = first_match(section, STORE_RULES["rating"])
    else:
        logger.debug("Store section not found")

    shipment = select_first_of(soup, SHIPMENT_SECTION_SELECTORS)
    if shipment is not None:
        store.location = first_match(shipment, LOCATION_RULES)

    return store


def extract_product_and_store(soup: BeautifulSoup) -> Tuple[ProductInfo, StoreInfo]:
    """Extract listing and seller fields from a parsed product page."""
    return extract_product(soup), extract_store(soup)
