"""Product-detail scraping: render, snapshot, then extract offline."""

import time
from typing import Callable

from marketscrape.browser import BrowserSession
from marketscrape.extraction import extract_product_and_store
from marketscrape.html_utils import parse_html
from marketscrape.logging_config import get_logger, log_scrape_event
from marketscrape.models import ScrapedProductData
from marketscrape.renderer import PageRenderer
from marketscrape.reviews import (
    REVIEW_FEED_SELECTOR,
    REVIEW_ITEM_SELECTOR,
    REVIEW_SECTION_SELECTORS,
    aggregate_reviews,
)
from marketscrape.url_validation import validate_product_url

__all__ = [
    "render_product_page",
    "parse_product_html",
    "scrape_product_details",
]

logger = get_logger("product_scraper")

# Scrolling this into view is what makes the marketplace mount the review feed
REVIEW_SCROLL_ANCHOR = ", ".join(REVIEW_SECTION_SELECTORS)


def render_product_page(url: str, session_factory: Callable[[], BrowserSession] = BrowserSession) -> str:
    """Render ``url`` in a fresh browser and return the DOM snapshot.

    The browser is released before this returns or raises.

    Raises:
        RenderError: If the browser cannot start or the page cannot load.
    """
    with session_factory() as session:
        renderer = PageRenderer(session.page)
        renderer.navigate(url)
        renderer.wait_for_base_ready()

        if renderer.wait_for_deferred_section(REVIEW_FEED_SELECTOR, REVIEW_SCROLL_ANCHOR):
            renderer.settle(REVIEW_ITEM_SELECTOR)
        else:
            logger.info("Review feed unavailable, snapshotting without individual reviews")

        return renderer.content()


def parse_product_html(html: str) -> ScrapedProductData:
    """Extract everything we know how to read from a product page snapshot.

    Pure function of the HTML. Missing elements give ``None`` fields or empty
    lists, never an exception.
    """
    soup = parse_html(html)
    product, store = extract_product_and_store(soup)
    return ScrapedProductData(product=product, store=store, reviews=aggregate_reviews(soup))


def scrape_product_details(
    url: str,
    session_factory: Callable[[], BrowserSession] = BrowserSession,
) -> ScrapedProductData:
    """Scrape one marketplace product page.

    Args:
        url: Absolute product page URL
        session_factory: Builds the browser session (swapped out in tests)

    Returns:
        ScrapedProductData with individually nullable fields

    Raises:
        URLValidationError: If ``url`` is missing or not a supported page
        RenderError: If the browser fails or navigation times out
    """
    url = validate_product_url(url)
    start = time.time()
    log_scrape_event("product_scrape_start", {"url": url})

    html = render_product_page(url, session_factory)
    data = parse_product_html(html)

    log_scrape_event("product_scrape_complete", {
        "url": url,
        "duration_seconds": round(time.time() - start, 3),
        "images": len(data.product.image_urls),
        "breakdown_rows": len(data.reviews.rating_breakdown),
        "individual_reviews": len(data.reviews.individual_reviews),
    })
    return data
