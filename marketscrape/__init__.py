"""Marketplace product page and shipping fee scraper package."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from marketscrape.browser import BrowserSession
from marketscrape.errors import (
    FetchError,
    RenderError,
    ResolutionError,
    ScrapeError,
    ValidationError,
)
from marketscrape.models import (
    IndividualReview,
    ProductInfo,
    RatingBreakdown,
    ReviewSummary,
    ScrapedProductData,
    ShippingOption,
    StoreInfo,
)
from marketscrape.numbers import extract_float, extract_integer
from marketscrape.product_scraper import parse_product_html, scrape_product_details
from marketscrape.shipping import extract_city_from_address, resolve_shipping_options

__all__ = [
    # Version
    "__version__",
    # Errors
    "ScrapeError",
    "ValidationError",
    "ResolutionError",
    "RenderError",
    "FetchError",
    # Models
    "ProductInfo",
    "StoreInfo",
    "RatingBreakdown",
    "IndividualReview",
    "ReviewSummary",
    "ScrapedProductData",
    "ShippingOption",
    # Core functions
    "BrowserSession",
    "scrape_product_details",
    "parse_product_html",
    "resolve_shipping_options",
    "extract_city_from_address",
    "extract_integer",
    "extract_float",
]
