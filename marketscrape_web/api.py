"""API endpoints for product scraping and shipping fee lookup.

Every response is JSON. Errors come back as ``{"error": message}`` with a
status that tells bad input (400), unknown destination (404) and upstream or
internal failure (500) apart.
"""

from typing import Tuple

from flask import Blueprint, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from marketscrape import __version__
from marketscrape.errors import ScrapeError
from marketscrape.logging_config import get_logger
from marketscrape.product_scraper import scrape_product_details
from marketscrape.shipping import resolve_shipping_options

__all__ = ["api"]

logger = get_logger("web")

api = Blueprint("api", __name__)


def _error_response(message: str, status: int) -> Tuple[Response, int]:
    return jsonify({"error": message}), status


@api.errorhandler(ScrapeError)
def handle_scrape_error(error: ScrapeError) -> Tuple[Response, int]:
    if error.status_code >= 500:
        logger.error(f"{request.path} failed: {error.message}")
    else:
        logger.info(f"{request.path} rejected ({error.status_code}): {error.message}")
    return _error_response(error.message, error.status_code)


@api.errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    if isinstance(error, HTTPException):
        return error
    logger.exception(f"Unexpected error on {request.path}")
    return _error_response(f"Internal error while handling {request.path}", 500)


@api.route("/health", methods=["GET"])
def health_check() -> Response:
    return jsonify({"status": "healthy", "service": "marketscrape", "version": __version__})


@api.route("/product-details", methods=["GET"])
def product_details() -> Tuple[Response, int]:
    """Render a marketplace product page and return the extracted data."""
    url = request.args.get("url", "").strip()
    if not url:
        return _error_response("URL query parameter is required", 400)

    data = scrape_product_details(url)
    return jsonify(data.to_dict()), 200


@api.route("/shipping/fee", methods=["GET"])
def shipping_fee() -> Tuple[Response, int]:
    """JNE shipping options for an address and a weight."""
    options = resolve_shipping_options(request.args.get("address"), request.args.get("weight"))
    return jsonify([option.to_dict() for option in options]), 200
