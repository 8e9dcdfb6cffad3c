"""JNE shipping fee lookup from a free-form Indonesian address.

Flow: address -> city name (heuristic) -> JNE destination code (search API)
-> fee table scraped from the server-rendered shipping-fee page.
"""

import random
import re
import time
from typing import List, Optional

import requests  # type: ignore[import-untyped]
from bs4 import Tag

from marketscrape.config import (
    HEADERS,
    JNE_ORIGIN_CODE,
    JNE_SEARCH_URL,
    JNE_SHIPPING_FEE_URL,
    MAX_RETRIES,
    MAX_RETRY_BACKOFF,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_BASE,
    RETRY_STATUS_CODES,
)
from marketscrape.errors import FetchError, ResolutionError, ValidationError
from marketscrape.html_utils import parse_html, select_all_first_of, text_of
from marketscrape.logging_config import get_logger, log_scrape_event
from marketscrape.models import ShippingOption
from marketscrape.numbers import extract_integer

__all__ = [
    "create_session",
    "fetch",
    "extract_city_from_address",
    "get_destination_code",
    "parse_shipping_fee_table",
    "calculate_shipping_fee",
    "resolve_shipping_options",
]

logger = get_logger("shipping")

CITY_PREFIX_RE = re.compile(r"^(kota|kabupaten|kab\.)\s+", re.IGNORECASE)
POSTAL_CODE_RE = re.compile(r"^\d{5}$")
WEIGHT_RE = re.compile(r"^\d+(\.\d+)?$")

# Segments containing any of these are regions, provinces or countries, not cities
NON_CITY_KEYWORDS = (
    "indonesia",
    "java",
    "jawa",
    "sumatera",
    "sumatra",
    "kalimantan",
    "borneo",
    "sulawesi",
    "celebes",
    "papua",
    "nusa tenggara",
    "maluku",
    "provinsi",
    "province",
    "daerah istimewa",
    "special region",
    "daerah khusus ibukota",
    "special capital region",
)

# Region abbreviations, only as the leading token ("D.I. Yogyakarta", "DKI Jakarta")
REGION_ABBREVIATION_RE = re.compile(r"^(?:d\.\s*i\.|di|diy|dki)(?=\s|$)", re.IGNORECASE)

FEE_ROW_SELECTORS = ["div.wrap-table table tbody tr", "table tbody tr"]


def create_session() -> requests.Session:
    """Create a requests Session with browser-like headers."""
    session = requests.Session()
    session.headers.update(HEADERS)
    session.headers.setdefault("Accept-Encoding", "gzip, deflate")
    return session


def _backoff(attempt: int) -> float:
    return min(RETRY_BACKOFF_BASE ** attempt, MAX_RETRY_BACKOFF) + random.uniform(0, 0.5)


def fetch(
    session: requests.Session,
    url: str,
    params: Optional[dict] = None,
    max_retries: int = MAX_RETRIES,
) -> requests.Response:
    """GET with exponential backoff on 429/5xx, connection errors and timeouts.

    Raises:
        FetchError: If the request fails after all retries or returns an
            error status that is not worth retrying.
    """
    for attempt in range(max_retries + 1):
        try:
            resp = session.get(url, params=params, timeout=REQUEST_TIMEOUT)

            if resp.status_code in RETRY_STATUS_CODES and attempt < max_retries:
                backoff = _backoff(attempt)
                logger.warning(
                    f"Received {resp.status_code} from {url}, backing off {backoff:.1f}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(backoff)
                continue

            resp.raise_for_status()
            return resp

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise FetchError(f"HTTP Error {status} fetching {url}") from e

        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            if attempt < max_retries:
                backoff = _backoff(attempt)
                logger.warning(
                    f"{type(e).__name__} for {url}, backing off {backoff:.1f}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(backoff)
                continue
            raise FetchError(f"Failed to reach {url}: {e}") from e

        except requests.exceptions.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e

    raise FetchError(f"Failed to fetch {url} after {max_retries} retries")


def _is_region_segment(part: str) -> bool:
    lowered = part.lower()
    if any(keyword in lowered for keyword in NON_CITY_KEYWORDS):
        return True
    return bool(REGION_ABBREVIATION_RE.match(part))


def extract_city_from_address(address: Optional[str]) -> Optional[str]:
    """Guess the city (kota/kabupaten) from a comma-separated address.

    A segment starting with "Kota ", "Kabupaten " or "Kab. " wins outright.
    Otherwise segments are scanned from the end, skipping postal codes and
    region/province/country names; the first survivor is the city. This is a
    heuristic, not a geocoder.

    >>> extract_city_from_address("Jl. Mawar I/207, Kota Yogyakarta, D.I. Yogyakarta 55281")
    'Yogyakarta'
    """
    if not address:
        return None
    parts = [part.strip() for part in address.split(",")]

    for part in parts:
        if CITY_PREFIX_RE.match(part):
            city = CITY_PREFIX_RE.sub("", part).strip()
            if city:
                return city

    for part in reversed(parts):
        if not part or POSTAL_CODE_RE.match(part):
            continue
        if _is_region_segment(part):
            continue
        return part

    return None


def get_destination_code(city_name: str, session: Optional[requests.Session] = None) -> Optional[str]:
    """Look up the JNE destination code for a city. None if not found or on error."""
    sess = session or create_session()
    try:
        resp = fetch(sess, JNE_SEARCH_URL, params={"search": city_name})
        payload = resp.json()
    except (FetchError, ValueError) as e:
        logger.error(f"JNE destination search failed for {city_name!r}: {e}")
        return None

    if not isinstance(payload, dict) or not payload.get("status"):
        return None
    results = payload.get("data") or []
    if not results or not isinstance(results[0], dict):
        return None
    code = results[0].get("code")
    return str(code) if code else None


def _parse_fee_row(row: Tag) -> Optional[ShippingOption]:
    cells = row.find_all("td")
    if len(cells) < 4:
        return None
    service = text_of(cells[0])
    price = extract_integer(text_of(cells[2]))
    etd = text_of(cells[3])
    if not service or price is None or not etd:
        return None
    return ShippingOption(service=service, price=price, etd=etd)


def parse_shipping_fee_table(html: str) -> List[ShippingOption]:
    """Rows of the fee table that have service, price and ETD."""
    soup = parse_html(html)
    options: List[ShippingOption] = []
    for row in select_all_first_of(soup, FEE_ROW_SELECTORS):
        option = _parse_fee_row(row)
        if option is None:
            logger.debug(f"Dropping incomplete fee row: {text_of(row)!r}")
            continue
        options.append(option)
    return options


def calculate_shipping_fee(
    destination_code: str,
    weight: str,
    session: Optional[requests.Session] = None,
) -> List[ShippingOption]:
    """Scrape the JNE fee table from the fixed origin to ``destination_code``.

    Raises:
        FetchError: If the fee page cannot be fetched.
    """
    sess = session or create_session()
    params = {"origin": JNE_ORIGIN_CODE, "destination": destination_code, "weight": weight}
    try:
        resp = fetch(sess, JNE_SHIPPING_FEE_URL, params=params)
    except FetchError as e:
        logger.error(f"Error scraping JNE shipping fee: {e}")
        raise FetchError(f"Failed to calculate shipping fee: {e.message}") from e
    return parse_shipping_fee_table(resp.text)


def resolve_shipping_options(
    address: Optional[str],
    weight: Optional[str],
    session: Optional[requests.Session] = None,
) -> List[ShippingOption]:
    """Full address-to-fee-table flow.

    Raises:
        ValidationError: Missing address/weight or non-numeric weight (400)
        ResolutionError: No city in the address (400) or no JNE destination (404)
        FetchError: Fee page unreachable (500)
    """
    address = (address or "").strip()
    weight = (weight or "").strip()
    if not address or not weight:
        raise ValidationError("Missing address or weight parameter")
    if not WEIGHT_RE.match(weight):
        raise ValidationError(f"Weight must be a number, got: {weight!r}")

    city_name = extract_city_from_address(address)
    if not city_name:
        raise ResolutionError(f"Could not determine city from the provided address: {address!r}", 400)

    sess = session or create_session()
    destination_code = get_destination_code(city_name, sess)
    if not destination_code:
        raise ResolutionError(f"Destination not found for the city: {city_name}", 404)

    options = calculate_shipping_fee(destination_code, weight, sess)
    log_scrape_event("shipping_fee_resolved", {
        "city": city_name,
        "destination_code": destination_code,
        "weight": weight,
        "options": len(options),
    }, logger_name="shipping")
    return options
