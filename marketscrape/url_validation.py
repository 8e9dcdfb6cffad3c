"""URL validation and sanitization for pages handed to the headless browser."""

import os
import re
from typing import FrozenSet, Optional
from urllib.parse import urlparse

from marketscrape.errors import ValidationError

__all__ = [
    "URLValidationError",
    "ALLOWED_PRODUCT_DOMAINS",
    "sanitize_url",
    "validate_url",
    "validate_product_url",
]


class URLValidationError(ValidationError):
    """Raised when URL validation fails."""


def _domains_from_env(default: str) -> FrozenSet[str]:
    raw = os.getenv("ALLOWED_PRODUCT_DOMAINS", default)
    return frozenset(d.strip().lower() for d in raw.split(",") if d.strip())


# Marketplace hosts we are willing to render. Set ALLOWED_PRODUCT_DOMAINS=""
# to allow any host.
ALLOWED_PRODUCT_DOMAINS: FrozenSet[str] = _domains_from_env(
    "www.tokopedia.com,tokopedia.com,m.tokopedia.com"
)

# Dangerous URL schemes to reject
DANGEROUS_SCHEMES = {"javascript", "data", "vbscript", "file"}

SUSPICIOUS_PATTERNS = [
    r"\.\./",            # Path traversal
    r"%2e%2e",           # Encoded path traversal
    r"<script",          # XSS attempt
    r"javascript:",      # JS injection
]


def sanitize_url(url: str) -> str:
    """Strip whitespace, control characters and null bytes."""
    if not url:
        return ""
    url = url.strip()
    url = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", url)
    return url.replace("%00", "")


def validate_url(url: Optional[str], allowed_domains: Optional[FrozenSet[str]] = None) -> str:
    """Validate an absolute http(s) URL.

    Args:
        url: URL to validate
        allowed_domains: Hosts to accept; empty or None accepts any host

    Returns:
        Sanitized URL

    Raises:
        URLValidationError: If the URL is malformed, unsafe or off-domain
    """
    if not url:
        raise URLValidationError("URL is empty")

    url = sanitize_url(url)
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise URLValidationError(f"Failed to parse URL: {e}") from e

    scheme = parsed.scheme.lower()
    if scheme in DANGEROUS_SCHEMES:
        raise URLValidationError(f"Dangerous URL scheme: {scheme}")
    if scheme not in ("http", "https"):
        raise URLValidationError(f"URL must be absolute http(s), got: {url}")

    host = (parsed.hostname or "").lower()
    if not host:
        raise URLValidationError("URL has no domain")

    if allowed_domains and host not in allowed_domains:
        raise URLValidationError(
            f"URL domain '{host}' is not supported (allowed: {', '.join(sorted(allowed_domains))})"
        )

    url_lower = url.lower()
    for pattern in SUSPICIOUS_PATTERNS:
        if re.search(pattern, url_lower):
            raise URLValidationError(f"URL contains suspicious pattern: {pattern}")

    return url


def validate_product_url(url: Optional[str]) -> str:
    """Validate a marketplace product page URL against ALLOWED_PRODUCT_DOMAINS."""
    return validate_url(url, allowed_domains=ALLOWED_PRODUCT_DOMAINS)
