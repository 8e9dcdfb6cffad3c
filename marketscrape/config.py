"""Configuration and constants for the scraper."""

import os
from pathlib import Path
from typing import Dict, FrozenSet, List

__all__ = [
    "USER_AGENT",
    "ACCEPT_LANGUAGE",
    "VIEWPORT",
    "BLOCKED_RESOURCE_TYPES",
    "NAVIGATION_TIMEOUT_MS",
    "BASE_READY_TIMEOUT_MS",
    "REVIEW_SECTION_TIMEOUT_MS",
    "SETTLE_DELAY_MS",
    "SETTLE_INTERVAL_MS",
    "SETTLE_STABLE_CHECKS",
    "SETTLE_TIMEOUT_MS",
    "CHROMIUM_EXECUTABLE_PATH",
    "LOCAL_LAUNCH_ARGS",
    "SERVERLESS_LAUNCH_ARGS",
    "is_serverless",
    "JNE_SEARCH_URL",
    "JNE_SHIPPING_FEE_URL",
    "JNE_ORIGIN_CODE",
    "HEADERS",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "RETRY_BACKOFF_BASE",
    "MAX_RETRY_BACKOFF",
    "RETRY_STATUS_CODES",
    "LOG_DIR",
]

# =============================================================================
# Headless browser
# =============================================================================

USER_AGENT = os.getenv(
    "MARKETSCRAPE_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/114.0.0.0 Safari/537.36",
)

# English first, Indonesian as fallback
ACCEPT_LANGUAGE = os.getenv("MARKETSCRAPE_ACCEPT_LANGUAGE", "en-US,en;q=0.9,id;q=0.8")

VIEWPORT: Dict[str, int] = {"width": 1366, "height": 768}

# Extraction works on markup and text, so these are never needed
BLOCKED_RESOURCE_TYPES: FrozenSet[str] = frozenset({"image", "stylesheet", "font", "media"})

# Timeouts (milliseconds). Navigation is fatal, the review section is best-effort.
NAVIGATION_TIMEOUT_MS = int(os.getenv("NAVIGATION_TIMEOUT_MS", "60000"))
BASE_READY_TIMEOUT_MS = int(os.getenv("BASE_READY_TIMEOUT_MS", "10000"))
REVIEW_SECTION_TIMEOUT_MS = int(os.getenv("REVIEW_SECTION_TIMEOUT_MS", "15000"))

# Settling after the review feed shows up: fixed pause, then poll until the
# number of review cards stops changing
SETTLE_DELAY_MS = int(os.getenv("SETTLE_DELAY_MS", "2000"))
SETTLE_INTERVAL_MS = 300
SETTLE_STABLE_CHECKS = 2
SETTLE_TIMEOUT_MS = int(os.getenv("SETTLE_TIMEOUT_MS", "5000"))

# Trimmed Chromium build shipped with the serverless bundle
CHROMIUM_EXECUTABLE_PATH = os.getenv("CHROMIUM_EXECUTABLE_PATH", "/opt/chromium/chromium")

LOCAL_LAUNCH_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-extensions",
    "--mute-audio",
    "--disable-background-networking",
    "--disable-sync",
]

SERVERLESS_LAUNCH_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--single-process",
    "--no-zygote",
    "--hide-scrollbars",
    "--ignore-certificate-errors",
]


def is_serverless() -> bool:
    """Whether we run inside a constrained serverless runtime."""
    if os.getenv("MARKETSCRAPE_ENV", "").lower() == "serverless":
        return True
    return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))


# =============================================================================
# JNE shipping fees
# =============================================================================

JNE_SEARCH_URL = "https://www.jne.co.id/api-origin"
JNE_SHIPPING_FEE_URL = "https://www.jne.co.id/shipping-fee"

# Yogyakarta
JNE_ORIGIN_CODE = os.getenv("JNE_ORIGIN_CODE", "JOG10000")

HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": ACCEPT_LANGUAGE,
}

# Request timeout (seconds)
REQUEST_TIMEOUT = 15

# Retry settings with exponential backoff. Kept short, a caller is waiting.
MAX_RETRIES = 2
RETRY_BACKOFF_BASE = 2.0
MAX_RETRY_BACKOFF = 4.0
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

# =============================================================================
# Logging
# =============================================================================

LOG_DIR = Path(os.getenv("MARKETSCRAPE_LOG_DIR", str(Path(__file__).parent.parent / "logs")))
