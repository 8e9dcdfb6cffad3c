"""Centralized configuration for the scraper web API."""

import os

# Flask app settings (allow env overrides)
# Hosting platforms set PORT dynamically; fall back to FLASK_PORT or 5000 for local.
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"

# Write JSONL scrape logs next to the app (disable on read-only filesystems)
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "True").lower() == "true"
