"""Exception types raised by the scraping pipeline.

Each carries the HTTP status the web layer should answer with. Field-level
extraction problems never raise; they resolve to ``None`` where they happen.
"""

from typing import Optional

__all__ = [
    "ScrapeError",
    "ValidationError",
    "ResolutionError",
    "RenderError",
    "FetchError",
]


class ScrapeError(Exception):
    """Base class for errors that end a scrape request."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ScrapeError):
    """Missing or invalid caller input."""

    status_code = 400


class ResolutionError(ScrapeError):
    """A city or carrier destination could not be determined.

    400 when the address gives no usable city, 404 when the carrier knows no
    destination for it.
    """

    status_code = 400


class RenderError(ScrapeError):
    """Browser launch, navigation timeout or crash."""

    status_code = 500


class FetchError(ScrapeError):
    """An upstream page could not be fetched or no longer parses."""

    status_code = 500
