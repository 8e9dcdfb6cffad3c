"""Review extraction: summary numbers, star histogram and individual reviews.

The review feed is rendered lazily by the marketplace, so on some snapshots it
is simply missing. That is fine: every value here degrades to ``None`` or an
empty list, the caller never sees an exception.

Drop policies:
    * a histogram row is kept only when star, count and percentage all parse
    * a review card is kept when it has at least a name, a comment or a rating
"""

import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from marketscrape.html_utils import (
    FieldRule,
    attr_of,
    first_match,
    safe_select_all,
    select_all_first_of,
    select_first_of,
    text_of,
)
from marketscrape.logging_config import get_logger
from marketscrape.models import IndividualReview, RatingBreakdown, ReviewSummary
from marketscrape.numbers import extract_float, extract_integer

__all__ = [
    "REVIEW_SECTION_SELECTORS",
    "REVIEW_FEED_SELECTOR",
    "REVIEW_ITEM_SELECTOR",
    "aggregate_reviews",
    "extract_rating_breakdown",
    "extract_individual_reviews",
    "parse_review_card",
    "resolve_total_reviews",
]

logger = get_logger("reviews")

REVIEW_SECTION_SELECTORS = ["#pdp_comp-review", '[data-testid="pdpReviewSection"]']

# What the renderer waits for after scrolling the review section into view
REVIEW_FEED_SELECTOR = "#review-feed"
REVIEW_ITEM_SELECTOR = "#review-feed article"

OVERALL_RATING_RULES = [
    FieldRule('[data-testid="lblOverallRating"]', lambda el: extract_float(text_of(el))),
    FieldRule(".css-p20wo7 .css-dn7ef3", lambda el: extract_float(text_of(el))),
]
# "1.234 rating • 456 ulasan"
RATING_HEADER_SELECTORS = ['[data-testid="lblRatingAndReview"]', ".css-p20wo7 .css-scw5ei-unf-heading"]
HEADER_DELIMITER = "•"
SATISFACTION_RULES = [
    FieldRule('[data-testid="lblSatisfactionPercentage"]', lambda el: extract_integer(text_of(el))),
    FieldRule(".css-p20wo7 .css-143g15z-unf-heading", lambda el: extract_integer(text_of(el))),
]
REVIEW_SUBTITLE_SELECTORS = ['[data-testid="reviewSortingSubtitle"]']
# "Menampilkan 10 dari 1.234 ulasan" / "Showing 10 of 1,234 reviews"
REVIEW_SUBTITLE_RE = re.compile(r"(?:dari|of)\s+([\d.,]+)\s+(?:ulasan|reviews?)", re.IGNORECASE)

BREAKDOWN_CONTAINER_SELECTORS = [".css-1t9sxbc", '[data-testid="ratingBreakdown"]']
BREAKDOWN_ROW_SELECTORS = [".css-10emkyv", '[data-testid="ratingBreakdownRow"]']
BREAKDOWN_STAR_SELECTORS = [".css-199yh9f", '[data-testid="lblRatingStar"]']
BREAKDOWN_COUNT_SELECTORS = [".css-myjxhx", '[data-testid="lblRatingCount"]']
BREAKDOWN_PERCENT_SELECTORS = [".css-1ngblhr", '[data-testid="lblRatingPercentage"]']
PROGRESS_BAR_SELECTOR = '[role="progressbar"]'

REVIEW_CARD_SELECTORS = [
    "#review-feed article",
    'article[data-testid="reviewCard"]',
    "article.css-ccpe8t",
]
REVIEWER_NAME_RULES = [
    FieldRule('[data-testid="lblReviewerName"]'),
    FieldRule("span.name"),
    FieldRule(".css-k4rf3m"),
]
REVIEWER_AVATAR_SELECTORS = ['img[data-testid="imgReviewerAvatar"]', "img.css-1k2kp7p", "picture img"]
LAZY_IMAGE_ATTRIBUTES = ("data-src", "data-lazy-src", "data-original")
STAR_ICON_SELECTORS = [
    '[data-testid="icnStarRating"] svg',
    '[data-testid="icnStarRating"] img',
    'img[alt="star"]',
]
REVIEW_COMMENT_RULES = [
    FieldRule('span[data-testid="lblItemUlasan"]'),
    FieldRule('[data-testid="lblItemUlasan"]'),
    FieldRule("p.css-ed1s1j-unf-heading"),
]
REVIEW_DATE_RULES = [
    FieldRule('[data-testid="lblReviewDate"]'),
    FieldRule("p.css-vqrjg4-unf-heading"),
]

MAX_STARS = 5


# =============================================================================
# Star histogram
# =============================================================================

def _row_percentage(row: Tag) -> Optional[float]:
    progress = select_first_of(row, [PROGRESS_BAR_SELECTOR])
    percentage = extract_float(attr_of(progress, "aria-valuenow"))
    if percentage is not None:
        return percentage
    text = text_of(select_first_of(row, BREAKDOWN_PERCENT_SELECTORS))
    return extract_float(text.replace("%", "")) if text else None


def extract_rating_breakdown(section: Tag) -> List[RatingBreakdown]:
    """Histogram rows that fully parse; partial rows are dropped."""
    container = select_first_of(section, BREAKDOWN_CONTAINER_SELECTORS)
    if container is None:
        return []

    breakdown: List[RatingBreakdown] = []
    for row in select_all_first_of(container, BREAKDOWN_ROW_SELECTORS):
        star = extract_integer(text_of(select_first_of(row, BREAKDOWN_STAR_SELECTORS)))
        count = extract_integer(text_of(select_first_of(row, BREAKDOWN_COUNT_SELECTORS)))
        percentage = _row_percentage(row)

        if star is not None and not 1 <= star <= MAX_STARS:
            star = None
        if star is None or count is None or percentage is None:
            logger.debug(
                f"Dropping partial breakdown row (star={star}, count={count}, percentage={percentage})"
            )
            continue
        breakdown.append(RatingBreakdown(star=star, count=count, percentage=percentage))

    return breakdown


# =============================================================================
# Individual reviews
# =============================================================================

def _avatar_url(card: Tag) -> Optional[str]:
    img = select_first_of(card, REVIEWER_AVATAR_SELECTORS)
    if img is None:
        return None
    src = attr_of(img, "src")
    if src and not src.startswith("data:"):
        return src
    # Rendered src is still the lazy-load placeholder
    for attribute in LAZY_IMAGE_ATTRIBUTES:
        lazy = attr_of(img, attribute)
        if lazy and not lazy.startswith("data:"):
            return lazy
    return None


def _star_count(card: Tag) -> Optional[int]:
    for selector in STAR_ICON_SELECTORS:
        stars = safe_select_all(card, selector)
        if stars:
            return min(len(stars), MAX_STARS)
    return None


def parse_review_card(card: Tag) -> IndividualReview:
    return IndividualReview(
        reviewer_name=first_match(card, REVIEWER_NAME_RULES),
        reviewer_avatar_url=_avatar_url(card),
        rating=_star_count(card),
        comment=first_match(card, REVIEW_COMMENT_RULES),
        date=first_match(card, REVIEW_DATE_RULES),
    )


def extract_individual_reviews(root: Tag) -> List[IndividualReview]:
    reviews: List[IndividualReview] = []
    for index, card in enumerate(select_all_first_of(root, REVIEW_CARD_SELECTORS)):
        review = parse_review_card(card)
        if not review.has_content():
            logger.debug(f"Skipping review card #{index}: no name, comment or rating")
            continue
        reviews.append(review)
    return reviews


# =============================================================================
# Summary
# =============================================================================

def _split_header(section: Tag) -> Tuple[Optional[int], Optional[int]]:
    """Parse "N rating • M ulasan" into (total_ratings, header_review_count)."""
    header = text_of(select_first_of(section, RATING_HEADER_SELECTORS))
    if not header:
        return None, None
    parts = [part.strip() for part in header.split(HEADER_DELIMITER)]
    total_ratings = extract_integer(parts[0]) if parts[0] else None
    header_reviews = extract_integer(parts[1]) if len(parts) > 1 and parts[1] else None
    return total_ratings, header_reviews


def _subtitle_review_count(section: Tag) -> Optional[int]:
    subtitle = text_of(select_first_of(section, REVIEW_SUBTITLE_SELECTORS))
    if not subtitle:
        return None
    match = REVIEW_SUBTITLE_RE.search(subtitle)
    return extract_integer(match.group(1)) if match else None


def resolve_total_reviews(
    subtitle_count: Optional[int],
    header_count: Optional[int],
    extracted_count: int,
) -> int:
    """First positive of: subtitle, header, extracted reviews; else zero."""
    for candidate in (subtitle_count, header_count, extracted_count):
        if candidate is not None and candidate > 0:
            return candidate
    return 0


def aggregate_reviews(soup: BeautifulSoup) -> ReviewSummary:
    """Build the review block of a product page."""
    summary = ReviewSummary()

    # The feed can render outside the summary section on newer layouts
    summary.individual_reviews = extract_individual_reviews(soup)

    section = select_first_of(soup, REVIEW_SECTION_SELECTORS)
    if section is None:
        logger.debug("Review section not found")
        if summary.individual_reviews:
            summary.total_reviews = resolve_total_reviews(None, None, len(summary.individual_reviews))
        return summary

    summary.overall_rating = first_match(section, OVERALL_RATING_RULES)
    summary.total_ratings, header_reviews = _split_header(section)
    summary.satisfaction_percentage = first_match(section, SATISFACTION_RULES)
    summary.rating_breakdown = extract_rating_breakdown(section)
    summary.total_reviews = resolve_total_reviews(
        _subtitle_review_count(section),
        header_reviews,
        len(summary.individual_reviews),
    )
    return summary
