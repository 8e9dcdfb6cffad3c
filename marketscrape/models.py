"""Data models for scraped products, reviews and shipping options."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

__all__ = [
    "ProductInfo",
    "StoreInfo",
    "RatingBreakdown",
    "IndividualReview",
    "ReviewSummary",
    "ScrapedProductData",
    "ShippingOption",
]


@dataclass
class ProductInfo:
    """Core listing fields. Every scalar may be missing on a given page."""

    title: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)
    sold_count: Optional[int] = None
    stock: Optional[int] = None
    price: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "imageUrls": list(self.image_urls),
            "soldCount": self.sold_count,
            "stock": self.stock,
            "price": self.price,
        }


@dataclass
class StoreInfo:
    """The seller's shop card and shipment origin."""

    name: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[float] = None
    avatar_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "location": self.location,
            "rating": self.rating,
            "avatarUrl": self.avatar_url,
        }


@dataclass
class RatingBreakdown:
    """One row of the star histogram. Only built when all three values parsed."""

    star: int
    count: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {"star": self.star, "count": self.count, "percentage": self.percentage}


@dataclass
class IndividualReview:
    reviewer_name: Optional[str] = None
    reviewer_avatar_url: Optional[str] = None
    rating: Optional[int] = None
    comment: Optional[str] = None
    date: Optional[str] = None

    def has_content(self) -> bool:
        """A review is worth keeping if it has a name, a comment or a rating."""
        return any(v is not None for v in (self.reviewer_name, self.comment, self.rating))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reviewerName": self.reviewer_name,
            "reviewerAvatarUrl": self.reviewer_avatar_url,
            "rating": self.rating,
            "comment": self.comment,
            "date": self.date,
        }


@dataclass
class ReviewSummary:
    overall_rating: Optional[float] = None
    total_ratings: Optional[int] = None
    total_reviews: Optional[int] = None
    satisfaction_percentage: Optional[int] = None
    rating_breakdown: List[RatingBreakdown] = field(default_factory=list)
    individual_reviews: List[IndividualReview] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallRating": self.overall_rating,
            "totalRatings": self.total_ratings,
            "totalReviews": self.total_reviews,
            "satisfactionPercentage": self.satisfaction_percentage,
            "ratingBreakdown": [row.to_dict() for row in self.rating_breakdown],
            "individualReviews": [review.to_dict() for review in self.individual_reviews],
        }


@dataclass
class ScrapedProductData:
    """Everything extracted from one product page.

    Built fresh per request and returned directly; never cached.
    """

    product: ProductInfo = field(default_factory=ProductInfo)
    store: StoreInfo = field(default_factory=StoreInfo)
    reviews: ReviewSummary = field(default_factory=ReviewSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "store": self.store.to_dict(),
            "reviews": self.reviews.to_dict(),
        }


@dataclass
class ShippingOption:
    """One carrier service row from the fee table."""

    service: str
    price: int
    etd: str

    def to_dict(self) -> Dict[str, Any]:
        return {"service": self.service, "price": self.price, "etd": self.etd}
