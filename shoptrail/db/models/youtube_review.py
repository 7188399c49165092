from dataclasses import dataclass, field
from typing import Optional, List, Dict

from shoptrail.db.models.base import BaseModel
from shoptrail.db.models.enums import ReviewType


@dataclass(kw_only=True)
class ReviewedProduct(BaseModel):
    """One product discussed in a comparison (versus / roundup) review"""
    product_name: Optional[str] = None
    canonical_product_name: Optional[str] = None
    pros: Optional[List[str]] = None
    cons: Optional[List[str]] = None
    verdict: Optional[str] = None


@dataclass(kw_only=True)
class YoutubeReview(BaseModel):
    """Externally sourced video review, naturally keyed by video_id"""
    id: str
    video_id: str
    video_title: str = ""
    video_url: Optional[str] = None
    channel_name: Optional[str] = None
    thumbnail_url: Optional[str] = None
    review_type: ReviewType = ReviewType.SINGLE_REVIEW

    # Single review
    product_name: Optional[str] = None
    canonical_product_name: Optional[str] = None
    product_category: Optional[str] = None
    review_summary: Optional[str] = None
    pros: Optional[List[str]] = None
    cons: Optional[List[str]] = None
    overall_sentiment: Optional[str] = None

    # Comparison
    products: Optional[List[ReviewedProduct]] = None
    comparison_summary: Optional[str] = None
    winner: Optional[str] = None

    affiliate_links: List[Dict] = field(default_factory=list)
    watched_at: int
    first_seen: int

    @classmethod
    def from_dict(cls, data: dict) -> 'YoutubeReview':
        """Create YoutubeReview from a stored dictionary"""
        data = dict(data)
        try:
            data['review_type'] = ReviewType(data.get('review_type') or ReviewType.SINGLE_REVIEW)
        except ValueError:
            data['review_type'] = ReviewType.SINGLE_REVIEW
        if data.get('products') is not None:
            data['products'] = [
                p if isinstance(p, ReviewedProduct) else ReviewedProduct.from_dict(p)
                for p in data['products']
                if isinstance(p, (dict, ReviewedProduct))
            ]
        if data.get('affiliate_links') is None:
            data['affiliate_links'] = []
        return super().from_dict(data)

    def candidate_canonical_names(self) -> List[str]:
        """Canonical product names this review talks about, depending on its shape"""
        if self.review_type == ReviewType.SINGLE_REVIEW:
            return [self.canonical_product_name] if self.canonical_product_name else []
        return [p.canonical_product_name for p in self.products or [] if p.canonical_product_name]
