import logging
from typing import Optional, List, Dict, Any

from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.models import YoutubeReview
from shoptrail.db.repositories import YoutubeReviewRepository

logger = logging.getLogger(__name__)


class ReviewStore:
    """Storage of video reviews, upserted by video_id"""

    def __init__(self, store: KeyValueStore, reviews: Optional[YoutubeReviewRepository] = None):
        self.reviews = reviews or YoutubeReviewRepository(store)

    async def save_review(self, fields: Dict[str, Any], now: Optional[int] = None) -> str:
        """Create or update the review for fields['video_id'] and return its id"""
        return await self.reviews.save_review(fields, now)

    async def get_all_reviews(self) -> List[YoutubeReview]:
        return await self.reviews.list_all()

    async def get_review(self, review_id: str) -> Optional[YoutubeReview]:
        return await self.reviews.get_by_id(review_id)

    async def get_review_by_video_id(self, video_id: str) -> Optional[YoutubeReview]:
        return await self.reviews.get_by_video_id(video_id)

    async def get_reviews_by_category(self, category: str) -> List[YoutubeReview]:
        return await self.reviews.get_by_category(category)

    async def get_reviews_by_sentiment(self, sentiment: str) -> List[YoutubeReview]:
        return await self.reviews.get_by_sentiment(sentiment)

    async def delete_review(self, review_id: str) -> bool:
        deleted = await self.reviews.delete(review_id)
        if deleted:
            logger.info(f"Deleted review {review_id}")
        return deleted

    async def clear_all_reviews(self) -> None:
        await self.reviews.clear()
        logger.info("All reviews cleared")

    async def get_review_stats(self) -> Dict[str, Any]:
        reviews = await self.reviews.list_all()
        by_category: Dict[str, int] = {}
        by_sentiment: Dict[str, int] = {}
        for review in reviews:
            category = review.product_category or "unknown"
            sentiment = review.overall_sentiment or "unknown"
            by_category[category] = by_category.get(category, 0) + 1
            by_sentiment[sentiment] = by_sentiment.get(sentiment, 0) + 1
        return {
            "total_reviews": len(reviews),
            "by_category": by_category,
            "by_sentiment": by_sentiment,
        }
