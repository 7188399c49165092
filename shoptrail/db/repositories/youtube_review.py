import logging
from typing import Optional, List, Dict, Any

from shoptrail.db import config
from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.repositories.base import BoundedListRepository
from shoptrail.db.models import YoutubeReview, StorageKey, now_ms, generate_id

logger = logging.getLogger(__name__)


class YoutubeReviewRepository(BoundedListRepository[YoutubeReview]):
    """Repository for video reviews, newest watched first, unique by video_id"""

    sort_field = 'watched_at'

    def __init__(self, store: KeyValueStore, max_size: int = config.MAX_YOUTUBE_REVIEWS):
        super().__init__(store, StorageKey.YOUTUBE_REVIEWS, YoutubeReview, max_size)

    async def save_review(self, fields: Dict[str, Any], now: Optional[int] = None) -> str:
        """Create or update the review for fields['video_id']. Returns the review id"""
        now = now if now is not None else now_ms()
        video_id = fields.get('video_id')
        if not video_id:
            raise ValueError("video_id is required to save a review")

        # id and first_seen are owned by the store
        incoming = {k: v for k, v in fields.items() if k not in ('id', 'first_seen') and v is not None}
        raw = await self.load()

        for index, existing in enumerate(raw):
            if existing.get('video_id') == video_id:
                merged = {**existing, **incoming, 'watched_at': now}
                raw[index] = YoutubeReview.from_dict(merged).to_dict()
                await self.store.set(self.key, self.prune(raw))
                logger.info(f"Updated review {existing['id']} for video {video_id}")
                return existing['id']

        review = YoutubeReview.from_dict({
            **incoming,
            'id': generate_id(),
            'watched_at': incoming.get('watched_at') or now,
            'first_seen': now,
        })
        pruned = self.appended(raw, review)
        if len(raw) + 1 > len(pruned):
            logger.info(f"Trimmed reviews from {len(raw) + 1} to {len(pruned)}")
        await self.store.set(self.key, pruned)
        logger.info(f"Saved new review {review.id} for video {video_id}")
        return review.id

    async def get_by_id(self, review_id: str) -> Optional[YoutubeReview]:
        for item in await self.load():
            if item.get('id') == review_id:
                return YoutubeReview.from_dict(item)
        return None

    async def get_by_video_id(self, video_id: str) -> Optional[YoutubeReview]:
        found = await self.find_by(video_id=video_id)
        return found[0] if found else None

    async def get_by_category(self, category: str) -> List[YoutubeReview]:
        return await self.find_by(product_category=category)

    async def get_by_sentiment(self, sentiment: str) -> List[YoutubeReview]:
        return await self.find_by(overall_sentiment=sentiment)

    async def delete(self, review_id: str) -> bool:
        """Delete a review by id"""
        raw = await self.load()
        remaining = [item for item in raw if item.get('id') != review_id]
        if len(remaining) == len(raw):
            return False
        await self.store.set(self.key, remaining)
        return True
