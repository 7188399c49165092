from typing import Optional, List

from shoptrail.db import config
from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.repositories.base import BoundedListRepository
from shoptrail.db.models import SiteVisit, SiteCategory, StorageKey


class VisitLedger(BoundedListRepository[SiteVisit]):
    """Repository for the time-ordered log of page visits"""

    def __init__(self, store: KeyValueStore, max_size: int = config.MAX_SITE_VISITS):
        super().__init__(store, StorageKey.SITE_VISITS, SiteVisit, max_size)

    async def get_recent(self, limit: int = config.RECENT_VISITS_LIMIT) -> List[SiteVisit]:
        """Most recent visits first"""
        raw = self.prune(await self.load())
        return [SiteVisit.from_dict(item) for item in raw[:limit]]

    async def get_by_category(self, category: SiteCategory) -> List[SiteVisit]:
        return await self.find_by(site_category=SiteCategory.parse(category).value)

    async def get_all(self, products_only: bool = False) -> List[SiteVisit]:
        if products_only:
            return await self.find_by(is_product=True)
        return await self.list_all()

    async def last_visit_time(self, url: str) -> Optional[int]:
        """Timestamp of the most recent visit to exactly this URL"""
        timestamps = [item.get('timestamp') or 0 for item in await self.load() if item.get('url') == url]
        return max(timestamps) if timestamps else None
