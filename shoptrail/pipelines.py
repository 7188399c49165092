# Item pipelines feeding scraped pages and reviews into the shopping store.
#
# Don't forget to add your pipeline to the ITEM_PIPELINES setting
# See: https://docs.scrapy.org/en/latest/topics/item-pipeline.html

import asyncio
import logging

from itemadapter import ItemAdapter
from typing import Optional, Dict, Any, List
from scrapy.exceptions import DropItem

from shoptrail.items import YoutubeReviewItem
from shoptrail.db.config import get_store
from shoptrail.db.models import PageObservation, now_ms
from shoptrail.db.models.observation import as_list
from shoptrail.db.services import ProductStore, RescanGate, ReviewLinker, ReviewStore
from shoptrail.utils.sentry import capture_error

logger = logging.getLogger(__name__)


def _is_review(item) -> bool:
    return isinstance(item, YoutubeReviewItem) or bool(ItemAdapter(item).get('video_id'))


class ObservationValidationPipeline:
    """Pipeline for validating and cleaning observations and reviews."""

    def __init__(self):
        self.items_processed = 0
        self.items_dropped = 0

    def process_item(self, item, spider=None):
        adapter = ItemAdapter(item)
        required_field = 'video_id' if _is_review(item) else 'url'
        if not adapter.get(required_field):
            self.items_dropped += 1
            raise DropItem(f"Missing required field: {required_field}")

        if _is_review(item):
            if adapter.get('video_title'):
                adapter['video_title'] = self._clean_text(adapter['video_title'])
        else:
            adapter['title'] = self._clean_text(adapter.get('title') or "")
            adapter['images'] = self._validate_image_urls(as_list(adapter.get('images')) or [])
            if adapter.get('tags'):
                adapter['tags'] = [self._clean_text(str(tag)) for tag in as_list(adapter['tags']) or []]
            if not adapter.get('timestamp'):
                adapter['timestamp'] = now_ms()

        self.items_processed += 1
        return item

    def _clean_text(self, text: str) -> str:
        """Clean and normalize text fields."""
        if not text:
            return ""
        return " ".join(str(text).strip().split())

    def _validate_image_urls(self, urls: list) -> List[str]:
        """Keep only http(s) image URLs."""
        valid_urls = []
        for url in urls:
            if url and isinstance(url, str) and url.strip().startswith(('http://', 'https://')):
                valid_urls.append(url.strip())
        return valid_urls

    def close_spider(self, spider=None):
        """Log pipeline statistics when spider closes."""
        logger.info(f"Pipeline processed {self.items_processed} items")
        logger.info(f"Pipeline dropped {self.items_dropped} items")


class StoragePipeline:
    """Pipeline storing observations and reviews, then linking reviews to products"""

    def __init__(self, respect_rescan_gate: bool = True, store=None):
        self.respect_rescan_gate = respect_rescan_gate
        self.store = store
        self.product_store: Optional[ProductStore] = None
        self.review_store: Optional[ReviewStore] = None
        self.rescan_gate: Optional[RescanGate] = None
        self.review_linker: Optional[ReviewLinker] = None
        self.stats: Dict[str, int] = {'observations': 0, 'reviews': 0, 'skipped': 0, 'failed': 0}
        self._lock = asyncio.Lock()

    @classmethod
    def from_crawler(cls, crawler):
        return cls(respect_rescan_gate=crawler.settings.getbool('RESCAN_GATE_ENABLED', True))

    async def _ensure_services(self) -> None:
        if self.product_store:
            return
        if self.store is None:
            self.store = await get_store()
        self.product_store = ProductStore(self.store)
        self.review_store = ReviewStore(self.store)
        self.rescan_gate = RescanGate(self.product_store.visits)
        self.review_linker = ReviewLinker(self.product_store.products, self.review_store.reviews)

    async def process_item(self, item, spider=None):
        adapter = ItemAdapter(item)
        is_review = _is_review(item)

        # Scrapy runs async process_item calls concurrently; each store call is a
        # read-modify-write of whole keys, so items are stored one at a time
        async with self._lock:
            await self._ensure_services()
            try:
                if is_review:
                    await self._store_review(adapter.asdict())
                else:
                    await self._store_observation(item, adapter)
            except DropItem:
                raise
            except Exception as e:
                # The host keeps crawling; the data is treated as temporarily unavailable
                self.stats['failed'] += 1
                logger.error(f"Error storing item: {str(e)}")
                capture_error(e, {'item': repr(adapter.asdict())[:1000]})
        return item

    async def _store_observation(self, item, adapter: ItemAdapter) -> None:
        url = adapter['url']
        if self.respect_rescan_gate and not await self.rescan_gate.should_scan(url):
            self.stats['skipped'] += 1
            raise DropItem(f"Recently visited, skipping: {url}")

        result = await self.product_store.store_page_data(PageObservation.from_scraped_item(item))
        self.stats['observations'] += 1
        logger.debug(f"Stored {url} as visit {result.visit_id}")

    async def _store_review(self, fields: Dict[str, Any]) -> List[str]:
        review_id = await self.review_store.save_review(fields)
        self.stats['reviews'] += 1
        return await self.review_linker.link_review(review_id)

    def close_spider(self, spider=None):
        """Log statistics and release resources when spider closes"""
        logger.info(f"Storage pipeline stats: {self.stats}")
        self.product_store = None
        self.review_store = None
        self.rescan_gate = None
        self.review_linker = None
