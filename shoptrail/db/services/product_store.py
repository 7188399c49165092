"""
Create-or-merge storage of page observations.

Every observation becomes a SiteVisit. Product observations are also resolved
against the identity index and merged into (or create) a canonical Product.
The product write, both index updates and the history append are sent to the
store as a single batched mutation. The store offers no cross-key transactions,
so the visit append and site meta write remain separate calls.
"""
import logging
from dataclasses import dataclass
from typing import Optional, List, Dict, Any
from urllib.parse import urlparse

from shoptrail.db import config
from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.models import (
    Product,
    ProductHistory,
    SiteVisit,
    SiteMeta,
    SiteCategory,
    PageObservation,
    StorageKey,
    generate_id,
)
from shoptrail.db.models.site_meta import OBSERVED_CATEGORY_CONFIDENCE, UNKNOWN_CONFIDENCE
from shoptrail.db.repositories import (
    ProductRepository,
    IdentityIndex,
    ProductHistoryRepository,
    VisitLedger,
    SiteMetaRepository,
    YoutubeReviewRepository,
)
from shoptrail.db.services.merge import (
    merge_observation,
    new_product_from_observation,
    history_from_observation,
)
from shoptrail.db.services.site_categorizer import normalize_domain
from shoptrail.utils.sentry import monitor_errors

logger = logging.getLogger(__name__)


def extract_domain(url: str) -> str:
    """Host name of url, or "unknown" when it has none"""
    try:
        return urlparse(url).hostname or "unknown"
    except ValueError:
        return "unknown"


@dataclass
class StoreResult:
    """Outcome of storing one observation"""
    visit_id: str
    product_id: Optional[str] = None
    created: bool = False


class ProductStore:
    """Owns canonical products and applies observations to them"""

    def __init__(
        self,
        store: KeyValueStore,
        products: Optional[ProductRepository] = None,
        index: Optional[IdentityIndex] = None,
        history: Optional[ProductHistoryRepository] = None,
        visits: Optional[VisitLedger] = None,
        site_metas: Optional[SiteMetaRepository] = None,
    ):
        self.store = store
        self.products = products or ProductRepository(store)
        self.index = index or IdentityIndex(store)
        self.history = history or ProductHistoryRepository(store)
        self.visits = visits or VisitLedger(store)
        self.site_metas = site_metas or SiteMetaRepository(store)

    @monitor_errors
    async def store_page_data(self, observation: PageObservation) -> StoreResult:
        """Store one observation. Returns the resolved product id (if any) and the new visit id"""
        domain = extract_domain(observation.url)
        site_meta = await self._get_or_create_site_meta(
            normalize_domain(domain), observation.site_category, observation.timestamp
        )

        product_id = None
        created = False
        # A product needs a title to have a canonical name
        if observation.is_product and observation.title:
            product, created = await self._store_product(observation)
            product_id = product.id

        visit = SiteVisit(
            id=generate_id(),
            url=observation.url,
            domain=domain,
            title=observation.title,
            summary=observation.summary or "",
            tags=observation.tags or [],
            image=observation.main_image,
            site_category=observation.site_category or site_meta.category,
            is_product=observation.is_product,
            product_id=product_id,
            timestamp=observation.timestamp,
        )
        await self.visits.append(visit)

        logger.info(f"Stored page data for {observation.url} (product={product_id}, visit={visit.id})")
        return StoreResult(visit_id=visit.id, product_id=product_id, created=created)

    async def _store_product(self, observation: PageObservation):
        keys = [
            StorageKey.PRODUCTS.value,
            StorageKey.URL_TO_PRODUCT.value,
            StorageKey.CANONICAL_INDEX.value,
            StorageKey.PRODUCT_HISTORY.value,
        ]
        raw = await self.store.get_many(keys)
        products_raw = raw.get(StorageKey.PRODUCTS.value) or {}
        url_to_product = raw.get(StorageKey.URL_TO_PRODUCT.value) or {}
        canonical_index = raw.get(StorageKey.CANONICAL_INDEX.value) or {}
        history_raw = raw.get(StorageKey.PRODUCT_HISTORY.value) or []

        existing_id = IdentityIndex.lookup(
            products_raw, url_to_product, canonical_index, observation.url, observation.title
        )
        if existing_id:
            product = merge_observation(Product.from_dict(products_raw[existing_id]), observation)
            logger.info(f"Merged observation into product {product.id} (visit #{product.visit_count})")
        else:
            product = new_product_from_observation(observation)
            logger.info(f"Created product {product.id}: {product.canonical_name}")

        entry = history_from_observation(product, observation)
        await self._apply_product_mutation(
            product, entry, products_raw, url_to_product, canonical_index, history_raw
        )
        return product, existing_id is None

    async def _apply_product_mutation(
        self,
        product: Product,
        entry: ProductHistory,
        products_raw: Dict[str, Any],
        url_to_product: Dict[str, str],
        canonical_index: Dict[str, str],
        history_raw: List[Dict[str, Any]],
    ) -> None:
        """Write product, both indexes and the history entry in one store call"""
        self.products.put(products_raw, product)
        IdentityIndex.apply(url_to_product, canonical_index, product)
        await self.store.set_many({
            StorageKey.PRODUCTS.value: products_raw,
            StorageKey.URL_TO_PRODUCT.value: url_to_product,
            StorageKey.CANONICAL_INDEX.value: canonical_index,
            StorageKey.PRODUCT_HISTORY.value: self.history.appended(history_raw, entry),
        })

    async def _get_or_create_site_meta(
        self, domain: str, site_category: Optional[SiteCategory], timestamp: int
    ) -> SiteMeta:
        existing = await self.site_metas.get_by_id(domain)
        if existing:
            return existing
        meta = SiteMeta(
            domain=domain,
            category=site_category or SiteCategory.UNKNOWN,
            first_categorized=timestamp,
            last_updated=timestamp,
            confidence=OBSERVED_CATEGORY_CONFIDENCE if site_category else UNKNOWN_CONFIDENCE,
        )
        await self.site_metas.save(meta)
        return meta

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        return await self.products.get_by_id(product_id)

    async def get_all(self) -> List[Product]:
        return await self.products.list_all()

    async def update_fields(self, product_id: str, updates: Dict[str, Any]) -> bool:
        """Apply a partial update. Returns False (and creates nothing) when the product does not exist"""
        updated = await self.products.update_fields(product_id, updates)
        if not updated:
            logger.warning(f"Product {product_id} not found, nothing updated")
        return updated

    async def get_product_history(self, product_id: str) -> List[ProductHistory]:
        return await self.history.list_by_product(product_id)

    async def get_recent_site_visits(self, limit: int = config.RECENT_VISITS_LIMIT) -> List[SiteVisit]:
        return await self.visits.get_recent(limit)

    async def get_site_visits_by_category(self, category: SiteCategory) -> List[SiteVisit]:
        return await self.visits.get_by_category(category)

    async def get_all_site_visits(self, products_only: bool = False) -> List[SiteVisit]:
        return await self.visits.get_all(products_only)

    async def get_last_visit_time(self, url: str) -> Optional[int]:
        return await self.visits.last_visit_time(url)

    async def get_storage_stats(self) -> Dict[str, Any]:
        """Record counts per key plus total bytes in use"""
        return {
            "product_count": await self.products.count(),
            "history_count": await self.history.count(),
            "visit_count": await self.visits.count(),
            "site_meta_count": await self.site_metas.count(),
            "review_count": await YoutubeReviewRepository(self.store).count(),
            "bytes_in_use": await self.store.bytes_in_use(),
        }

    async def clear_all_data(self) -> None:
        """Remove products, history, visits, site metas and both indexes"""
        await self.store.remove([
            StorageKey.PRODUCTS.value,
            StorageKey.PRODUCT_HISTORY.value,
            StorageKey.SITE_VISITS.value,
            StorageKey.SITE_METAS.value,
            StorageKey.URL_TO_PRODUCT.value,
            StorageKey.CANONICAL_INDEX.value,
        ])
        logger.info("All storage data cleared")
