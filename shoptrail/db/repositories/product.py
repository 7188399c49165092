from typing import Optional, List

from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.repositories.base import MapRepository
from shoptrail.db.models import Product, StorageKey


class ProductRepository(MapRepository[Product]):
    """Repository for canonical products, stored as an id -> product map"""

    def __init__(self, store: KeyValueStore):
        super().__init__(store, StorageKey.PRODUCTS, Product)

    async def get_by_url(self, url: str) -> Optional[Product]:
        """Get the product whose latest observation came from url"""
        for product in await self.list_all():
            if product.url == url:
                return product
        return None

    async def get_by_ids(self, ids: List[str]) -> List[Product]:
        raw = await self.load()
        return [Product.from_dict(raw[id]) for id in ids if id in raw]
