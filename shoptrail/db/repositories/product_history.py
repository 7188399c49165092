from typing import List

from shoptrail.db import config
from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.repositories.base import BoundedListRepository
from shoptrail.db.models import ProductHistory, StorageKey


class ProductHistoryRepository(BoundedListRepository[ProductHistory]):
    """Repository for append-only product observations"""

    def __init__(self, store: KeyValueStore, max_size: int = config.MAX_PRODUCT_HISTORY):
        super().__init__(store, StorageKey.PRODUCT_HISTORY, ProductHistory, max_size)

    async def list_by_product(self, product_id: str) -> List[ProductHistory]:
        """List history entries for a product, most recent first"""
        return await self.find_by(product_id=product_id)
