"""
Auxiliary lookups that resolve an incoming observation to an existing product.

Two maps live in the store: url_to_product[url] and canonical_index[lowercase name],
both pointing at Product.id. Writes are last-writer-wins and stale keys left behind
by a product's earlier URLs or names are never cleaned up.
"""
import logging
from typing import Optional, Dict, Any

from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.models import Product, StorageKey

logger = logging.getLogger(__name__)


def canonical_key(canonical_name: str) -> str:
    return canonical_name.lower()


class IdentityIndex:
    """URL -> product id and canonical name -> product id index"""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.url_key = StorageKey.URL_TO_PRODUCT.value
        self.canonical_key = StorageKey.CANONICAL_INDEX.value
        self.products_key = StorageKey.PRODUCTS.value

    @staticmethod
    def lookup(
        products: Dict[str, Any],
        url_to_product: Dict[str, str],
        canonical_index: Dict[str, str],
        url: str,
        canonical_name: Optional[str] = None,
    ) -> Optional[str]:
        """Resolve against already loaded maps. URL wins over canonical name; ids without a product are ignored"""
        product_id = url_to_product.get(url)
        if product_id and product_id in products:
            return product_id
        if canonical_name:
            product_id = canonical_index.get(canonical_key(canonical_name))
            if product_id and product_id in products:
                return product_id
        return None

    @staticmethod
    def apply(url_to_product: Dict[str, str], canonical_index: Dict[str, str], product: Product) -> None:
        """Point both indexes at product (in place), overwriting whatever they held"""
        url_to_product[product.url] = product.id
        canonical_index[canonical_key(product.canonical_name)] = product.id

    async def load(self) -> Dict[str, Dict[str, Any]]:
        raw = await self.store.get_many([self.products_key, self.url_key, self.canonical_key])
        return {
            self.products_key: raw.get(self.products_key) or {},
            self.url_key: raw.get(self.url_key) or {},
            self.canonical_key: raw.get(self.canonical_key) or {},
        }

    async def resolve(self, url: str, canonical_name: Optional[str] = None) -> Optional[Product]:
        """Find the product an observation of url / canonical_name belongs to"""
        raw = await self.load()
        product_id = self.lookup(
            raw[self.products_key], raw[self.url_key], raw[self.canonical_key], url, canonical_name
        )
        if not product_id:
            return None
        return Product.from_dict(raw[self.products_key][product_id])

    async def update(self, product: Product) -> None:
        """Write both index entries for product"""
        raw = await self.store.get_many([self.url_key, self.canonical_key])
        url_to_product = raw.get(self.url_key) or {}
        canonical_index = raw.get(self.canonical_key) or {}
        self.apply(url_to_product, canonical_index, product)
        await self.store.set_many({self.url_key: url_to_product, self.canonical_key: canonical_index})

    async def clear(self) -> None:
        await self.store.remove([self.url_key, self.canonical_key])
