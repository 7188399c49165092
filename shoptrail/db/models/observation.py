from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from itemadapter import ItemAdapter

from shoptrail.db.models.base import BaseModel, now_ms
from shoptrail.db.models.enums import SiteCategory, ProductCondition


def as_list(value) -> Optional[List]:
    """Scraped list field as a list; a bare value becomes a one-element list, empty becomes None"""
    if value is None or value == "":
        return None
    if isinstance(value, (list, tuple, set)):
        return [v for v in value if v not in (None, "")] or None
    return [value]


def coerce_timestamp(value) -> int:
    """Convert a scraped timestamp (epoch ms, datetime or ISO string) to epoch ms"""
    if isinstance(value, bool):
        return now_ms()
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, str) and value.strip():
        try:
            # Try ISO format first
            if 'T' in value:
                return int(datetime.fromisoformat(value).timestamp() * 1000)
            # Common format like '2023-12-25 14:30:00'
            return int(datetime.strptime(value, '%Y-%m-%d %H:%M:%S').timestamp() * 1000)
        except ValueError:
            pass
    return now_ms()


@dataclass(kw_only=True)
class PageObservation(BaseModel):
    """One scraped snapshot of a page, as handed over by the scraper"""
    url: str
    title: str = ""
    timestamp: int = field(default_factory=now_ms)
    is_product: bool = False
    product_price: Optional[str] = None
    product_discount: Optional[str] = None
    product_condition: Optional[ProductCondition] = None
    product_category: Optional[str] = None
    product_summary: Optional[str] = None
    product_pros: Optional[List[str]] = None
    product_cons: Optional[List[str]] = None
    images: List[str] = field(default_factory=list)
    site_category: Optional[SiteCategory] = None
    tags: Optional[List[str]] = None
    summary: Optional[str] = None

    @classmethod
    def from_scraped_item(cls, item) -> 'PageObservation':
        """Create PageObservation from a scraped item or plain dict"""
        adapter = ItemAdapter(item)
        condition = adapter.get('product_condition')
        site_category = adapter.get('site_category')
        price = adapter.get('product_price')
        return cls(
            url=adapter['url'],
            title=adapter.get('title') or "",
            timestamp=coerce_timestamp(adapter.get('timestamp')),
            is_product=bool(adapter.get('is_product')),
            product_price=str(price) if price not in (None, "") else None,
            product_discount=adapter.get('product_discount') or None,
            product_condition=ProductCondition.parse(condition) if condition else None,
            product_category=adapter.get('product_category') or None,
            product_summary=adapter.get('product_summary') or None,
            product_pros=as_list(adapter.get('product_pros')),
            product_cons=as_list(adapter.get('product_cons')),
            images=as_list(adapter.get('images')) or [],
            site_category=SiteCategory.parse(site_category) if site_category else None,
            tags=as_list(adapter.get('tags')),
            summary=adapter.get('summary') or None,
        )

    @property
    def main_image(self) -> Optional[str]:
        return self.images[0] if self.images else None
