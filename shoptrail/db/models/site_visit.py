from dataclasses import dataclass, field
from typing import Optional, List

from shoptrail.db.models.base import BaseModel
from shoptrail.db.models.enums import SiteCategory


@dataclass(kw_only=True)
class SiteVisit(BaseModel):
    """A single page load, product or not. Appended, never mutated"""
    id: str
    url: str
    domain: str
    title: str = ""
    summary: str = ""
    tags: List[str] = field(default_factory=list)
    image: Optional[str] = None
    site_category: SiteCategory = SiteCategory.UNKNOWN
    is_product: bool = False
    product_id: Optional[str] = None
    timestamp: int

    @classmethod
    def from_dict(cls, data: dict) -> 'SiteVisit':
        data = dict(data)
        if 'site_category' in data:
            data['site_category'] = SiteCategory.parse(data['site_category'])
        return super().from_dict(data)
