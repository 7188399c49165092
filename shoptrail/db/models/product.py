from dataclasses import dataclass, field
from typing import Optional, List

from shoptrail.db.models.base import BaseModel
from shoptrail.db.models.enums import ProductCondition


@dataclass(kw_only=True)
class Product(BaseModel):
    """Canonical product, consolidated across every visit that resolved to it"""
    id: str
    canonical_name: str

    # Latest observation
    url: str
    title: str
    price: Optional[str] = None
    discount: Optional[str] = None
    condition: ProductCondition = ProductCondition.UNKNOWN
    category: str = "other"
    summary: Optional[str] = None
    pros: Optional[List[str]] = None
    cons: Optional[List[str]] = None
    image: Optional[str] = None

    # Tracking
    first_seen: int
    last_seen: int
    visit_count: int = 1
    lowest_price: Optional[str] = None
    lowest_price_url: Optional[str] = None
    linked_review_ids: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> 'Product':
        """Create Product instance from a stored dictionary"""
        data = dict(data)
        if 'condition' in data:
            data['condition'] = ProductCondition.parse(data['condition'])
        if data.get('linked_review_ids') is None:
            data['linked_review_ids'] = []
        return super().from_dict(data)


@dataclass(kw_only=True)
class ProductHistory(BaseModel):
    """One immutable product observation, linked to Product.id"""
    product_id: str
    url: str
    title: str
    price: Optional[str] = None
    discount: Optional[str] = None
    condition: ProductCondition = ProductCondition.UNKNOWN
    timestamp: int

    @classmethod
    def from_dict(cls, data: dict) -> 'ProductHistory':
        data = dict(data)
        if 'condition' in data:
            data['condition'] = ProductCondition.parse(data['condition'])
        return super().from_dict(data)
