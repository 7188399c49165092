from shoptrail.db.models.base import BaseModel, now_ms, generate_id
from shoptrail.db.models.enums import SiteCategory, ProductCondition, ReviewType, StorageKey
from shoptrail.db.models.product import Product, ProductHistory
from shoptrail.db.models.site_visit import SiteVisit
from shoptrail.db.models.site_meta import SiteMeta
from shoptrail.db.models.youtube_review import YoutubeReview, ReviewedProduct
from shoptrail.db.models.observation import PageObservation

__all__ = [
    'BaseModel',
    'now_ms',
    'generate_id',
    'SiteCategory',
    'ProductCondition',
    'ReviewType',
    'StorageKey',
    'Product',
    'ProductHistory',
    'SiteVisit',
    'SiteMeta',
    'YoutubeReview',
    'ReviewedProduct',
    'PageObservation',
]
