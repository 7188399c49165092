from shoptrail.db.repositories.base import BaseRepository, MapRepository, BoundedListRepository
from shoptrail.db.repositories.product import ProductRepository
from shoptrail.db.repositories.identity_index import IdentityIndex
from shoptrail.db.repositories.product_history import ProductHistoryRepository
from shoptrail.db.repositories.site_visit import VisitLedger
from shoptrail.db.repositories.site_meta import SiteMetaRepository
from shoptrail.db.repositories.youtube_review import YoutubeReviewRepository

__all__ = [
    'BaseRepository',
    'MapRepository',
    'BoundedListRepository',
    'ProductRepository',
    'IdentityIndex',
    'ProductHistoryRepository',
    'VisitLedger',
    'SiteMetaRepository',
    'YoutubeReviewRepository',
]
