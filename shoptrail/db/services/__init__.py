from shoptrail.db.services.product_store import ProductStore, StoreResult
from shoptrail.db.services.rescan_gate import RescanGate
from shoptrail.db.services.review_linker import ReviewLinker, names_match, normalize_canonical_name
from shoptrail.db.services.review_store import ReviewStore
from shoptrail.db.services.site_categorizer import SiteCategorizer
from shoptrail.db.services.browsing_insights import BrowsingInsights

__all__ = [
    'ProductStore',
    'StoreResult',
    'RescanGate',
    'ReviewLinker',
    'names_match',
    'normalize_canonical_name',
    'ReviewStore',
    'SiteCategorizer',
    'BrowsingInsights',
]
