from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.repositories.base import MapRepository
from shoptrail.db.models import SiteMeta, StorageKey


class SiteMetaRepository(MapRepository[SiteMeta]):
    """Repository for per-domain categorization cache, keyed by normalized domain"""

    id_field = 'domain'

    def __init__(self, store: KeyValueStore):
        super().__init__(store, StorageKey.SITE_METAS, SiteMeta)
