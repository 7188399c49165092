"""
Storage configuration and connection management.
"""
import os
from typing import Optional

from dotenv import load_dotenv
from supabase import AsyncClient, acreate_client

load_dotenv()

# Supabase configuration
SUPABASE_URL = os.getenv('SUPABASE_URL')
SUPABASE_KEY = os.getenv('SUPABASE_KEY')
SUPABASE_KV_TABLE = os.getenv('SUPABASE_KV_TABLE', 'kv_store')

# "memory" or "supabase"
STORE_BACKEND = os.getenv('STORE_BACKEND', 'memory').lower()

# Storage limits
MAX_PRODUCT_HISTORY = int(os.getenv('MAX_PRODUCT_HISTORY', '1000'))
MAX_SITE_VISITS = int(os.getenv('MAX_SITE_VISITS', '500'))
MAX_YOUTUBE_REVIEWS = int(os.getenv('MAX_YOUTUBE_REVIEWS', '200'))
RESCAN_INTERVAL_HOURS = int(os.getenv('RESCAN_INTERVAL_HOURS', '72'))
RESCAN_INTERVAL_MS = RESCAN_INTERVAL_HOURS * 60 * 60 * 1000
SITE_META_CACHE_DAYS = int(os.getenv('SITE_META_CACHE_DAYS', '90'))
RECENT_VISITS_LIMIT = int(os.getenv('RECENT_VISITS_LIMIT', '100'))
MAX_SEARCH_RESULTS = int(os.getenv('MAX_SEARCH_RESULTS', '10'))


async def get_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> AsyncClient:
    """
    Open an async Supabase client for the key-value table.

    Args:
        url: Project URL, defaults to SUPABASE_URL
        key: Service key, defaults to SUPABASE_KEY

    Raises:
        ValueError: If no URL or key is available
    """
    url = url or SUPABASE_URL
    key = key or SUPABASE_KEY
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set (environment or .env) to use the supabase backend")
    return await acreate_client(url, key)


async def get_store(backend: Optional[str] = None):
    """
    Build the configured key-value store backend.

    Args:
        backend: Override for STORE_BACKEND ("memory" or "supabase")

    Raises:
        ValueError: If the backend name is unknown or Supabase credentials are missing
    """
    from shoptrail.db.kv_store import InMemoryKeyValueStore, SupabaseKeyValueStore

    backend = (backend or STORE_BACKEND).lower()
    if backend == 'memory':
        return InMemoryKeyValueStore()
    if backend == 'supabase':
        client = await get_supabase_client()
        return SupabaseKeyValueStore(client, SUPABASE_KV_TABLE)
    raise ValueError(f"Unknown store backend: {backend}")

# Database connection string for migrations
DATABASE_URL = os.getenv('DATABASE_URL')
