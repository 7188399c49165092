"""
Key-value store contract and its backends.

Every value crossing the store is JSON. Operations are atomic per key only;
there are no cross-key transactions.
"""
import copy
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from supabase import AsyncClient

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Abstract persistent mapping from string key to JSON value"""

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default"""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value"""

    @abstractmethod
    async def remove(self, keys: Iterable[str]) -> None:
        """Remove keys; missing keys are ignored"""

    @abstractmethod
    async def bytes_in_use(self) -> int:
        """Approximate storage footprint in bytes"""

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Return {key: value} for the keys that exist"""
        result = {}
        for key in keys:
            value = await self.get(key)
            if value is not None:
                result[key] = value
        return result

    async def set_many(self, values: Dict[str, Any]) -> None:
        """Write several keys in one logical call"""
        for key, value in values.items():
            await self.set(key, value)


def _encoded_size(key: str, value: Any) -> int:
    return len(key.encode('utf-8')) + len(json.dumps(value, ensure_ascii=False).encode('utf-8'))


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Values are copied in and out so callers never share state with it"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.loads(json.dumps(value))

    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so non-serializable values fail here, like a real store
        self._data[key] = json.loads(json.dumps(value))

    async def remove(self, keys: Iterable[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        for key in keys:
            self._data.pop(key, None)

    async def bytes_in_use(self) -> int:
        return sum(_encoded_size(key, value) for key, value in self._data.items())


class SupabaseKeyValueStore(KeyValueStore):
    """Store backed by a single Supabase table with (key text primary key, value jsonb) rows"""

    def __init__(self, supabase: AsyncClient, table_name: str = "kv_store"):
        self.supabase = supabase
        self.table_name = table_name

    async def get(self, key: str, default: Any = None) -> Any:
        result = await self.supabase.table(self.table_name).select("value").eq("key", key).execute()
        return result.data[0]["value"] if result.data else default

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        keys = list(keys)
        if not keys:
            return {}
        result = await self.supabase.table(self.table_name).select("key,value").in_("key", keys).execute()
        return {row["key"]: row["value"] for row in result.data if row.get("value") is not None}

    async def set(self, key: str, value: Any) -> None:
        await self.set_many({key: value})

    async def set_many(self, values: Dict[str, Any]) -> None:
        """Upsert every key in a single request"""
        if not values:
            return
        updated_at = datetime.now(timezone.utc).isoformat()
        rows = [{"key": key, "value": value, "updated_at": updated_at} for key, value in values.items()]
        await self.supabase.table(self.table_name).upsert(rows, on_conflict="key").execute()
        logger.debug(f"Upserted {len(rows)} keys into {self.table_name}")

    async def remove(self, keys: Iterable[str]) -> None:
        if isinstance(keys, str):
            keys = [keys]
        keys = list(keys)
        if not keys:
            return
        await self.supabase.table(self.table_name).delete().in_("key", keys).execute()

    async def bytes_in_use(self) -> int:
        result = await self.supabase.table(self.table_name).select("key,value").execute()
        return sum(_encoded_size(row["key"], row.get("value")) for row in result.data)
