import logging
from typing import TypeVar, Generic, Optional, List, Dict, Type, Any

from shoptrail.db.kv_store import KeyValueStore
from shoptrail.db.models import BaseModel, StorageKey

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):
    """Base repository bound to a single key of the key-value store"""

    def __init__(self, store: KeyValueStore, key: StorageKey, model_class: Type[T]):
        self.store = store
        self.key = key.value
        self.model_class = model_class

    async def clear(self) -> None:
        """Remove the whole key"""
        await self.store.remove([self.key])


class MapRepository(BaseRepository[T]):
    """Repository for a key holding a {id: record} map"""

    id_field = 'id'

    async def load(self) -> Dict[str, Any]:
        """Raw stored map"""
        return await self.store.get(self.key) or {}

    def decode(self, raw: Dict[str, Any]) -> Dict[str, T]:
        return {record_id: self.model_class.from_dict(item) for record_id, item in raw.items()}

    def put(self, raw: Dict[str, Any], model: T) -> Dict[str, Any]:
        """Place model into a raw map (in place) and return the map"""
        raw[getattr(model, self.id_field)] = model.to_dict()
        return raw

    async def get_by_id(self, id: str) -> Optional[T]:
        """Get record by ID"""
        raw = await self.load()
        return self.model_class.from_dict(raw[id]) if id in raw else None

    async def list_all(self) -> List[T]:
        """Get all records"""
        return list(self.decode(await self.load()).values())

    async def save(self, model: T) -> T:
        """Create or replace a record"""
        raw = await self.load()
        await self.store.set(self.key, self.put(raw, model))
        return model

    async def update_fields(self, id: str, updates: Dict[str, Any]) -> bool:
        """Merge a partial update into an existing record. Returns False when the record does not exist"""
        raw = await self.load()
        if id not in raw:
            return False
        required = self.model_class.required_fields()
        skipped = [k for k, v in updates.items() if v is None and k in required]
        if skipped:
            logger.warning(f"Ignoring None for required fields {skipped} of {self.key} record {id}")
        merged = {
            **raw[id],
            **{k: v for k, v in updates.items() if k != self.id_field and k not in skipped},
        }
        # Validate through the model so stored shapes stay consistent
        raw[id] = self.model_class.from_dict(merged).to_dict()
        await self.store.set(self.key, raw)
        return True

    async def delete(self, id: str) -> bool:
        """Delete a record by ID"""
        raw = await self.load()
        if id not in raw:
            return False
        del raw[id]
        await self.store.set(self.key, raw)
        return True

    async def count(self) -> int:
        return len(await self.load())


class BoundedListRepository(BaseRepository[T]):
    """Repository for a key holding a newest-first list capped at max_size"""

    sort_field = 'timestamp'

    def __init__(self, store: KeyValueStore, key: StorageKey, model_class: Type[T], max_size: int):
        super().__init__(store, key, model_class)
        self.max_size = max_size

    async def load(self) -> List[Dict[str, Any]]:
        """Raw stored list"""
        return await self.store.get(self.key) or []

    def prune(self, raw: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Sort newest-first and truncate to max_size"""
        raw = sorted(raw, key=lambda item: item.get(self.sort_field) or 0, reverse=True)
        return raw[:self.max_size]

    def appended(self, raw: List[Dict[str, Any]], model: T) -> List[Dict[str, Any]]:
        """Return a new raw list with model appended and the cap applied"""
        return self.prune(raw + [model.to_dict()])

    async def append(self, model: T) -> T:
        """Append a record, re-sorting and pruning the whole list"""
        raw = await self.load()
        await self.store.set(self.key, self.appended(raw, model))
        return model

    async def list_all(self) -> List[T]:
        """Get all records, newest first"""
        return [self.model_class.from_dict(item) for item in await self.load()]

    async def find_by(self, **filters) -> List[T]:
        """Find records whose stored fields equal the given values"""
        return [
            self.model_class.from_dict(item)
            for item in await self.load()
            if all(item.get(field) == value for field, value in filters.items())
        ]

    async def count(self) -> int:
        return len(await self.load())
