import time
import uuid
from dataclasses import dataclass, fields, MISSING
from enum import Enum


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    """Generate a random UUID4 string identifier."""
    return str(uuid.uuid4())


@dataclass(kw_only=True)
class BaseModel:
    """Base model with dict conversion shared by all stored entities"""

    def to_dict(self) -> dict:
        """Convert model to a JSON-serializable dictionary, dropping unset fields"""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, BaseModel):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [item.to_dict() if isinstance(item, BaseModel) else item for item in value]
            elif isinstance(value, Enum):
                value = value.value
            data[f.name] = value
        return data

    @classmethod
    def required_fields(cls) -> set:
        """Names of fields without a default"""
        return {f.name for f in fields(cls) if f.default is MISSING and f.default_factory is MISSING}

    @classmethod
    def from_dict(cls, data: dict) -> 'BaseModel':
        """Create model instance from dictionary, ignoring keys the model does not declare"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
