from dataclasses import dataclass
from typing import Optional

from shoptrail.db.models.base import BaseModel
from shoptrail.db.models.enums import SiteCategory

# Confidence provenance
KNOWN_DOMAIN_CONFIDENCE = 100
OBSERVED_CATEGORY_CONFIDENCE = 80
AI_EXACT_CONFIDENCE = 80
AI_EXTRACTED_CONFIDENCE = 70
UNKNOWN_CONFIDENCE = 0


@dataclass(kw_only=True)
class SiteMeta(BaseModel):
    """Cached categorization decision for a normalized domain"""
    domain: str
    category: SiteCategory = SiteCategory.UNKNOWN
    display_name: Optional[str] = None
    favicon: Optional[str] = None
    first_categorized: int
    last_updated: int
    confidence: int = UNKNOWN_CONFIDENCE

    @classmethod
    def from_dict(cls, data: dict) -> 'SiteMeta':
        data = dict(data)
        if 'category' in data:
            data['category'] = SiteCategory.parse(data['category'])
        return super().from_dict(data)

    def age_days(self, now: int) -> float:
        """Days elapsed since the category was last refreshed"""
        return (now - self.last_updated) / (1000 * 60 * 60 * 24)
