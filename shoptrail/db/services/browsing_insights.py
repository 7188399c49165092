"""
Read-side views over stored products and visits: listings, grouping,
keyword search and summary statistics.
"""
import logging
import re
from typing import List, Dict, Any, Optional

from shoptrail.db import config
from shoptrail.db.models import Product, now_ms
from shoptrail.db.repositories import ProductRepository, VisitLedger

logger = logging.getLogger(__name__)

WEEK_MS = 7 * 24 * 60 * 60 * 1000
MIN_SEARCH_SCORE = 40


def format_category_name(category: Optional[str]) -> str:
    """snake_case category -> Title Case"""
    if not category:
        return "Other"
    return " ".join(word[:1].upper() + word[1:] for word in category.split("_"))


class BrowsingInsights:
    """Listings and statistics over products and site visits"""

    def __init__(self, products: ProductRepository, visits: VisitLedger):
        self.products = products
        self.visits = visits

    async def get_recent_products(self, limit: Optional[int] = 20) -> List[Product]:
        products = await self.products.list_all()
        products.sort(key=lambda p: p.last_seen, reverse=True)
        return products[:limit]

    async def get_most_viewed_products(self, limit: int = 10) -> List[Product]:
        products = await self.products.list_all()
        products.sort(key=lambda p: p.visit_count, reverse=True)
        return products[:limit]

    async def search_products(self, query: str) -> List[Product]:
        """Case-insensitive match on title, summary or category"""
        products = await self.products.list_all()
        query = (query or "").strip().lower()
        if not query:
            return products
        return [
            p for p in products
            if query in p.title.lower()
            or query in (p.summary or "").lower()
            or query in (p.category or "").lower()
        ]

    async def get_product_by_url(self, url: str) -> Optional[Product]:
        return await self.products.get_by_url(url)

    async def get_products_by_category(self) -> List[Dict[str, Any]]:
        """Products grouped by category, most recently seen first, largest group first"""
        products = await self.get_recent_products(limit=None)
        groups: Dict[str, List[Product]] = {}
        for product in products:
            groups.setdefault(product.category or "other", []).append(product)
        result = [
            {"name": format_category_name(category), "count": len(items), "products": items}
            for category, items in groups.items()
        ]
        result.sort(key=lambda group: group["count"], reverse=True)
        return result

    async def get_product_stats(self) -> Dict[str, Any]:
        products = await self.products.list_all()
        counts: Dict[str, int] = {}
        for product in products:
            category = product.category or "other"
            counts[category] = counts.get(category, 0) + 1

        most_viewed = "N/A"
        if counts:
            # First category reaching the max count wins
            top = max(counts.values())
            most_viewed = format_category_name(next(c for c, n in counts.items() if n == top))

        return {
            "total_products": len(products),
            "total_visits": sum(p.visit_count for p in products),
            "categories_count": len(counts),
            "most_viewed_category": most_viewed,
        }

    async def get_site_visit_stats(self, now: Optional[int] = None) -> Dict[str, Any]:
        now = now if now is not None else now_ms()
        visits = await self.visits.list_all()
        by_category: Dict[str, int] = {}
        for visit in visits:
            by_category[visit.site_category.value] = by_category.get(visit.site_category.value, 0) + 1
        return {
            "total_visits": len(visits),
            "by_category": by_category,
            "recent_count": sum(1 for v in visits if now - v.timestamp < WEEK_MS),
        }

    async def search_site_visits(self, query: str) -> List[Dict[str, Any]]:
        """Keyword search over the recent visits.

        Words of three or more characters are matched against title, summary, tags and url.
        Returns dicts of {visit, relevance_score, match_reason}, best first.
        """
        query_words = [w for w in re.split(r'\s+', (query or "").lower()) if len(w) > 2]
        if not query_words:
            return []

        results = []
        for visit in await self.visits.get_recent(config.RECENT_VISITS_LIMIT):
            text = " ".join([visit.title, visit.summary, " ".join(visit.tags), visit.url]).lower()
            matched = sum(1 for word in query_words if word in text)
            score = min(100, matched / len(query_words) * 100)
            if score >= MIN_SEARCH_SCORE:
                results.append({
                    "visit": visit,
                    "relevance_score": round(score),
                    "match_reason": f"Keyword match ({matched}/{len(query_words)} words)",
                })

        results.sort(key=lambda r: r["relevance_score"], reverse=True)
        logger.debug(f"Keyword search for {query!r} found {len(results)} results")
        return results[:config.MAX_SEARCH_RESULTS]
