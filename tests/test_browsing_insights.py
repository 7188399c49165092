from unittest import IsolatedAsyncioTestCase

from shoptrail.db.kv_store import InMemoryKeyValueStore
from shoptrail.db.models import PageObservation, SiteCategory
from shoptrail.db.services import ProductStore, BrowsingInsights
from shoptrail.db.services.browsing_insights import format_category_name, WEEK_MS


def test_format_category_name():
    assert format_category_name("home_kitchen") == "Home Kitchen"
    assert format_category_name("electronics") == "Electronics"
    assert format_category_name(None) == "Other"


class TestBrowsingInsights(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.service = ProductStore(InMemoryKeyValueStore())
        self.insights = BrowsingInsights(self.service.products, self.service.visits)

        kettle = await self._observe("https://shop.example/p/1", "Acme Kettle", 1_000, "home_kitchen")
        bike = await self._observe("https://shop.example/p/3", "Road Bike", 2_000, "sports_outdoors",
                                   summary="Lightweight frame")
        knife = await self._observe("https://shop.example/p/2", "Chef Knife", 1_500, "home_kitchen")
        await self._observe("https://shop.example/p/1", "Acme Kettle", 3_000, None)
        await self.service.store_page_data(PageObservation(
            url="https://news.example/a/1", title="Bike lanes expand", timestamp=2_500,
            site_category=SiteCategory.NEWS,
        ))
        self.kettle, self.bike, self.knife = kettle, bike, knife

    async def _observe(self, url, title, timestamp, category, summary=None) -> str:
        result = await self.service.store_page_data(PageObservation(
            url=url, title=title, timestamp=timestamp, is_product=True,
            product_category=category, product_summary=summary,
        ))
        return result.product_id

    async def test_recent_and_most_viewed(self):
        recent = await self.insights.get_recent_products()
        self.assertEqual([p.id for p in recent], [self.kettle, self.bike, self.knife])
        self.assertEqual([p.id for p in await self.insights.get_recent_products(limit=1)], [self.kettle])

        most_viewed = await self.insights.get_most_viewed_products(limit=1)
        self.assertEqual(most_viewed[0].id, self.kettle)
        self.assertEqual(most_viewed[0].visit_count, 2)

    async def test_search_products(self):
        self.assertEqual([p.id for p in await self.insights.search_products("KETTLE")], [self.kettle])
        self.assertEqual([p.id for p in await self.insights.search_products("lightweight")], [self.bike])
        self.assertEqual(
            {p.id for p in await self.insights.search_products("home_kitchen")}, {self.kettle, self.knife}
        )
        self.assertEqual(len(await self.insights.search_products("  ")), 3)

    async def test_get_product_by_url(self):
        self.assertEqual((await self.insights.get_product_by_url("https://shop.example/p/2")).id, self.knife)
        self.assertIsNone(await self.insights.get_product_by_url("https://shop.example/p/9"))

    async def test_products_by_category(self):
        groups = await self.insights.get_products_by_category()
        self.assertEqual([(g["name"], g["count"]) for g in groups], [("Home Kitchen", 2), ("Sports Outdoors", 1)])
        self.assertEqual([p.id for p in groups[0]["products"]], [self.kettle, self.knife])

    async def test_product_stats(self):
        stats = await self.insights.get_product_stats()
        self.assertEqual(stats, {
            "total_products": 3,
            "total_visits": 4,
            "categories_count": 2,
            "most_viewed_category": "Home Kitchen",
        })

    async def test_product_stats_when_empty(self):
        empty = BrowsingInsights(*self._empty_repositories())
        stats = await empty.get_product_stats()
        self.assertEqual(stats["total_products"], 0)
        self.assertEqual(stats["most_viewed_category"], "N/A")

    def _empty_repositories(self):
        service = ProductStore(InMemoryKeyValueStore())
        return service.products, service.visits

    async def test_site_visit_stats(self):
        stats = await self.insights.get_site_visit_stats(now=3_000 + WEEK_MS - 1)
        self.assertEqual(stats["total_visits"], 5)
        self.assertEqual(stats["by_category"], {"unknown": 4, "news": 1})
        self.assertEqual(stats["recent_count"], 1)

    async def test_search_site_visits(self):
        results = await self.insights.search_site_visits("road bike review")
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["visit"].title, "Road Bike")
        self.assertEqual(results[0]["relevance_score"], 67)
        self.assertEqual(results[0]["match_reason"], "Keyword match (2/3 words)")

    async def test_search_site_visits_ignores_short_words(self):
        self.assertEqual(await self.insights.search_site_visits("a to"), [])
