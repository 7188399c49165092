from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock

from shoptrail.db.kv_store import InMemoryKeyValueStore
from shoptrail.db.models import SiteCategory
from shoptrail.db.repositories import SiteMetaRepository
from shoptrail.db.services import SiteCategorizer
from shoptrail.db.services.site_categorizer import (
    normalize_domain,
    display_name_for,
    parse_category_answer,
    build_prompt,
)

DAY_MS = 24 * 60 * 60 * 1000
NOW = 1_700_000_000_000


def test_normalize_domain():
    assert normalize_domain("https://www.Amazon.com/dp/B000") == "amazon.com"
    assert normalize_domain("shop.example") == "shop.example"
    assert normalize_domain("") == ""


def test_display_name_for():
    assert display_name_for("best-buy.com") == "Best Buy"
    assert display_name_for("github.com") == "Github"


def test_parse_category_answer():
    assert parse_category_answer(" Ecommerce\n") == (SiteCategory.ECOMMERCE, 80)
    assert parse_category_answer("Category: news") == (SiteCategory.NEWS, 70)
    assert parse_category_answer("no idea") == (SiteCategory.UNKNOWN, 0)
    assert parse_category_answer(None) == (SiteCategory.UNKNOWN, 0)


def test_build_prompt_lists_every_category():
    prompt = build_prompt("shop.example", "https://shop.example", "Shop", None)
    for category in SiteCategory:
        assert f"- {category.value}" in prompt
    assert "Domain: shop.example" in prompt


class TestSiteCategorizer(IsolatedAsyncioTestCase):
    def setUp(self):
        self.metas = SiteMetaRepository(InMemoryKeyValueStore())
        self.now = NOW

    def _categorizer(self, classifier=None) -> SiteCategorizer:
        return SiteCategorizer(self.metas, classifier=classifier, clock=lambda: self.now)

    async def test_known_domain_needs_no_classifier(self):
        classifier = AsyncMock(return_value="news")
        meta = await self._categorizer(classifier).categorize("https://www.amazon.com/dp/B000")

        self.assertEqual(meta.domain, "amazon.com")
        self.assertEqual(meta.category, SiteCategory.ECOMMERCE)
        self.assertEqual(meta.confidence, 100)
        self.assertEqual(meta.display_name, "Amazon")
        classifier.assert_not_called()
        self.assertEqual(await self.metas.get_by_id("amazon.com"), meta)

    async def test_classifier_exact_and_extracted_answers(self):
        exact = await self._categorizer(AsyncMock(return_value="forum")).categorize("https://board.example/t/1")
        self.assertEqual((exact.category, exact.confidence), (SiteCategory.FORUM, 80))

        extracted = await self._categorizer(AsyncMock(return_value="I think: travel")).categorize(
            "https://trips.example"
        )
        self.assertEqual((extracted.category, extracted.confidence), (SiteCategory.TRAVEL, 70))

    async def test_classifier_failure_falls_back_to_unknown(self):
        classifier = AsyncMock(side_effect=RuntimeError("model offline"))
        meta = await self._categorizer(classifier).categorize("https://odd.example")
        self.assertEqual((meta.category, meta.confidence), (SiteCategory.UNKNOWN, 0))

    async def test_missing_classifier_gives_unknown(self):
        meta = await self._categorizer().categorize("https://odd.example", title="Odd")
        self.assertEqual((meta.category, meta.confidence), (SiteCategory.UNKNOWN, 0))

    async def test_cached_decision_reused_until_expiry(self):
        classifier = AsyncMock(return_value="blog")
        categorizer = self._categorizer(classifier)
        await categorizer.categorize("https://writer.example")

        classifier.return_value = "news"
        self.now = NOW + 89 * DAY_MS
        cached = await categorizer.categorize("https://writer.example/post")
        self.assertEqual(cached.category, SiteCategory.BLOG)
        self.assertEqual(classifier.await_count, 1)

        self.now = NOW + 90 * DAY_MS
        refreshed = await categorizer.categorize("https://writer.example/post")
        self.assertEqual(refreshed.category, SiteCategory.NEWS)
        self.assertEqual(refreshed.first_categorized, NOW)
        self.assertEqual(refreshed.last_updated, NOW + 90 * DAY_MS)
        self.assertEqual(classifier.await_count, 2)

    async def test_invalidate(self):
        classifier = AsyncMock(return_value="blog")
        categorizer = self._categorizer(classifier)
        await categorizer.categorize("https://writer.example")

        self.assertTrue(await categorizer.invalidate("www.writer.example"))
        self.assertFalse(await categorizer.invalidate("writer.example"))
        await categorizer.categorize("https://writer.example")
        self.assertEqual(classifier.await_count, 2)
