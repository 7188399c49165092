from unittest import IsolatedAsyncioTestCase

from shoptrail.db import config
from shoptrail.db.kv_store import InMemoryKeyValueStore
from shoptrail.db.models import SiteVisit
from shoptrail.db.repositories import VisitLedger
from shoptrail.db.services import RescanGate

HOUR_MS = 60 * 60 * 1000
LAST_VISIT = 1_700_000_000_000


class TestRescanGate(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.visits = VisitLedger(InMemoryKeyValueStore())
        await self.visits.append(SiteVisit(
            id="v1", url="https://shop.example/p/1", domain="shop.example", timestamp=LAST_VISIT
        ))

    def _gate(self, now: int) -> RescanGate:
        return RescanGate(self.visits, clock=lambda: now)

    def test_default_cooldown_is_three_days(self):
        self.assertEqual(config.RESCAN_INTERVAL_MS, 72 * HOUR_MS)

    async def test_unvisited_url_should_be_scanned(self):
        self.assertTrue(await self._gate(LAST_VISIT).should_scan("https://shop.example/p/2"))

    async def test_inside_cooldown_is_skipped(self):
        gate = self._gate(LAST_VISIT + 72 * HOUR_MS - 1)
        self.assertFalse(await gate.should_scan("https://shop.example/p/1"))

    async def test_cooldown_boundary_allows_scan(self):
        gate = self._gate(LAST_VISIT + 72 * HOUR_MS)
        self.assertTrue(await gate.should_scan("https://shop.example/p/1"))

    async def test_most_recent_visit_counts(self):
        await self.visits.append(SiteVisit(
            id="v2", url="https://shop.example/p/1", domain="shop.example", timestamp=LAST_VISIT + 48 * HOUR_MS
        ))
        gate = self._gate(LAST_VISIT + 80 * HOUR_MS)
        self.assertEqual(await gate.last_visit_time("https://shop.example/p/1"), LAST_VISIT + 48 * HOUR_MS)
        self.assertFalse(await gate.should_scan("https://shop.example/p/1"))

    async def test_custom_cooldown(self):
        gate = RescanGate(self.visits, cooldown_ms=HOUR_MS, clock=lambda: LAST_VISIT + HOUR_MS)
        self.assertTrue(await gate.should_scan("https://shop.example/p/1"))
