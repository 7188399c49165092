import logging
from typing import Callable, Optional

from shoptrail.db import config
from shoptrail.db.models import now_ms
from shoptrail.db.repositories import VisitLedger

logger = logging.getLogger(__name__)


class RescanGate:
    """Cooldown check telling a scraper whether a URL is worth re-observing.

    Advisory only: the product store merges observations for gated URLs anyway.
    """

    def __init__(
        self,
        visits: VisitLedger,
        cooldown_ms: int = config.RESCAN_INTERVAL_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.visits = visits
        self.cooldown_ms = cooldown_ms
        self.clock = clock

    async def last_visit_time(self, url: str) -> Optional[int]:
        return await self.visits.last_visit_time(url)

    async def should_scan(self, url: str) -> bool:
        """False while the most recent visit to url is inside the cooldown window"""
        last_visit = await self.visits.last_visit_time(url)
        if last_visit is None:
            return True

        now = self.clock()
        if last_visit > now - self.cooldown_ms:
            hours_since = (now - last_visit) // (1000 * 60 * 60)
            hours_remaining = self.cooldown_ms // (1000 * 60 * 60) - hours_since
            logger.info(
                f"URL was visited {hours_since} hours ago, skipping scan "
                f"({hours_remaining} hours until next scan allowed): {url}"
            )
            return False
        return True
