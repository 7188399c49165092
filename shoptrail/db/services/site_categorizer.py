import logging
import re
from typing import Awaitable, Callable, Optional, Tuple

from shoptrail.db import config
from shoptrail.db.models import SiteMeta, SiteCategory, now_ms
from shoptrail.db.models.site_meta import (
    KNOWN_DOMAIN_CONFIDENCE,
    AI_EXACT_CONFIDENCE,
    AI_EXTRACTED_CONFIDENCE,
    UNKNOWN_CONFIDENCE,
)
from shoptrail.db.repositories import SiteMetaRepository
from shoptrail.utils.sentry import add_breadcrumb

logger = logging.getLogger(__name__)

# prompt -> raw model answer
Classifier = Callable[[str], Awaitable[str]]

KNOWN_DOMAINS = {
    # Commerce
    "amazon.com": SiteCategory.ECOMMERCE,
    "ebay.com": SiteCategory.MARKETPLACE,
    "etsy.com": SiteCategory.MARKETPLACE,
    "bestbuy.com": SiteCategory.ECOMMERCE,
    "walmart.com": SiteCategory.ECOMMERCE,

    # Video / streaming
    "youtube.com": SiteCategory.VIDEO,
    "vimeo.com": SiteCategory.VIDEO,
    "twitch.tv": SiteCategory.STREAMING,

    # Social
    "twitter.com": SiteCategory.SOCIAL_MEDIA,
    "x.com": SiteCategory.SOCIAL_MEDIA,
    "facebook.com": SiteCategory.SOCIAL_MEDIA,
    "instagram.com": SiteCategory.SOCIAL_MEDIA,
    "tiktok.com": SiteCategory.SOCIAL_MEDIA,

    # Dev / docs
    "github.com": SiteCategory.DEVELOPMENT,
    "gitlab.com": SiteCategory.DEVELOPMENT,
    "developer.mozilla.org": SiteCategory.DOCUMENTATION,

    # News / blogs
    "medium.com": SiteCategory.BLOG,
    "nytimes.com": SiteCategory.NEWS,
    "cnn.com": SiteCategory.NEWS,
    "bbc.co.uk": SiteCategory.NEWS,

    # Search
    "google.com": SiteCategory.SEARCH_ENGINE,
    "bing.com": SiteCategory.SEARCH_ENGINE,
    "duckduckgo.com": SiteCategory.SEARCH_ENGINE,
}


def normalize_domain(domain: str) -> str:
    """Strip scheme, leading www. and any path, lowercase"""
    domain = re.sub(r'^https?://', '', (domain or '').strip(), flags=re.IGNORECASE)
    domain = re.sub(r'^www\.', '', domain, flags=re.IGNORECASE)
    return domain.split('/')[0].lower()


def display_name_for(domain: str) -> str:
    """Title-cased first domain label, e.g. best-buy.com -> Best Buy"""
    label = domain.split('.')[0].replace('-', ' ')
    return re.sub(r'\b\w', lambda m: m.group(0).upper(), label)


def parse_category_answer(answer: str) -> Tuple[SiteCategory, int]:
    """Map a classifier answer to a category and its confidence"""
    response = (answer or '').strip().lower()
    tokens = {c.value for c in SiteCategory}
    if response in tokens:
        return SiteCategory(response), AI_EXACT_CONFIDENCE
    for token in re.split(r'[\s:]+', response):
        if token in tokens:
            return SiteCategory(token), AI_EXTRACTED_CONFIDENCE
    return SiteCategory.UNKNOWN, UNKNOWN_CONFIDENCE


def build_prompt(domain: str, url: str, title: Optional[str], description: Optional[str]) -> str:
    choices = "\n".join(f"- {c.value}" for c in SiteCategory)
    return (
        "You are a website categorization assistant. Given the site domain, URL, title, and meta "
        "description, choose the single best category from the list below and return only the "
        f"category token (one of the values exactly):\n\n{choices}\n\n"
        f"Domain: {domain}\nURL: {url}\nTitle: {title or ''}\nDescription: {description or ''}\n\n"
        'Respond with a single category token (for example: "ecommerce").'
    )


class SiteCategorizer:
    """Per-domain categorization with a cache, a known-domain table and an optional AI classifier"""

    def __init__(
        self,
        metas: SiteMetaRepository,
        classifier: Optional[Classifier] = None,
        cache_days: int = config.SITE_META_CACHE_DAYS,
        clock: Callable[[], int] = now_ms,
    ):
        self.metas = metas
        self.classifier = classifier
        self.cache_days = cache_days
        self.clock = clock

    async def categorize(
        self,
        url: str,
        domain: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> SiteMeta:
        domain = normalize_domain(domain or url)
        now = self.clock()
        existing = await self.metas.get_by_id(domain)

        if existing and existing.age_days(now) < self.cache_days:
            logger.debug(f"Using cached category for {domain}: {existing.category.value}")
            return existing

        known = KNOWN_DOMAINS.get(domain)
        if known:
            category, confidence = known, KNOWN_DOMAIN_CONFIDENCE
        else:
            category, confidence = await self._classify(domain, url, title, description)

        meta = SiteMeta(
            domain=domain,
            category=category,
            display_name=display_name_for(domain),
            first_categorized=existing.first_categorized if existing else now,
            last_updated=now,
            confidence=confidence,
        )
        await self.metas.save(meta)
        logger.info(f"Categorized {domain} as {category.value} (confidence {confidence})")
        return meta

    async def _classify(self, domain, url, title, description) -> Tuple[SiteCategory, int]:
        if self.classifier is None:
            logger.info(f"No classifier available, {domain} stays unknown")
            return SiteCategory.UNKNOWN, UNKNOWN_CONFIDENCE
        try:
            answer = await self.classifier(build_prompt(domain, url, title, description))
        except Exception as e:
            # Categorization is best-effort and must not break observation storage
            logger.warning(f"Classifier failed for {domain}: {str(e)}")
            add_breadcrumb(f"Site classifier failed for {domain}", category="categorizer", level="warning")
            return SiteCategory.UNKNOWN, UNKNOWN_CONFIDENCE
        return parse_category_answer(answer)

    async def invalidate(self, domain: str) -> bool:
        """Drop the cached decision so the next categorize call recomputes it"""
        return await self.metas.delete(normalize_domain(domain))
