from enum import Enum


class SiteCategory(str, Enum):
    """Enum for site categories, broader than product categories"""
    # Content & media
    NEWS = "news"
    BLOG = "blog"
    SOCIAL_MEDIA = "social_media"
    VIDEO = "video"
    MUSIC = "music"
    PODCAST = "podcast"

    # Commerce
    ECOMMERCE = "ecommerce"
    MARKETPLACE = "marketplace"

    # Professional
    PRODUCTIVITY = "productivity"
    DEVELOPMENT = "development"
    DESIGN = "design"
    BUSINESS = "business"

    # Education & reference
    EDUCATION = "education"
    DOCUMENTATION = "documentation"
    RESEARCH = "research"
    WIKI = "wiki"

    # Entertainment
    GAMING = "gaming"
    STREAMING = "streaming"
    SPORTS = "sports"

    # Communication
    EMAIL = "email"
    MESSAGING = "messaging"
    FORUM = "forum"

    NSFW = "nsfw"
    GAMBLING = "gambling"

    SEARCH_ENGINE = "search_engine"
    FINANCE = "finance"
    HEALTH = "health"
    TRAVEL = "travel"
    FOOD = "food"
    WEATHER = "weather"
    GOVERNMENT = "government"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> 'SiteCategory':
        """Map a raw token to a category, falling back to UNKNOWN"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class ProductCondition(str, Enum):
    """Enum for product conditions"""
    NEW = "new"
    REFURBISHED = "refurbished"
    USED = "used"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> 'ProductCondition':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class ReviewType(str, Enum):
    """Enum for review video shapes"""
    SINGLE_REVIEW = "single_review"
    VERSUS = "versus"
    ROUNDUP = "roundup"


class StorageKey(str, Enum):
    """Keys owned by this package in the key-value store"""
    PRODUCTS = "products"
    PRODUCT_HISTORY = "product_history"
    SITE_VISITS = "site_visits"
    SITE_METAS = "site_metas"
    URL_TO_PRODUCT = "url_to_product"
    CANONICAL_INDEX = "canonical_index"
    YOUTUBE_REVIEWS = "youtube_reviews"
