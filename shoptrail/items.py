# Items handed to this project's pipelines by the page and video scrapers.
#
# See documentation in:
# https://docs.scrapy.org/en/latest/topics/items.html

from typing import List, Optional
import scrapy

from shoptrail.db.models import now_ms


class PageObservationItem(scrapy.Item):
    """One scraped snapshot of a page, product or not."""
    # Required fields
    url = scrapy.Field()
    title = scrapy.Field()
    timestamp = scrapy.Field()  # epoch milliseconds
    is_product = scrapy.Field()
    images = scrapy.Field()

    # Product fields
    product_price = scrapy.Field()  # raw price text, e.g. "$1,299.00"
    product_discount = scrapy.Field()
    product_condition = scrapy.Field()  # new / refurbished / used / unknown
    product_category = scrapy.Field()
    product_summary = scrapy.Field()
    product_pros = scrapy.Field()
    product_cons = scrapy.Field()

    # Page fields
    site_category = scrapy.Field()
    tags = scrapy.Field()
    summary = scrapy.Field()

    @classmethod
    def create_empty(cls, url: str) -> 'PageObservationItem':
        """Create an observation for url with default values."""
        return cls(
            url=url,
            title="",
            timestamp=now_ms(),
            is_product=False,
            images=[],
        )

    def mark_product(self, price: Optional[str] = None):
        """Mark the page as a product page."""
        self['is_product'] = True
        if price is not None:
            self['product_price'] = price
        return self

    def add_images(self, images: List[str]):
        """Add image URLs to the item."""
        self['images'] = images
        return self


class ReviewedProductItem(scrapy.Item):
    """One product discussed in a comparison video."""
    product_name = scrapy.Field()
    canonical_product_name = scrapy.Field()
    pros = scrapy.Field()
    cons = scrapy.Field()
    verdict = scrapy.Field()


class YoutubeReviewItem(scrapy.Item):
    """A product review video and its analysis."""
    video_id = scrapy.Field()
    video_title = scrapy.Field()
    video_url = scrapy.Field()
    channel_name = scrapy.Field()
    thumbnail_url = scrapy.Field()
    review_type = scrapy.Field()  # single_review / versus / roundup

    # Single review fields
    product_name = scrapy.Field()
    canonical_product_name = scrapy.Field()
    product_category = scrapy.Field()
    review_summary = scrapy.Field()
    pros = scrapy.Field()
    cons = scrapy.Field()
    overall_sentiment = scrapy.Field()

    # Comparison fields
    products = scrapy.Field()
    comparison_summary = scrapy.Field()
    winner = scrapy.Field()

    affiliate_links = scrapy.Field()
    watched_at = scrapy.Field()

    def add_products(self, products: List[ReviewedProductItem]):
        """Add compared products to the review."""
        if 'products' not in self:
            self['products'] = []
        self['products'].extend([dict(product) for product in products])
        return self
