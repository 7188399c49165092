"""
Link externally sourced reviews to canonical products by canonical name.

Matching is a boolean word-containment heuristic, kept pure and swappable:
ReviewLinker takes any ``NameMatcher`` callable.
"""
import logging
import re
from typing import Callable, List, Tuple

from shoptrail.db.models import YoutubeReview
from shoptrail.db.repositories import ProductRepository, YoutubeReviewRepository

logger = logging.getLogger(__name__)

NameMatcher = Callable[[str, str], bool]

# Punctuation, plus hyphens that do not join two word characters
_PUNCTUATION = re.compile(r'[^\w\s-]|(?<!\w)-|-(?!\w)')
_WHITESPACE = re.compile(r'\s+')


def normalize_canonical_name(name: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace, trim.

    Hyphens inside a token ("wh-1000xm5") are part of the token.
    """
    name = _PUNCTUATION.sub('', (name or '').lower())
    return _WHITESPACE.sub(' ', name).strip()


def names_match(name1: str, name2: str) -> bool:
    """Whether two canonical names denote the same product.

    Exact match after normalization, or one name containing the other where
    every word of the shorter one is also a word of the longer one, so
    "macbook pro m4" matches "macbook pro m4 pro" but "pro" does not match "processor".
    """
    n1 = normalize_canonical_name(name1)
    n2 = normalize_canonical_name(name2)
    if not n1 or not n2:
        return False
    if n1 == n2:
        return True
    if n1 in n2 or n2 in n1:
        words1 = set(n1.split(' '))
        words2 = set(n2.split(' '))
        return words1 <= words2 or words2 <= words1
    return False


class ReviewLinker:
    """Maintains Product.linked_review_ids from stored reviews"""

    def __init__(
        self,
        products: ProductRepository,
        reviews: YoutubeReviewRepository,
        matcher: NameMatcher = names_match,
    ):
        self.products = products
        self.reviews = reviews
        self.matcher = matcher

    async def link_review(self, review_id: str) -> List[str]:
        """Link a review to every product whose canonical name matches one of its products.

        Returns the ids of all matching products, whether the link is new or already existed.
        """
        linked_ids, _ = await self._link(review_id)
        return linked_ids

    async def _link(self, review_id: str) -> Tuple[List[str], int]:
        """Matched product ids and the number of links newly written"""
        review = await self.reviews.get_by_id(review_id)
        if not review:
            logger.warning(f"Review {review_id} not found")
            return [], 0

        candidate_names = review.candidate_canonical_names()
        if not candidate_names:
            logger.info(f"Review {review_id} has no canonical product names, nothing to link")
            return [], 0

        linked_ids = []
        created = 0
        for product in await self.products.list_all():
            for candidate in candidate_names:
                if not self.matcher(product.canonical_name, candidate):
                    continue
                if review_id not in product.linked_review_ids:
                    await self.products.update_fields(
                        product.id, {'linked_review_ids': product.linked_review_ids + [review_id]}
                    )
                    created += 1
                    logger.info(f"Linked review {review_id} to product {product.id} ({product.canonical_name})")
                linked_ids.append(product.id)
                # A product links to a review at most once per call
                break

        logger.info(f"Review {review_id} matched {len(linked_ids)} products ({created} new links)")
        return linked_ids, created

    async def link_all_existing(self) -> int:
        """Link every stored review. Returns the number of links created by this run"""
        reviews = await self.reviews.list_all()
        total = 0
        for review in reviews:
            _, created = await self._link(review.id)
            total += created
        logger.info(f"Processed {len(reviews)} reviews, {total} new links")
        return total

    async def get_linked_reviews(self, product_id: str) -> List[YoutubeReview]:
        """Reviews linked to a product, resolved by id"""
        product = await self.products.get_by_id(product_id)
        if not product or not product.linked_review_ids:
            return [], 0
        linked = set(product.linked_review_ids)
        return [review for review in await self.reviews.list_all() if review.id in linked]
