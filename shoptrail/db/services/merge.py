"""
Field-by-field merge of a page observation into a canonical product.

Rules per field:
    url, title, canonical_name      overwrite with the observation
    price, discount, condition,
    category, summary, image,
    pros, cons                      overwrite only when the observation has a non-empty value
    last_seen                       advance to the observation timestamp (never moves back)
    visit_count                     +1
    lowest_price, lowest_price_url  keep the minimum parsed price and where it was seen
    id, first_seen,
    linked_review_ids               keep
"""
import re
from dataclasses import replace
from typing import Optional

from shoptrail.db.models import Product, ProductHistory, PageObservation, ProductCondition, generate_id

_NON_PRICE_CHARS = re.compile(r'[^0-9.]')
# Leading number of the stripped text, e.g. "19.99." -> "19.99"
_PRICE_PREFIX = re.compile(r'\d+(?:\.\d*)?|\.\d+')

DEFAULT_CATEGORY = "other"


def parse_price(raw_price) -> Optional[float]:
    """Extract numerical price from raw price string. Unparsable values count as absent"""
    if raw_price is None:
        return None
    match = _PRICE_PREFIX.match(_NON_PRICE_CHARS.sub('', str(raw_price)))
    return float(match.group(0)) if match else None


def is_lower_price(candidate: Optional[str], current: Optional[str]) -> bool:
    """True when candidate parses strictly below current, or current has no usable value"""
    candidate_value = parse_price(candidate)
    if candidate_value is None:
        return False
    current_value = parse_price(current)
    return current_value is None or candidate_value < current_value


def _present(value) -> bool:
    return value is not None and value != "" and value != []


def new_product_from_observation(observation: PageObservation, product_id: Optional[str] = None) -> Product:
    """Create a product from its first observation"""
    seeds_lowest = parse_price(observation.product_price) is not None
    return Product(
        id=product_id or generate_id(),
        canonical_name=observation.title,
        url=observation.url,
        title=observation.title,
        price=observation.product_price,
        discount=observation.product_discount,
        condition=observation.product_condition or ProductCondition.UNKNOWN,
        category=observation.product_category or DEFAULT_CATEGORY,
        summary=observation.product_summary,
        pros=observation.product_pros,
        cons=observation.product_cons,
        image=observation.main_image,
        first_seen=observation.timestamp,
        last_seen=observation.timestamp,
        visit_count=1,
        lowest_price=observation.product_price if seeds_lowest else None,
        lowest_price_url=observation.url if seeds_lowest else None,
    )


def merge_observation(product: Product, observation: PageObservation) -> Product:
    """Return a copy of product with observation merged in"""
    merged = replace(
        product,
        url=observation.url,
        title=observation.title,
        canonical_name=observation.title or product.canonical_name,
        last_seen=max(product.last_seen, observation.timestamp),
        visit_count=product.visit_count + 1,
        linked_review_ids=list(product.linked_review_ids),
    )

    sparse = {
        'price': observation.product_price,
        'discount': observation.product_discount,
        # An unrecognised condition carries no information
        'condition': None if observation.product_condition == ProductCondition.UNKNOWN else observation.product_condition,
        'category': observation.product_category,
        'summary': observation.product_summary,
        'pros': observation.product_pros,
        'cons': observation.product_cons,
        'image': observation.main_image,
    }
    for field_name, value in sparse.items():
        if _present(value):
            setattr(merged, field_name, value)

    if is_lower_price(observation.product_price, product.lowest_price):
        merged.lowest_price = observation.product_price
        merged.lowest_price_url = observation.url
    return merged


def history_from_observation(product: Product, observation: PageObservation) -> ProductHistory:
    """History record mirroring what the observation contributed"""
    return ProductHistory(
        product_id=product.id,
        url=observation.url,
        title=observation.title,
        price=observation.product_price,
        discount=observation.product_discount,
        condition=observation.product_condition or ProductCondition.UNKNOWN,
        timestamp=observation.timestamp,
    )
