from shoptrail.db.models import PageObservation, Product, ProductCondition
from shoptrail.db.services.merge import (
    parse_price,
    is_lower_price,
    merge_observation,
    new_product_from_observation,
    history_from_observation,
)


def _observation(**overrides) -> PageObservation:
    fields = dict(
        url="https://shop.example/p/1",
        title="Acme Kettle 2000",
        timestamp=1_000,
        is_product=True,
        product_price="$49.99",
        images=["https://img.example/kettle.jpg"],
    )
    fields.update(overrides)
    return PageObservation(**fields)


def test_parse_price_strips_currency_and_separators():
    assert parse_price("$1299.00") == 1299.0
    assert parse_price("EUR 15") == 15.0
    assert parse_price("1,299") == 1299.0


def test_parse_price_treats_unparsable_as_absent():
    assert parse_price(None) is None
    assert parse_price("") is None
    assert parse_price("free") is None
    assert parse_price(".") is None


def test_parse_price_reads_leading_number():
    assert parse_price("$19.99.") == 19.99
    assert parse_price("1.299.00") == 1.299


def test_is_lower_price_is_strict():
    assert is_lower_price("$10", "$20") is True
    assert is_lower_price("$20", "$20.00") is False
    assert is_lower_price("$30", "$20") is False
    assert is_lower_price("n/a", "$20") is False
    assert is_lower_price("$30", None) is True
    assert is_lower_price("$30", "call us") is True


def test_new_product_seeds_tracking_fields():
    product = new_product_from_observation(_observation(product_condition=ProductCondition.NEW))
    assert product.visit_count == 1
    assert product.first_seen == product.last_seen == 1_000
    assert product.canonical_name == "Acme Kettle 2000"
    assert product.lowest_price == "$49.99"
    assert product.lowest_price_url == "https://shop.example/p/1"
    assert product.image == "https://img.example/kettle.jpg"
    assert product.condition == ProductCondition.NEW
    assert product.category == "other"


def test_new_product_without_parsable_price_has_no_lowest_price():
    product = new_product_from_observation(_observation(product_price="See options"))
    assert product.price == "See options"
    assert product.lowest_price is None
    assert product.lowest_price_url is None


def test_merge_overwrites_only_present_fields():
    product = new_product_from_observation(_observation(
        product_summary="Boils water", product_pros=["fast"], product_category="home_kitchen"
    ))
    merged = merge_observation(product, _observation(
        url="https://shop.example/p/1?ref=2",
        timestamp=2_000,
        product_price=None,
        product_summary="",
        product_pros=[],
        product_discount="10%",
        images=[],
    ))

    assert merged.url == "https://shop.example/p/1?ref=2"
    assert merged.price == "$49.99"
    assert merged.summary == "Boils water"
    assert merged.pros == ["fast"]
    assert merged.category == "home_kitchen"
    assert merged.image == "https://img.example/kettle.jpg"
    assert merged.discount == "10%"
    assert merged.visit_count == 2
    assert merged.last_seen == 2_000
    assert merged.first_seen == 1_000


def test_merge_returns_an_independent_copy():
    product = new_product_from_observation(_observation())
    product.linked_review_ids.append("r1")
    merged = merge_observation(product, _observation(timestamp=2_000))
    merged.linked_review_ids.append("r2")
    assert product.visit_count == 1
    assert product.linked_review_ids == ["r1"]


def test_merge_never_moves_last_seen_backwards():
    product = new_product_from_observation(_observation(timestamp=5_000))
    merged = merge_observation(product, _observation(timestamp=3_000))
    assert merged.first_seen == 5_000
    assert merged.last_seen == 5_000


def test_merge_updates_lowest_price_only_when_strictly_lower():
    product = new_product_from_observation(_observation(product_price="$20", url="https://a.example/x"))
    same = merge_observation(product, _observation(product_price="20.00", url="https://b.example/x"))
    assert same.lowest_price_url == "https://a.example/x"

    lower = merge_observation(same, _observation(product_price="$19.50", url="https://c.example/x"))
    assert lower.lowest_price == "$19.50"
    assert lower.lowest_price_url == "https://c.example/x"
    assert lower.price == "$19.50"


def test_history_mirrors_observation():
    observation = _observation(product_discount="5%")
    product = new_product_from_observation(observation)
    entry = history_from_observation(product, observation)
    assert entry.product_id == product.id
    assert entry.price == "$49.99"
    assert entry.discount == "5%"
    assert entry.condition == ProductCondition.UNKNOWN
    assert entry.timestamp == 1_000


def test_product_round_trips_through_dict():
    product = new_product_from_observation(_observation(product_condition=ProductCondition.USED))
    data = product.to_dict()
    assert data["condition"] == "used"
    assert "discount" not in data
    assert Product.from_dict(data) == product


def test_unknown_condition_does_not_overwrite_known_condition():
    product = new_product_from_observation(_observation(product_condition=ProductCondition.USED))
    merged = merge_observation(product, _observation(
        timestamp=2_000, product_condition=ProductCondition.parse("Renewed")
    ))
    assert merged.condition == ProductCondition.USED

    refurbished = merge_observation(merged, _observation(
        timestamp=3_000, product_condition=ProductCondition.REFURBISHED
    ))
    assert refurbished.condition == ProductCondition.REFURBISHED


def test_scraped_item_wraps_bare_list_values():
    observation = PageObservation.from_scraped_item({
        "url": "https://shop.example/p/1",
        "title": "Acme Kettle 2000",
        "product_pros": "Boils fast",
        "product_cons": ["Loud", None, ""],
        "images": "https://img.example/kettle.jpg",
        "tags": [],
    })
    assert observation.product_pros == ["Boils fast"]
    assert observation.product_cons == ["Loud"]
    assert observation.images == ["https://img.example/kettle.jpg"]
    assert observation.tags is None
