"""
==============================================================================
Catalog View Tests
==============================================================================

Tests for filtering, sorting, statistics and the observable catalog view.

==============================================================================
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from storefront.catalog.catalog import (
    CatalogView,
    FilterState,
    SortDirection,
    SortKey,
    apply_filters,
    compute_stats,
    matches,
    price_bounds,
    sort_products,
    toggle_sort,
)
from storefront.catalog.models import ProductStatus


@pytest.fixture
def products(mug, shirt, product_factory):
    earbuds = product_factory(
        id="earbuds",
        name="Wireless Earbuds",
        price=Decimal("59.00"),
        category="electronics",
    )
    cup = product_factory(
        id="cup",
        name="Espresso Cup",
        price=Decimal("4.50"),
        category=None,
        status=ProductStatus.OUT_OF_STOCK,
    )
    return [mug, shirt, earbuds, cup]


def names(products):
    return [p.name for p in products]


class TestFilters:
    """Tests for the filter predicates."""

    def test_default_filter_matches_everything(self, products):
        assert apply_filters(products, FilterState()) == products

    def test_category_and_query_are_combined(self, mug, shirt):
        """A product must satisfy every active predicate."""
        filters = FilterState(category="home", query="mug")
        assert apply_filters([mug, shirt], filters) == [mug]

        filters = FilterState(category="clothing", query="mug")
        assert apply_filters([mug, shirt], filters) == []

    def test_query_is_case_insensitive_substring(self, mug):
        assert matches(mug, FilterState(query="AMIC M"))
        assert not matches(mug, FilterState(query="cup"))

    def test_query_whitespace_is_matched_literally(self, mug, product_factory):
        """A blank query is a substring like any other."""
        mono = product_factory(id="mono", name="Mug")

        assert apply_filters([mug, mono], FilterState(query=" ")) == [mug]

    def test_price_bounds_are_inclusive(self, mug):
        filters = FilterState(min_price=Decimal("9.99"), max_price=Decimal("9.99"))
        assert matches(mug, filters)

    def test_unbounded_side(self, products):
        filters = FilterState(min_price=Decimal("10"))
        assert names(apply_filters(products, filters)) == ["Linen Shirt", "Wireless Earbuds"]

    def test_inverted_range_matches_nothing(self, products):
        filters = FilterState(min_price=Decimal("50"), max_price=Decimal("5"))
        assert filters.is_inverted
        assert apply_filters(products, filters) == []

    def test_visible_only(self, mug, shirt):
        assert apply_filters([mug, shirt], FilterState(visible_only=True)) == [mug]

    def test_blank_category_means_all(self, products):
        assert FilterState(category="").category == "all"
        assert FilterState(category=None).is_default

    def test_order_is_preserved(self, products):
        filtered = apply_filters(products, FilterState(max_price=Decimal("20")))
        assert names(filtered) == ["Ceramic Mug", "Linen Shirt", "Espresso Cup"]


class TestSorting:
    """Tests for multi-key sorting."""

    def test_no_keys_keeps_order(self, products):
        assert sort_products(products, []) == products

    def test_sort_by_price(self, products):
        result = sort_products(products, [SortKey.parse("price:asc")])
        assert names(result) == [
            "Espresso Cup", "Ceramic Mug", "Linen Shirt", "Wireless Earbuds"
        ]

    def test_sort_by_name_desc(self, products):
        result = sort_products(products, [SortKey.parse("name:desc")])
        assert names(result)[0] == "Wireless Earbuds"

    def test_missing_category_sorts_first(self, products):
        result = sort_products(products, [SortKey(field="category")])
        assert result[0].category is None

    def test_secondary_key_breaks_ties(self, products):
        keys = [SortKey.parse("status:asc"), SortKey.parse("price:desc")]
        result = sort_products(products, keys)
        assert names(result) == [
            "Wireless Earbuds", "Ceramic Mug", "Linen Shirt", "Espresso Cup"
        ]

    def test_parse_defaults_to_ascending(self):
        key = SortKey.parse("isVisible")
        assert key.field == "is_visible"
        assert key.direction == SortDirection.ASC

    @pytest.mark.parametrize("param", ["weight", "price:up"])
    def test_parse_rejects_unknown(self, param):
        with pytest.raises(ValidationError):
            SortKey.parse(param)


class TestToggleSort:
    """Tests for the asc → desc → unsorted cycle."""

    def test_cycle(self):
        keys = toggle_sort([], "price")
        assert keys == [SortKey(field="price", direction="asc")]

        keys = toggle_sort(keys, "price")
        assert keys == [SortKey(field="price", direction="desc")]

        assert toggle_sort(keys, "price") == []

    def test_new_column_is_appended(self):
        keys = toggle_sort(toggle_sort([], "price"), "name")
        assert [k.field for k in keys] == ["price", "name"]

    def test_existing_column_keeps_position(self):
        keys = toggle_sort(toggle_sort([], "price"), "name")
        keys = toggle_sort(keys, "price")
        assert keys == [
            SortKey(field="price", direction="desc"),
            SortKey(field="name", direction="asc"),
        ]


class TestStatistics:
    """Tests for derived counts and price range."""

    def test_compute_stats(self, products):
        stats = compute_stats(products)
        assert stats.total == 4
        assert stats.in_stock == 2
        assert stats.out_of_stock == 2
        assert stats.visible == 3

    def test_stats_of_empty_list(self):
        stats = compute_stats([])
        assert (stats.total, stats.in_stock, stats.out_of_stock, stats.visible) == (0, 0, 0, 0)

    def test_price_bounds(self, products):
        assert price_bounds(products) == (Decimal(4), Decimal(59))

    def test_price_bounds_round_outward(self, mug, shirt):
        assert price_bounds([mug, shirt]) == (Decimal(9), Decimal(20))

    def test_price_bounds_default(self):
        assert price_bounds([]) == (Decimal(0), Decimal(1000))


class TestCatalogView:
    """Tests for the observable view."""

    def test_mug_and_shirt_scenario(self, mug, shirt):
        """Category filter plus stats over the whole list."""
        view = CatalogView([mug, shirt])
        view.set_filters(FilterState(category="home"))

        assert view.results == [mug]
        assert view.stats.total == 2
        assert view.stats.in_stock == 1
        assert view.stats.out_of_stock == 1
        assert view.stats.visible == 1

    def test_results_follow_sort(self, products):
        view = CatalogView(products)
        view.toggle_sort("price")
        view.toggle_sort("price")

        assert view.results[0].name == "Wireless Earbuds"

    def test_upsert_replaces_and_appends(self, mug, shirt):
        view = CatalogView([mug])
        view.upsert(mug.model_copy(update={"name": "Big Mug"}))
        view.upsert(shirt)

        assert names(view.products) == ["Big Mug", "Linen Shirt"]

    def test_remove(self, mug, shirt):
        view = CatalogView([mug, shirt])
        view.remove("mug")
        assert view.products == [shirt]

    def test_clear_filters(self, mug, shirt):
        view = CatalogView([mug, shirt], FilterState(category="home"))
        view.clear_filters()
        assert view.filters.is_default
        assert view.results == [mug, shirt]

    def test_subscribers_notified(self, mug, shirt):
        view = CatalogView()
        seen = []
        view.subscribe(lambda v: seen.append(len(v.results)))

        view.load([mug, shirt])
        view.set_filters(FilterState(visible_only=True))
        view.remove("missing")

        assert seen == [2, 1]

    def test_failing_listener_does_not_block_others(self, mug):
        view = CatalogView()
        seen = []

        def broken(_):
            raise RuntimeError("boom")

        view.subscribe(broken)
        view.subscribe(lambda v: seen.append(len(v.products)))
        view.load([mug])

        assert seen == [1]
