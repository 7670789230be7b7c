"""
==============================================================================
Cart Model Tests
==============================================================================

Tests for cart merging, quantities, snapshot totals and notifications.

==============================================================================
"""

from decimal import Decimal

import pytest

from storefront.cart.cart import Cart, CartRegistry
from storefront.core.exceptions import AppException


class TestCartAdd:
    """Tests for adding products."""

    def test_add_new_product(self, mug):
        cart = Cart()
        item = cart.add(mug, 2)

        assert item.quantity == 2
        assert cart.item_count == 2
        assert len(cart) == 1

    def test_add_merges_existing_line(self, mug):
        """Adding the same product grows the existing line."""
        cart = Cart()
        cart.add(mug, 2)
        cart.add(mug, 3)

        assert len(cart.items) == 1
        assert cart.get(mug.id).quantity == 5

    def test_lines_keep_first_add_order(self, mug, shirt):
        cart = Cart()
        cart.add(shirt)
        cart.add(mug)
        cart.add(shirt)

        assert [item.product.id for item in cart.items] == ["shirt", "mug"]

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_add_rejects_quantity_below_one(self, mug, quantity):
        cart = Cart()

        with pytest.raises(AppException) as exc_info:
            cart.add(mug, quantity)

        assert exc_info.value.code == "INVALID_QUANTITY"
        assert cart.is_empty

    def test_merge_cannot_exceed_maximum(self, mug):
        cart = Cart()
        cart.add(mug, 9999)

        with pytest.raises(AppException) as exc_info:
            cart.add(mug, 9999)

        assert exc_info.value.code == "INVALID_QUANTITY"
        assert cart.get(mug.id).quantity == 9999


class TestCartQuantities:
    """Tests for quantity changes and removal."""

    def test_set_quantity(self, mug):
        cart = Cart()
        cart.add(mug)

        assert cart.set_quantity(mug.id, 7) is True
        assert cart.item_count == 7

    def test_set_quantity_zero_is_noop(self, mug):
        cart = Cart()
        cart.add(mug, 2)

        assert cart.set_quantity(mug.id, 0) is False
        assert cart.get(mug.id).quantity == 2

    def test_set_quantity_unknown_product(self, mug):
        cart = Cart()

        assert cart.set_quantity(mug.id, 3) is False
        assert cart.is_empty

    def test_remove(self, mug):
        """Add 2, add 3, remove leaves an empty cart."""
        cart = Cart()
        cart.add(mug, 2)
        cart.add(mug, 3)

        assert cart.remove(mug.id) is True
        assert cart.is_empty
        assert cart.item_count == 0
        assert cart.total == Decimal("0")

    def test_remove_absent_is_noop(self, mug):
        cart = Cart()
        assert cart.remove(mug.id) is False

    def test_clear(self, mug, shirt):
        cart = Cart()
        cart.add(mug)
        cart.add(shirt)
        cart.clear()

        assert cart.is_empty


class TestCartTotals:
    """Tests for Decimal totals over snapshot prices."""

    def test_total(self, mug, shirt):
        cart = Cart()
        cart.add(mug, 2)
        cart.add(shirt)

        assert cart.total == Decimal("39.97")

    def test_total_uses_snapshot_price(self, mug):
        """Changing the product after add does not change the cart."""
        cart = Cart()
        cart.add(mug, 2)

        repriced = mug.model_copy(update={"price": Decimal("100")})
        cart.add(repriced, 1)

        assert cart.get(mug.id).product.price == Decimal("9.99")
        assert cart.total == Decimal("29.97")


class TestCartNotifications:
    """Tests for change notifications."""

    def test_subscribers_notified_on_change(self, mug):
        cart = Cart()
        counts = []
        cart.subscribe(lambda c: counts.append(c.item_count))

        cart.add(mug, 2)
        cart.set_quantity(mug.id, 4)
        cart.remove(mug.id)

        assert counts == [2, 4, 0]

    def test_no_notification_without_change(self, mug):
        cart = Cart()
        calls = []
        cart.subscribe(calls.append)

        cart.set_quantity(mug.id, 2)
        cart.remove(mug.id)
        cart.clear()

        assert calls == []

    def test_unsubscribe(self, mug):
        cart = Cart()
        calls = []
        unsubscribe = cart.subscribe(calls.append)
        unsubscribe()

        cart.add(mug)

        assert calls == []


class TestCartRegistry:
    """Tests for per-session carts."""

    def test_get_creates_once(self):
        carts = CartRegistry()

        first = carts.get("s1")
        again = carts.get("s1")

        assert first is again
        assert first.session_id == "s1"
        assert len(carts) == 1

    def test_drop(self):
        carts = CartRegistry()
        carts.get("s1")

        assert carts.drop("s1") is True
        assert carts.drop("s1") is False
        assert len(carts) == 0
