"""Tests for cart and order line items: line totals and field guards."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import Cart
from storefront.order.order import Order


@pytest.fixture()
def cart_item():
    cart = Cart.create(user_id="user-001")
    return cart.add_item("prod-001", "var-001", 3, 19.99)


@pytest.fixture()
def order():
    return Order.create(order_number="ORD-2026-000001", customer_email="customer@test.com")


def _add(order, **overrides):
    values = {
        "product_id": "prod-001",
        "variant_id": "var-001",
        "product_name": "Split AC Inverter",
        "variant_name": "9000 BTU",
        "sku": "AC-INV-9K",
        "quantity": 2,
        "unit_price": 999.99,
    }
    values.update(overrides)
    return order.add_item(**values)


class TestCartItem:
    def test_line_total(self, cart_item):
        assert cart_item.line_total == pytest.approx(59.97)

    def test_set_quantity(self, cart_item):
        cart_item.set_quantity(4)
        assert cart_item.line_total == pytest.approx(79.96)

    def test_set_quantity_rejects_zero(self, cart_item):
        with pytest.raises(ValidationError):
            cart_item.set_quantity(0)
        assert cart_item.quantity == 3

    def test_set_unit_price_rejects_negative(self, cart_item):
        with pytest.raises(ValidationError):
            cart_item.set_unit_price(-5)
        assert cart_item.unit_price == 19.99

    @pytest.mark.parametrize("quantity", [2.5, "two", None, True])
    def test_quantity_must_be_a_whole_number(self, quantity):
        cart = Cart.create(user_id="user-001")
        with pytest.raises(ValidationError) as exc:
            cart.add_item("prod-001", "var-001", quantity, 19.99)
        assert "quantity" in exc.value.messages
        assert len(cart.items) == 0

    def test_integral_float_quantity_is_accepted(self):
        cart = Cart.create(user_id="user-001")
        item = cart.add_item("prod-001", "var-001", 2.0, 19.99)
        assert item.quantity == 2

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), "free"])
    def test_unit_price_must_be_a_finite_number(self, cart_item, price):
        with pytest.raises(ValidationError) as exc:
            cart_item.set_unit_price(price)
        assert "unit_price" in exc.value.messages
        assert cart_item.unit_price == 19.99


class TestOrderItem:
    def test_snapshot_fields_are_kept(self, order):
        item = _add(order)
        assert item.product_name == "Split AC Inverter"
        assert item.variant_name == "9000 BTU"
        assert item.sku == "AC-INV-9K"
        assert item.line_total == pytest.approx(1999.98)

    def test_snapshot_text_is_trimmed(self, order):
        item = _add(order, sku="  AC-INV-9K  ")
        assert item.sku == "AC-INV-9K"

    @pytest.mark.parametrize("field", ["product_name", "variant_name", "sku"])
    @pytest.mark.parametrize("blank", ["", "   ", None])
    def test_blank_snapshot_text_is_rejected(self, order, field, blank):
        with pytest.raises(ValidationError) as exc:
            _add(order, **{field: blank})
        assert field in exc.value.messages
        assert len(order.items) == 0

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, order, quantity):
        with pytest.raises(ValidationError):
            _add(order, quantity=quantity)

    def test_unit_price_may_be_zero_but_not_negative(self, order):
        assert _add(order, unit_price=0.0).line_total == 0.0
        with pytest.raises(ValidationError):
            _add(order, variant_id="var-002", unit_price=-1.0)

    def test_setters_revalidate(self, order):
        item = _add(order)
        item.set_product_name("Split AC Inverter Pro")
        item.set_variant_name("12000 BTU")
        item.set_sku("AC-INV-12K")
        item.set_unit_price(1199.0)
        item.set_quantity(1)

        assert item.line_total == 1199.0
        for setter in ("set_product_name", "set_variant_name", "set_sku"):
            with pytest.raises(ValidationError):
                getattr(item, setter)(" ")
        assert item.sku == "AC-INV-12K"
