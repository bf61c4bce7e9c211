"""Tests for the Cart aggregate: ownership, expiry and derived values."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import Cart
from storefront.cart.events import CartClaimed, CartExpirationExtended


class TestCartCreation:
    def test_user_cart(self):
        cart = Cart.create(user_id="user-001")
        assert cart.user_id == "user-001"
        assert cart.session_id is None
        assert cart.is_guest_cart is False

    def test_guest_cart(self):
        cart = Cart.create(session_id="sess-001")
        assert cart.session_id == "sess-001"
        assert cart.is_guest_cart is True

    @pytest.mark.parametrize("session_id", [None, "", "   "])
    def test_cart_without_owner_is_rejected(self, session_id):
        with pytest.raises(ValidationError) as exc:
            Cart.create(session_id=session_id)
        assert "cart" in exc.value.messages

    def test_cart_with_both_owners_is_rejected(self):
        with pytest.raises(ValidationError):
            Cart.create(user_id="user-001", session_id="sess-001")

    def test_expires_in_seven_days_by_default(self):
        cart = Cart.create(user_id="user-001")
        remaining = cart.expires_at - datetime.now(UTC)
        assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)

    def test_custom_ttl(self):
        cart = Cart.create(user_id="user-001", ttl_days=30)
        assert cart.expires_at - cart.created_at == timedelta(days=30)

    def test_new_cart_is_empty(self):
        cart = Cart.create(user_id="user-001")
        assert cart.total_items == 0
        assert cart.subtotal == 0
        assert cart.is_expired is False


class TestCartExpiry:
    def test_cart_past_its_expiry_is_expired(self):
        cart = Cart.create(user_id="user-001")
        cart.expires_at = datetime.now(UTC) - timedelta(minutes=1)
        assert cart.is_expired is True

    def test_naive_expiry_is_read_as_utc(self):
        cart = Cart.create(user_id="user-001")
        cart.expires_at = (datetime.now(UTC) - timedelta(hours=1)).replace(tzinfo=None)
        assert cart.is_expired is True

    def test_extend_expiration(self):
        cart = Cart.create(user_id="user-001")
        cart.expires_at = datetime.now(UTC) - timedelta(days=1)
        cart._events.clear()

        cart.extend_expiration(14)

        assert cart.is_expired is False
        assert cart.expires_at - datetime.now(UTC) > timedelta(days=13)
        assert isinstance(cart._events[0], CartExpirationExtended)

    def test_extend_expiration_defaults_to_seven_days(self):
        cart = Cart.create(user_id="user-001", ttl_days=1)
        cart.extend_expiration()
        assert cart.expires_at - datetime.now(UTC) > timedelta(days=6)

    @pytest.mark.parametrize("days", [0, -3])
    def test_extend_by_non_positive_days_is_rejected(self, days):
        cart = Cart.create(user_id="user-001")
        with pytest.raises(ValidationError):
            cart.extend_expiration(days)


class TestCartClaim:
    def test_set_user_promotes_guest_cart(self):
        cart = Cart.create(session_id="sess-001")
        cart._events.clear()

        cart.set_user("user-001")

        assert cart.user_id == "user-001"
        assert cart.session_id is None
        assert cart.is_guest_cart is False

        event = cart._events[0]
        assert isinstance(event, CartClaimed)
        assert event.previous_session_id == "sess-001"

    def test_set_user_requires_an_id(self):
        cart = Cart.create(session_id="sess-001")
        with pytest.raises(ValidationError):
            cart.set_user("")
        assert cart.session_id == "sess-001"

    def test_mutations_touch_updated_at(self):
        cart = Cart.create(session_id="sess-001")
        before = cart.updated_at
        cart.set_user("user-001")
        assert cart.updated_at >= before
