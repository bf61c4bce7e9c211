"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the Protean commands they
are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str
    phone: str | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    user_id: str | None = None
    session_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"user_id": None, "session_id": "sess-9f2c"},
            ]
        }
    }


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str
    quantity: int = Field(ge=1, default=1)
    unit_price: float | None = Field(ge=0, default=None)


class UpdateCartItemRequest(BaseModel):
    quantity: int


class ExtendExpirationRequest(BaseModel):
    days: int = Field(ge=1, default=7)


class MergeGuestCartRequest(BaseModel):
    user_id: str
    guest_session_id: str


class PurgeExpiredCartsRequest(BaseModel):
    as_of: datetime | None = None


class CheckoutRequest(BaseModel):
    customer_email: str
    customer_phone: str | None = None
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    shipping_method: str = "standard"
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_email": "customer@example.com",
                    "shipping_address": {
                        "first_name": "Maria",
                        "last_name": "Ivanova",
                        "address_line1": "12 Vitosha Blvd",
                        "city": "Sofia",
                        "postal_code": "1000",
                        "country": "BG",
                    },
                    "shipping_method": "express",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CancelOrderRequest(BaseModel):
    reason: str | None = None


class RecordPaymentRequest(BaseModel):
    payment_intent_id: str
    payment_method: str | None = None


class PaymentWebhookRequest(BaseModel):
    event_type: str
    payment_intent_id: str
    failure_message: str | None = None
    amount_refunded: float | None = Field(ge=0, default=None)


class ReorderRequest(BaseModel):
    user_id: str | None = None
    session_id: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = None


class UpdateShippingRequest(BaseModel):
    tracking_number: str | None = None
    shipping_method: str | None = None
    mark_as_shipped: bool = False


class AdjustChargesRequest(BaseModel):
    shipping_cost: float | None = None
    tax_amount: float | None = None
    discount_amount: float | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class CartIdResponse(BaseModel):
    cart_id: str | None = None


class OrderIdResponse(BaseModel):
    order_id: str


class PurgeResponse(BaseModel):
    removed: int


class WebhookResponse(BaseModel):
    received: bool = True
    order_id: str | None = None


class ReorderResponse(BaseModel):
    cart_id: str
    items_added: int
    skipped_skus: list[str] = []


class CartItemResponse(BaseModel):
    item_id: str
    product_id: str
    variant_id: str
    quantity: int
    unit_price: float
    line_total: float


class CartResponse(BaseModel):
    cart_id: str
    user_id: str | None = None
    session_id: str | None = None
    items: list[CartItemResponse]
    total_items: int
    subtotal: float
    is_guest_cart: bool
    is_expired: bool
    expires_at: str | None = None


class OrderItemResponse(BaseModel):
    item_id: str
    product_id: str
    variant_id: str
    product_name: str
    variant_name: str
    sku: str
    quantity: int
    unit_price: float
    line_total: float


class OrderEventResponse(BaseModel):
    status: str
    description: str | None = None
    notes: str | None = None
    occurred_at: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    user_id: str | None = None
    customer_email: str
    customer_phone: str | None = None
    status: str
    subtotal: float
    shipping_cost: float
    tax_amount: float
    discount_amount: float
    total: float
    currency: str
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    shipping_method: str | None = None
    tracking_number: str | None = None
    payment_intent_id: str | None = None
    payment_method: str | None = None
    paid_at: str | None = None
    shipped_at: str | None = None
    delivered_at: str | None = None
    cancelled_at: str | None = None
    cancellation_reason: str | None = None
    notes: str | None = None
    can_be_cancelled: bool
    can_be_refunded: bool
    items: list[OrderItemResponse]
    events: list[OrderEventResponse]


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    total: float
    currency: str
    item_count: int
    created_at: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderSummaryResponse]
