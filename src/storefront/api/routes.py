"""FastAPI routes for the Storefront domain: carts, orders and order admin."""

from fastapi import APIRouter
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddressSchema,
    AddToCartRequest,
    AdjustChargesRequest,
    CancelOrderRequest,
    CartIdResponse,
    CartItemResponse,
    CartResponse,
    CheckoutRequest,
    CreateCartRequest,
    ExtendExpirationRequest,
    MergeGuestCartRequest,
    OrderEventResponse,
    OrderIdResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderSummaryResponse,
    PaymentWebhookRequest,
    PurgeExpiredCartsRequest,
    PurgeResponse,
    RecordPaymentRequest,
    ReorderRequest,
    ReorderResponse,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdateShippingRequest,
    WebhookResponse,
)
from storefront.cart.cart import Cart
from storefront.cart.cleanup import PurgeExpiredCarts
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from storefront.cart.management import CreateCart, ExtendCartExpiration, MergeGuestCart
from storefront.cart.reorder import Reorder
from storefront.order.cancellation import CancelOrder
from storefront.order.charges import AdjustOrderCharges
from storefront.order.creation import PlaceOrder
from storefront.order.order import Order
from storefront.order.payment import ProcessPaymentWebhook, RecordPaymentInfo
from storefront.order.shipping import UpdateShippingInfo
from storefront.order.status import UpdateOrderStatus


def _iso(value):
    return value.isoformat() if value else None


def _address(address):
    if address is None:
        return None
    return AddressSchema(**{name: getattr(address, name) for name in AddressSchema.model_fields})


def _cart_response(cart) -> CartResponse:
    return CartResponse(
        cart_id=str(cart.id),
        user_id=str(cart.user_id) if cart.user_id else None,
        session_id=cart.session_id,
        items=[
            CartItemResponse(
                item_id=str(item.id),
                product_id=str(item.product_id),
                variant_id=str(item.variant_id),
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
            )
            for item in cart.items
        ],
        total_items=cart.total_items,
        subtotal=cart.subtotal,
        is_guest_cart=cart.is_guest_cart,
        is_expired=cart.is_expired,
        expires_at=_iso(cart.expires_at),
    )


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id) if order.user_id else None,
        customer_email=order.customer_email,
        customer_phone=order.customer_phone,
        status=order.status,
        subtotal=order.subtotal,
        shipping_cost=order.shipping_cost,
        tax_amount=order.tax_amount,
        discount_amount=order.discount_amount,
        total=order.total,
        currency=order.currency,
        shipping_address=_address(order.shipping_address),
        billing_address=_address(order.billing_address),
        shipping_method=order.shipping_method,
        tracking_number=order.tracking_number,
        payment_intent_id=order.payment_intent_id,
        payment_method=order.payment_method,
        paid_at=_iso(order.paid_at),
        shipped_at=_iso(order.shipped_at),
        delivered_at=_iso(order.delivered_at),
        cancelled_at=_iso(order.cancelled_at),
        cancellation_reason=order.cancellation_reason,
        notes=order.notes,
        can_be_cancelled=order.can_be_cancelled,
        can_be_refunded=order.can_be_refunded,
        items=[
            OrderItemResponse(
                item_id=str(item.id),
                product_id=str(item.product_id),
                variant_id=str(item.variant_id),
                product_name=item.product_name,
                variant_name=item.variant_name,
                sku=item.sku,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
            )
            for item in order.items
        ],
        events=[
            OrderEventResponse(
                status=entry.status,
                description=entry.description,
                notes=entry.notes,
                occurred_at=_iso(entry.occurred_at),
            )
            for entry in order.timeline
        ],
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(user_id=body.user_id, session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.post("/merge", response_model=CartIdResponse)
async def merge_guest_cart(body: MergeGuestCartRequest) -> CartIdResponse:
    """Fold a guest session's cart into the signed-in user's cart after login."""
    command = MergeGuestCart(user_id=body.user_id, guest_session_id=body.guest_session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.post("/maintenance/purge-expired", response_model=PurgeResponse)
async def purge_expired_carts(body: PurgeExpiredCartsRequest) -> PurgeResponse:
    """Remove expired carts. Called by an external scheduler."""
    command = PurgeExpiredCarts(as_of=body.as_of)
    removed = current_domain.process(command, asynchronous=False)
    return PurgeResponse(removed=removed or 0)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(Cart).get(cart_id)
    return _cart_response(cart)


@cart_router.post("/{cart_id}/items", response_model=StatusResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> StatusResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        unit_price=body.unit_price,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/items/{variant_id}", response_model=StatusResponse)
async def update_cart_item(cart_id: str, variant_id: str, body: UpdateCartItemRequest) -> StatusResponse:
    command = UpdateCartItem(cart_id=cart_id, variant_id=variant_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{variant_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, variant_id: str) -> StatusResponse:
    command = RemoveFromCart(cart_id=cart_id, variant_id=variant_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items", response_model=StatusResponse)
async def clear_cart(cart_id: str) -> StatusResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.put("/{cart_id}/expiration", response_model=StatusResponse)
async def extend_cart_expiration(cart_id: str, body: ExtendExpirationRequest) -> StatusResponse:
    command = ExtendCartExpiration(cart_id=cart_id, days=body.days)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout_cart(cart_id: str, body: CheckoutRequest) -> OrderIdResponse:
    """Place an order from the cart's current lines and empty the cart."""
    command = PlaceOrder(
        cart_id=cart_id,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        shipping_address=body.shipping_address.model_dump_json(),
        billing_address=body.billing_address.model_dump_json() if body.billing_address else None,
        shipping_method=body.shipping_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_orders(user_id: str) -> OrderListResponse:
    """Orders placed by a user, newest first."""
    orders = current_domain.repository_for(Order).for_user(user_id)
    return OrderListResponse(
        orders=[
            OrderSummaryResponse(
                order_id=str(order.id),
                order_number=order.order_number,
                status=order.status,
                total=order.total,
                currency=order.currency,
                item_count=len(order.items),
                created_at=_iso(order.created_at),
            )
            for order in orders
        ]
    )


@order_router.get("/by-number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(order_number: str) -> OrderResponse:
    order = current_domain.repository_for(Order).by_number(order_number)
    if order is None:
        raise ObjectNotFoundError(f"Order {order_number} does not exist")
    return _order_response(order)


@order_router.post("/payments/webhook", response_model=WebhookResponse)
async def payment_webhook(body: PaymentWebhookRequest) -> WebhookResponse:
    """Apply a verified payment processor event. Always acknowledged."""
    command = ProcessPaymentWebhook(
        event_type=body.event_type,
        payment_intent_id=body.payment_intent_id,
        failure_message=body.failure_message,
        amount_refunded=body.amount_refunded,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return WebhookResponse(order_id=order_id)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return _order_response(order)


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    current_domain.process(CancelOrder(order_id=order_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/payment", response_model=StatusResponse)
async def record_payment(order_id: str, body: RecordPaymentRequest) -> StatusResponse:
    command = RecordPaymentInfo(
        order_id=order_id,
        payment_intent_id=body.payment_intent_id,
        payment_method=body.payment_method,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/reorder", response_model=ReorderResponse)
async def reorder(order_id: str, body: ReorderRequest) -> ReorderResponse:
    command = Reorder(order_id=order_id, user_id=body.user_id, session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return ReorderResponse(**result)


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_order_router.put("/{order_id}/shipping", response_model=StatusResponse)
async def update_shipping_info(order_id: str, body: UpdateShippingRequest) -> StatusResponse:
    command = UpdateShippingInfo(
        order_id=order_id,
        tracking_number=body.tracking_number,
        shipping_method=body.shipping_method,
        mark_as_shipped=body.mark_as_shipped,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@admin_order_router.put("/{order_id}/charges", response_model=StatusResponse)
async def adjust_order_charges(order_id: str, body: AdjustChargesRequest) -> StatusResponse:
    command = AdjustOrderCharges(
        order_id=order_id,
        shipping_cost=body.shipping_cost,
        tax_amount=body.tax_amount,
        discount_amount=body.discount_amount,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
