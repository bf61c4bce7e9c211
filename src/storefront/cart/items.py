"""Cart line management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalog import get_catalog
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class AddToCart:
    """Add a variant to a cart. Without a unit price the catalog price is used."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(min_value=0.0)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    """Set a line's quantity. Zero or less removes the line."""

    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    cart_id = Identifier(required=True)


def _catalog_price(product_id, variant_id):
    snapshot = get_catalog().describe(str(product_id), str(variant_id))
    if snapshot is None:
        raise ValidationError({"variant_id": [f"Variant {variant_id} is not available"]})
    return snapshot.unit_price


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)

        unit_price = command.unit_price
        if unit_price is None:
            unit_price = _catalog_price(command.product_id, command.variant_id)

        cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
            unit_price=unit_price,
        )
        repo.add(cart)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.update_item_quantity(command.variant_id, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_item(command.variant_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
