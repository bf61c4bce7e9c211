"""Product catalog port.

Checkout and cart pricing need a read-only view of the product catalog:
display names and SKU for order snapshots, and the current unit price when
a client adds a variant without quoting one. Catalog management itself
lives outside the storefront.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class VariantSnapshot:
    """What an order line records about a variant at the moment of purchase."""

    product_id: str
    variant_id: str
    product_name: str
    variant_name: str
    sku: str
    unit_price: float


class ProductCatalog(ABC):
    @abstractmethod
    def describe(self, product_id: str, variant_id: str) -> VariantSnapshot | None:
        """Return the variant's current snapshot, or ``None`` if it is not sold."""
        ...
