"""In-memory product catalog for development and testing."""

from storefront.catalog.port import ProductCatalog, VariantSnapshot


class InMemoryCatalog(ProductCatalog):
    def __init__(self) -> None:
        self._variants: dict[tuple[str, str], VariantSnapshot] = {}

    def register(
        self,
        product_id: str,
        variant_id: str,
        product_name: str,
        variant_name: str,
        sku: str,
        unit_price: float = 0.0,
    ) -> VariantSnapshot:
        snapshot = VariantSnapshot(
            product_id=str(product_id),
            variant_id=str(variant_id),
            product_name=product_name,
            variant_name=variant_name,
            sku=sku,
            unit_price=unit_price,
        )
        self._variants[(snapshot.product_id, snapshot.variant_id)] = snapshot
        return snapshot

    def withdraw(self, product_id: str, variant_id: str) -> None:
        self._variants.pop((str(product_id), str(variant_id)), None)

    def describe(self, product_id: str, variant_id: str) -> VariantSnapshot | None:
        return self._variants.get((str(product_id), str(variant_id)))
