"""Product catalog access.

Provides get_catalog() / set_catalog() to swap implementations:
- InMemoryCatalog for development and testing (default)
- a catalog service client in deployments
"""

from storefront.catalog.memory_adapter import InMemoryCatalog
from storefront.catalog.port import ProductCatalog, VariantSnapshot

_current_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    """Return the active catalog. Defaults to an empty InMemoryCatalog."""
    global _current_catalog
    if _current_catalog is None:
        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: ProductCatalog) -> None:
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None


__all__ = ["InMemoryCatalog", "ProductCatalog", "VariantSnapshot", "get_catalog", "reset_catalog", "set_catalog"]
