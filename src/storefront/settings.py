"""Storefront settings read from the ``[custom]`` table of ``domain.toml``.

Each accessor falls back to the built-in default when the active domain
configuration does not define the key.
"""

from protean.utils.globals import current_domain

DEFAULT_CART_TTL_DAYS = 7
DEFAULT_ORDER_CURRENCY = "EUR"
DEFAULT_TAX_RATE = 0.20
DEFAULT_SHIPPING_RATE = 9.99
DEFAULT_SHIPPING_RATES = {
    "express": 15.99,
    "standard": 5.99,
    "free": 0.0,
}


def _custom() -> dict:
    return current_domain.config.get("custom") or {}


def cart_ttl_days() -> int:
    return int(_custom().get("cart_ttl_days", DEFAULT_CART_TTL_DAYS))


def order_currency() -> str:
    return str(_custom().get("order_currency", DEFAULT_ORDER_CURRENCY))


def tax_rate() -> float:
    return float(_custom().get("tax_rate", DEFAULT_TAX_RATE))


def shipping_rate_for(method: str | None) -> float:
    """Return the shipping charge for a shipping method name.

    Unknown or missing methods are charged the default rate.
    """
    rates = {**DEFAULT_SHIPPING_RATES, **(_custom().get("shipping_rates") or {})}
    default = float(_custom().get("default_shipping_rate", DEFAULT_SHIPPING_RATE))
    if not method:
        return default
    return float(rates.get(method.strip().lower(), default))
