import pytest
from protean.integrations.pytest import DomainFixture
from storefront.catalog import InMemoryCatalog, reset_catalog, set_catalog


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    """An in-memory catalog with two air conditioner variants and a thermostat."""
    catalog = InMemoryCatalog()
    catalog.register("prod-ac-01", "var-ac-9k", "Split AC Inverter", "9000 BTU", "AC-INV-9K", 999.99)
    catalog.register("prod-ac-01", "var-ac-12k", "Split AC Inverter", "12000 BTU", "AC-INV-12K", 1199.0)
    catalog.register("prod-th-01", "var-th-wifi", "Smart Thermostat", "Wi-Fi", "TH-SMART-WIFI", 150.0)
    set_catalog(catalog)
    yield catalog
    reset_catalog()
