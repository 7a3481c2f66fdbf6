"""Shared fixtures: in-memory database, fixture dataset and API client."""

import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.db import create_driver
from storefront.main import create_app
from storefront.schema import News, Product


def _build_products():
    rows = []
    for i in range(1, 61):
        colors = [i % 5 + 1]
        if i % 2 == 0:
            colors.append(3)
        rows.append(
            {
                "id": i,
                "name": f"Coffee {i:02d}" if i % 3 == 0 else f"Tea {i:02d}",
                # Unique prices keep price ordering unambiguous.
                "price": 1500 + i * 100,
                "cat_id": i % 4 + 1,
                "color": ",".join(str(c) for c in sorted(set(colors))),
                "tag": str(i % 3 + 1),
                "size": "1,2" if i % 2 else "3",
                "stock": i,
            }
        )
    rows.append(
        {"id": 61, "name": "50% off 'Special'; blend", "price": 9000, "cat_id": 4, "color": "", "tag": "", "size": "", "stock": 1}
    )
    rows.append(
        {"id": 62, "name": "Barista Kit:Deluxe", "price": 9100, "cat_id": 4, "color": "", "tag": "", "size": "", "stock": 1}
    )
    return rows


FIXTURE_PRODUCTS = _build_products()
FIXTURE_NEWS = [
    {"news_id": i, "title": f"News {i}", "content": f"Body {i}", "category_id": (i - 1) % 3 + 1}
    for i in range(1, 9)
]


@pytest.fixture
def fixture_products():
    return [dict(row) for row in FIXTURE_PRODUCTS]


@pytest.fixture
def driver():
    """Fresh in-memory SQLite storage driver with the schema created."""
    storage = create_driver("sqlite://")
    try:
        yield storage
    finally:
        storage.dispose()


@pytest.fixture
def seeded_driver(driver):
    driver.insert_many(Product.__table__, FIXTURE_PRODUCTS)
    driver.insert_many(News.__table__, FIXTURE_NEWS)
    return driver


@pytest.fixture
def test_settings():
    return Settings(database_url="sqlite://", cache_enabled=False, load_on_startup=False)


@pytest.fixture
def client(seeded_driver, test_settings):
    app = create_app(test_settings, driver=seeded_driver)
    with TestClient(app) as test_client:
        yield test_client
