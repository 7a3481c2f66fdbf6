"""HTTP surface of the storefront service."""

import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from storefront.config import Settings
from storefront.main import create_app


def test_filtered_listing_end_to_end(client, fixture_products):
    """cat_ids + colors + sort + page window against the fixture dataset."""

    response = client.get(
        "/products/qs",
        params={"cat_ids": "1,2", "colors": "3", "orderby": "price,desc", "page": "2", "perpage": "5"},
    )
    assert response.status_code == 200
    body = response.json()

    matching = [
        row for row in fixture_products
        if row["cat_id"] in {1, 2} and "3" in row["color"].split(",")
    ]
    expected = sorted(matching, key=lambda row: (-row["price"], row["id"]))[5:10]
    assert body["total"] == len(matching)
    assert body["page"] == 2
    assert body["perpage"] == 5
    assert [row["id"] for row in body["data"]] == [row["id"] for row in expected]
    for row in body["data"]:
        assert row["cat_id"] in {1, 2}
        assert "3" in row["color"].split(",")
    prices = [row["price"] for row in body["data"]]
    assert prices == sorted(prices, reverse=True)


def test_listing_defaults(client, fixture_products):
    body = client.get("/products/qs").json()
    assert body["total"] == len(fixture_products)
    assert body["page"] == 1
    assert body["perpage"] == 10
    assert [row["id"] for row in body["data"]] == list(range(1, 11))


def test_listing_price_range(client, fixture_products):
    body = client.get("/products/qs", params={"price_range": "2000,3000", "perpage": "100"}).json()
    assert body["total"] == sum(1 for row in fixture_products if 2000 <= row["price"] <= 3000)
    assert all(2000 <= row["price"] <= 3000 for row in body["data"])

    # Below the floor: the price dimension is ignored under the default policy.
    ignored = client.get("/products/qs", params={"price_range": "1000,3000"}).json()
    assert ignored["total"] == len(fixture_products)


def test_listing_keyword_with_metacharacters(client):
    body = client.get("/products/qs", params={"keyword": "'Special';"}).json()
    assert [row["id"] for row in body["data"]] == [61]

    body = client.get("/products/qs", params={"keyword": "50% off"}).json()
    assert [row["id"] for row in body["data"]] == [61]

    body = client.get("/products/qs", params={"keyword": "kit:deluxe"}).json()
    assert [row["id"] for row in body["data"]] == [62]


def test_listing_rejects_malformed_ids(client):
    response = client.get("/products/qs", params={"colors": "1,abc"})
    assert response.status_code == 400
    assert "colors" in response.json()["detail"]


def test_listing_rejects_unlisted_sort_field(client):
    response = client.get("/products/qs", params={"orderby": "password,asc"})
    assert response.status_code == 400

    response = client.get("/products/qs", params={"orderby": "price,sideways"})
    assert response.status_code == 400


def test_listing_reject_price_policy(seeded_driver):
    app_settings = Settings(database_url="sqlite://", cache_enabled=False, load_on_startup=False, price_range_policy="reject")
    with TestClient(create_app(app_settings, driver=seeded_driver)) as test_client:
        assert test_client.get("/products/qs", params={"price_range": "1000,3000"}).status_code == 400
        assert test_client.get("/products/qs", params={"price_range": "2000,3000"}).status_code == 200


def test_storage_failure_maps_to_500(client, seeded_driver, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    monkeypatch.setattr(seeded_driver, "execute", broken)
    with caplog.at_level(logging.ERROR, logger="storefront.main"):
        response = client.get("/products/qs")
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch data, please retry."}

    [record] = [r for r in caplog.records if r.name == "storefront.main" and r.levelno == logging.ERROR]
    assert "Storage failure on GET /products/qs" in record.getMessage()
    assert isinstance(record.exc_info[1], OperationalError)


def test_news_list_is_paginated_in_memory(client):
    body = client.get("/news/").json()
    assert body["message"] == "success"
    assert body["code"] == "200"
    assert body["currentPage"] == 1
    assert body["totalPages"] == 2
    assert [row["news_id"] for row in body["news"]] == [1, 2, 3, 4, 5, 6]

    body = client.get("/news/", params={"page": "2"}).json()
    assert [row["news_id"] for row in body["news"]] == [7, 8]


def test_news_by_category(client):
    response = client.get("/news/category/2")
    assert response.status_code == 200
    assert [row["news_id"] for row in response.json()] == [2, 5, 8]

    assert client.get("/news/category/abc").status_code == 400
    assert client.get("/news/category/9").status_code == 404
    assert client.get("/news/category/2", params={"page": "5"}).status_code == 404


def test_news_detail(client):
    response = client.get("/news/3")
    assert response.status_code == 200
    assert response.json()["title"] == "News 3"

    assert client.get("/news/abc").status_code == 400
    assert client.get("/news/999").status_code == 404


@pytest.mark.parametrize("path", ["/products/qs", "/news/", "/news/category/1"])
def test_page_past_the_driver_integer_range_is_rejected(client, path):
    response = client.get(path, params={"page": "99999999999999999999"})
    assert response.status_code == 400
    assert "out of range" in response.json()["detail"]


def test_comment_insert_if_not_exists(client):
    payload = {
        "course_id": 7,
        "user_id": 1,
        "user_email": "mei@example.com",
        "user_name": "Mei",
        "comment": "Great class",
        "date": "2023-10-01",
        "rating": 5,
    }
    first = client.post("/comments", json=payload)
    assert first.status_code == 201
    assert first.json()["created"] is True

    duplicate = client.post("/comments", json={**payload, "comment": "Posting again"})
    assert duplicate.status_code == 200
    assert duplicate.json()["created"] is False
    assert duplicate.json()["comment"]["comment"] == "Great class"

    later = client.post("/comments", json={**payload, "date": "2023-10-02", "comment": "Second visit"})
    assert later.status_code == 201

    comments = client.get("/comments/7").json()
    assert [row["comment"] for row in comments] == ["Second visit", "Great class"]
    assert client.get("/comments/8").json() == []


def test_comment_validation(client):
    response = client.post(
        "/comments",
        json={"course_id": 7, "user_id": 1, "comment": "x", "date": "2023-10-01", "rating": 9},
    )
    assert response.status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"database": "ok", "cache": "disabled"}
