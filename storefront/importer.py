"""Seed data importer for an empty database."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import func, select

from .db import StorageDriver
from .schema import News, Product

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("id", "name", "price", "cat_id", "color", "tag", "size", "stock", "image", "description", "created_at")
NEWS_FIELDS = ("news_id", "title", "content", "category_id", "image", "created_at")


def _load_seed(path: Path) -> Dict[str, List[dict]]:
    if not path.exists():
        logger.warning("Seed file %s is missing", path)
        return {}
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def _pack(value: Any) -> str:
    """Packed id columns accept either ``[1, 2]`` or ``"1,2"`` in seed files."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(int(item)) for item in value)
    return str(value)


def _prepare_product(raw: dict) -> dict:
    product = {key: raw[key] for key in PRODUCT_FIELDS if key in raw}
    for column in ("color", "tag", "size"):
        product[column] = _pack(raw.get(column))
    return product


def _prepare_news(raw: dict) -> dict:
    return {key: raw[key] for key in NEWS_FIELDS if key in raw}


def import_seed(driver: StorageDriver, path: Path) -> int:
    seed = _load_seed(path)
    products = [_prepare_product(item) for item in seed.get("products", [])]
    news = [_prepare_news(item) for item in seed.get("news", [])]
    count = driver.insert_many(Product.__table__, products)
    count += driver.insert_many(News.__table__, news)
    logger.info("Imported %s products and %s news from %s", len(products), len(news), path)
    return count


def table_is_empty(driver: StorageDriver) -> bool:
    rows = driver.execute(select(func.count().label("total")).select_from(Product.__table__))
    return int(rows[0]["total"]) == 0


async def import_if_empty(driver: StorageDriver, path: Path) -> int:
    if not await asyncio.to_thread(table_is_empty, driver):
        return 0
    return await asyncio.to_thread(import_seed, driver, path)
