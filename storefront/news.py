"""News lookups: full table, by category, by id."""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select

from .db import Row, StorageDriver
from .schema import News

logger = logging.getLogger(__name__)

news_table = News.__table__

# Public category path ids mapped to stored category ids.
NEWS_CATEGORIES = {1: 1, 2: 2, 3: 3}


def parse_numeric_id(raw: str) -> Optional[int]:
    """Return the id as an int, or None when it is not a plain integer."""
    raw = raw.strip()
    if not raw.isascii() or not raw.isdigit():
        return None
    return int(raw)


def resolve_category(cid: int) -> Optional[int]:
    return NEWS_CATEGORIES.get(cid)


def list_all_news(driver: StorageDriver) -> List[Row]:
    return driver.execute(select(news_table).order_by(news_table.c.news_id))


def list_news_by_category(driver: StorageDriver, category_id: int, limit: int, offset: int) -> List[Row]:
    statement = (
        select(news_table)
        .where(news_table.c.category_id == category_id)
        .order_by(news_table.c.news_id)
        .limit(limit)
        .offset(offset)
    )
    return driver.execute(statement)


def get_news(driver: StorageDriver, news_id: int) -> Optional[Row]:
    rows = driver.execute(select(news_table).where(news_table.c.news_id == news_id))
    return rows[0] if rows else None
