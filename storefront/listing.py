"""Paginated product listing on top of the predicate builder.

A page is read with two independent queries sharing one WHERE clause: a
COUNT for the total and a windowed SELECT for the rows. They do not run in a
single transaction, so under concurrent writes ``total`` may disagree with
the rows returned. That is accepted for a listing endpoint.
"""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import asdict, dataclass, field
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .cache import CacheBackend, cache_key
from .db import Row, StorageDriver
from .filters import FilterSpec, InvalidFilterError, SortDirection, SortSpec
from .predicate import build_predicate
from .sanitizer import Sanitizer
from .schema import Product

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = Product.__tablename__

# Largest OFFSET a signed 64-bit driver integer can carry.
MAX_OFFSET = 2**63 - 1

# Client sort keys mapped to store-side columns. Nothing else reaches ORDER BY.
SORTABLE_FIELDS: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "price": "price",
    "cat_id": "cat_id",
    "stock": "stock",
    "created_at": "created_at",
}


@dataclass
class PageResult:
    total: int
    page: int
    per_page: int
    rows: List[Row] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "perpage": self.per_page,
            "page": self.page,
            "data": self.rows,
        }


def resolve_order_by(sort: SortSpec) -> str:
    column = SORTABLE_FIELDS.get(sort.field)
    if column is None:
        allowed = ", ".join(sorted(SORTABLE_FIELDS))
        raise InvalidFilterError(f"Cannot sort by {sort.field!r}; expected one of: {allowed}")
    direction = "DESC" if sort.direction is SortDirection.DESC else "ASC"
    order_by = f"ORDER BY {column} {direction}"
    if column != "id":
        order_by += ", id ASC"
    return order_by


def page_window(page: int, per_page: int) -> Tuple[int, int]:
    """Return ``(limit, offset)`` for a 1-based page number.

    Offsets past a signed 64-bit integer cannot be bound by the drivers and
    raise :class:`InvalidFilterError`.
    """
    page = max(page, 1)
    offset = (page - 1) * per_page
    if offset > MAX_OFFSET:
        raise InvalidFilterError(f"page {page} is out of range for perpage {per_page}")
    return per_page, offset


def count_sql(where: str, table: str = PRODUCTS_TABLE) -> str:
    return f"SELECT COUNT(*) AS total FROM {table} {where}".rstrip()


def page_sql(where: str, order_by: str, table: str = PRODUCTS_TABLE) -> str:
    parts = [f"SELECT * FROM {table}", where, order_by, "LIMIT :limit OFFSET :offset"]
    return " ".join(part for part in parts if part)


def _spec_cache_payload(spec: FilterSpec) -> Dict[str, Any]:
    payload = asdict(spec)
    payload["sort"] = {"field": spec.sort.field, "direction": spec.sort.direction.value}
    return payload


async def fetch_page(
    driver: StorageDriver,
    spec: FilterSpec,
    *,
    cache: Optional[CacheBackend] = None,
    cache_ttl: int = 0,
) -> PageResult:
    # Resolved before any query so a bad sort field never reaches storage.
    order_by = resolve_order_by(spec.sort)
    limit, offset = page_window(spec.page, spec.per_page)

    key = cache_key("products:qs", _spec_cache_payload(spec))
    if cache is not None:
        cached = await asyncio.to_thread(cache.get, key)
        if cached is not None:
            logger.info("listing cache_hit=1 page=%s perpage=%s", spec.page, spec.per_page)
            return PageResult(
                total=cached["total"],
                page=cached["page"],
                per_page=cached["perpage"],
                rows=cached["data"],
            )

    t0 = perf_counter()
    where = build_predicate(spec, Sanitizer(driver.dialect)).where
    t1 = perf_counter()
    count_rows = await asyncio.to_thread(driver.execute, count_sql(where))
    total = int(count_rows[0]["total"]) if count_rows else 0
    t2 = perf_counter()
    rows = await asyncio.to_thread(
        driver.execute,
        page_sql(where, order_by),
        {"limit": limit, "offset": offset},
    )
    t3 = perf_counter()

    logger.info(
        "timing: total=%.2fms build=%.2fms count=%.2fms rows=%.2fms where=%r order=%r limit=%s offset=%s hits=%s/%s",
        (t3 - t0) * 1000,
        (t1 - t0) * 1000,
        (t2 - t1) * 1000,
        (t3 - t2) * 1000,
        where,
        order_by,
        limit,
        offset,
        len(rows),
        total,
    )

    result = PageResult(total=total, page=spec.page, per_page=spec.per_page, rows=rows)
    if cache is not None:
        await asyncio.to_thread(cache.set, key, result.to_payload(), cache_ttl)
    return result


def paginate_in_memory(rows: Sequence[Row], page: int, per_page: int) -> Tuple[List[Row], int]:
    """Slice an already loaded table; returns ``(page_rows, total_pages)``.

    Reads the whole table per request, so it is only meant for small
    unfiltered listings.
    """
    limit, offset = page_window(page, per_page)
    total_pages = math.ceil(len(rows) / per_page) if per_page else 0
    return list(rows[offset:offset + limit]), total_pages
