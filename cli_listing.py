"""Terminal client that reuses the in-process listing logic."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Iterable
from urllib.parse import parse_qsl

from storefront.config import settings
from storefront.db import StorageDriver, create_driver
from storefront.filters import InvalidFilterError, PriceRangePolicy, parse_filter_spec
from storefront.listing import fetch_page

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


async def perform_listing(driver: StorageDriver, query: str) -> dict:
    params = dict(parse_qsl(query.lstrip("?"), keep_blank_values=True))
    spec = parse_filter_spec(
        params,
        price_policy=PriceRangePolicy(settings.price_range_policy),
        default_perpage=settings.default_perpage,
        max_perpage=settings.max_perpage,
    )
    result = await fetch_page(driver, spec)
    return result.to_payload()


def pretty_print_page(query: str, payload: dict) -> None:
    rows = payload.get("data", [])
    total = payload.get("total", 0)
    color = GREEN if rows else RED
    print(
        f"Query: {query or '(none)'} | {color}{len(rows)} of {total}{RESET} | "
        f"page {payload.get('page')} perpage {payload.get('perpage')}"
    )
    for row in rows:
        print(f"  #{row.get('id')} | cat={row.get('cat_id')} | price={row.get('price')} | {row.get('name')}")


def run_query(driver: StorageDriver, query: str) -> bool:
    try:
        payload = asyncio.run(perform_listing(driver, query))
    except InvalidFilterError as exc:
        print(f"{RED}Invalid query {query!r}: {exc}{RESET}")
        return False
    pretty_print_page(query, payload)
    return True


def batch_mode(driver: StorageDriver, file_path: Path) -> bool:
    ok = True
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query or query.startswith("#"):
                continue
            ok = run_query(driver, query) and ok
    return ok


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the product listing")
    parser.add_argument("query", nargs="?", default="", help="Listing query string, e.g. 'cat_ids=1,2&orderby=price,desc'")
    parser.add_argument("--batch", type=Path, help="File with query strings to execute line by line")
    parser.add_argument("--database-url", default=settings.database_url, help="SQLAlchemy database URL")
    args = parser.parse_args(list(argv) if argv is not None else None)

    driver = create_driver(args.database_url)
    try:
        if args.batch:
            ok = batch_mode(driver, args.batch)
        else:
            ok = run_query(driver, args.query)
    finally:
        driver.dispose()
    return 0 if ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
