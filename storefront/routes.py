"""HTTP routes for products, news and comments."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from .cache import CacheBackend
from .comments import add_comment, get_comments
from .config import Settings
from .db import StorageDriver
from .filters import InvalidFilterError, PriceRangePolicy, page_params, parse_filter_spec
from .listing import fetch_page, page_window, paginate_in_memory
from .models import CommentCreate, CommentResult, ListingResponse, NewsListResponse
from .news import get_news, list_all_news, list_news_by_category, parse_numeric_id, resolve_category

logger = logging.getLogger(__name__)


def get_driver(request: Request) -> StorageDriver:
    return request.app.state.driver


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> CacheBackend:
    return request.app.state.cache


def get_price_policy(request: Request) -> PriceRangePolicy:
    return request.app.state.price_policy


products_router = APIRouter(prefix="/products", tags=["products"])
news_router = APIRouter(prefix="/news", tags=["news"])
comments_router = APIRouter(prefix="/comments", tags=["comments"])


# /products/qs?page=1&keyword=xxxx&cat_ids=1,2&sizes=1,2&tags=3,4&colors=1,2,3&orderby=id,asc&perpage=10&price_range=1500,10000
@products_router.get("/qs", response_model=ListingResponse)
async def list_products(
    page: str | None = None,
    keyword: str | None = None,
    cat_ids: str | None = None,
    colors: str | None = None,
    tags: str | None = None,
    sizes: str | None = None,
    orderby: str | None = None,
    perpage: str | None = None,
    price_range: str | None = None,
    driver: StorageDriver = Depends(get_driver),
    app_settings: Settings = Depends(get_settings),
    cache: CacheBackend = Depends(get_cache),
    price_policy: PriceRangePolicy = Depends(get_price_policy),
) -> Dict[str, Any]:
    params = {
        "page": page,
        "keyword": keyword,
        "cat_ids": cat_ids,
        "colors": colors,
        "tags": tags,
        "sizes": sizes,
        "orderby": orderby,
        "perpage": perpage,
        "price_range": price_range,
    }
    try:
        spec = parse_filter_spec(
            params,
            price_policy=price_policy,
            default_perpage=app_settings.default_perpage,
            max_perpage=app_settings.max_perpage,
        )
        result = await fetch_page(driver, spec, cache=cache, cache_ttl=app_settings.cache_ttl_seconds)
    except InvalidFilterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return result.to_payload()


@news_router.get("/", response_model=NewsListResponse)
async def list_news(
    page: str | None = None,
    perpage: str | None = None,
    driver: StorageDriver = Depends(get_driver),
    app_settings: Settings = Depends(get_settings),
) -> NewsListResponse:
    page_no, per_page = page_params(page, perpage, app_settings.news_perpage, app_settings.max_perpage)
    all_news = await asyncio.to_thread(list_all_news, driver)
    try:
        news, total_pages = paginate_in_memory(all_news, page_no, per_page)
    except InvalidFilterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return NewsListResponse(news=news, currentPage=page_no, totalPages=total_pages)


@news_router.get("/category/{cid}")
async def news_by_category(
    cid: str,
    page: str | None = None,
    perpage: str | None = None,
    driver: StorageDriver = Depends(get_driver),
    app_settings: Settings = Depends(get_settings),
) -> List[Dict[str, Any]]:
    category_number = parse_numeric_id(cid)
    if category_number is None:
        raise HTTPException(status_code=400, detail=f"Invalid cid: {cid!r}")
    category_id = resolve_category(category_number)
    if category_id is None:
        raise HTTPException(status_code=404, detail="No news found for this category")

    page_no, per_page = page_params(page, perpage, app_settings.news_perpage, app_settings.max_perpage)
    try:
        limit, offset = page_window(page_no, per_page)
    except InvalidFilterError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    rows = await asyncio.to_thread(list_news_by_category, driver, category_id, limit, offset)
    if not rows:
        raise HTTPException(status_code=404, detail="No news found for this category")
    return rows


@news_router.get("/{nid}")
async def news_detail(nid: str, driver: StorageDriver = Depends(get_driver)) -> Dict[str, Any]:
    news_id = parse_numeric_id(nid)
    if news_id is None:
        raise HTTPException(status_code=400, detail=f"Invalid nid: {nid!r}")
    row = await asyncio.to_thread(get_news, driver, news_id)
    if row is None:
        raise HTTPException(status_code=404, detail="News not found")
    return row


@comments_router.get("/{course_id}")
async def course_comments(course_id: int, driver: StorageDriver = Depends(get_driver)) -> List[Dict[str, Any]]:
    return await asyncio.to_thread(get_comments, driver, course_id)


@comments_router.post("", response_model=CommentResult)
async def create_comment(
    payload: CommentCreate,
    response: Response,
    driver: StorageDriver = Depends(get_driver),
) -> CommentResult:
    row, created = await asyncio.to_thread(
        lambda: add_comment(
            driver,
            course_id=payload.course_id,
            user_id=payload.user_id,
            user_email=payload.user_email,
            user_name=payload.user_name,
            comment=payload.comment,
            create_at=payload.date,
            rating=payload.rating,
        )
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return CommentResult(created=created, comment=row)
