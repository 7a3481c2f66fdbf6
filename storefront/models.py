"""Pydantic models for request/response payloads."""
from __future__ import annotations

import datetime
from typing import Any

from pydantic import BaseModel, Field


class ListingResponse(BaseModel):
    total: int
    perpage: int
    page: int
    data: list[dict[str, Any]]


class NewsListResponse(BaseModel):
    message: str = "success"
    code: str = "200"
    news: list[dict[str, Any]]
    currentPage: int
    totalPages: int


class CommentCreate(BaseModel):
    course_id: int
    user_id: int
    user_email: str | None = None
    user_name: str | None = None
    comment: str = Field(..., min_length=1)
    date: datetime.date
    rating: int = Field(..., ge=1, le=5)


class CommentResult(BaseModel):
    created: bool
    comment: dict[str, Any]


class HealthResponse(BaseModel):
    database: str
    cache: str
