"""Course comments: listing and insert-if-not-exists.

A user may leave one comment per course per day. The rule is enforced by the
``uq_comments_user_course_day`` constraint rather than a read before the
write, so two concurrent identical submissions cannot both insert.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .db import Row, StorageDriver
from .schema import Comment

logger = logging.getLogger(__name__)

comments_table = Comment.__table__


def get_comments(driver: StorageDriver, course_id: int) -> List[Row]:
    statement = (
        select(comments_table)
        .where(comments_table.c.course_id == course_id)
        .order_by(comments_table.c.create_at.desc(), comments_table.c.id.desc())
    )
    return driver.execute(statement)


def _find_comment(driver: StorageDriver, course_id: int, user_id: int, create_at: date) -> Optional[Row]:
    statement = select(comments_table).where(
        comments_table.c.course_id == course_id,
        comments_table.c.user_id == user_id,
        comments_table.c.create_at == create_at,
    )
    rows = driver.execute(statement)
    return rows[0] if rows else None


def add_comment(
    driver: StorageDriver,
    *,
    course_id: int,
    user_id: int,
    user_email: Optional[str],
    user_name: Optional[str],
    comment: str,
    create_at: date,
    rating: int,
) -> Tuple[Row, bool]:
    """Insert a comment unless the user already commented on the course that day.

    Returns ``(row, created)``; on conflict the existing row is returned with
    ``created=False``.
    """
    values = {
        "product_id": 0,
        "course_id": course_id,
        "user_id": user_id,
        "user_email": user_email,
        "user_name": user_name,
        "comment": comment,
        "create_at": create_at,
        "rating": rating,
    }
    try:
        comment_id = driver.insert(comments_table, values)
    except IntegrityError:
        existing = _find_comment(driver, course_id, user_id, create_at)
        if existing is None:
            raise
        logger.info("Duplicate comment user=%s course=%s date=%s", user_id, course_id, create_at)
        return existing, False
    logger.info("Created comment id=%s user=%s course=%s", comment_id, user_id, course_id)
    return {"id": comment_id, **values}, True
