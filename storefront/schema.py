"""Relational schema for the storefront tables."""
from __future__ import annotations

from sqlalchemy import Column, Date, Integer, String, Text, UniqueConstraint
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False, default=0)
    cat_id = Column(Integer, nullable=False, index=True)
    # Packed comma-separated id lists, matched with FIND_IN_SET.
    color = Column(String(255), nullable=False, default="")
    tag = Column(String(255), nullable=False, default="")
    size = Column(String(255), nullable=False, default="")
    stock = Column(Integer, nullable=False, default=0)
    image = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(String(32), nullable=True)  # ISO 8601 string


class News(Base):
    __tablename__ = "news"

    news_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    category_id = Column(Integer, nullable=False, index=True)
    image = Column(String(255), nullable=True)
    created_at = Column(String(32), nullable=True)  # ISO 8601 string


class Comment(Base):
    __tablename__ = "comments"
    # One comment per user, course and day; enforced by the store so that
    # concurrent submissions cannot both insert.
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "create_at", name="uq_comments_user_course_day"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, default=0)
    course_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=False)
    user_email = Column(String(255), nullable=True)
    user_name = Column(String(255), nullable=True)
    comment = Column(Text, nullable=False)
    create_at = Column(Date, nullable=False)
    rating = Column(Integer, nullable=False)


def create_all(engine: Engine) -> None:
    Base.metadata.create_all(engine)
