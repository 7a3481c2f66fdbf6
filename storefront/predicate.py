"""WHERE-clause construction for the filtered product listing.

Each filter dimension contributes at most one boolean sub-clause. Sub-clauses
are emitted in a fixed order (keyword, category, color, tag, size, price),
wrapped in parentheses and joined with AND, so an OR inside one dimension
never leaks into another through operator precedence.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .filters import PRICE_CEILING, PRICE_FLOOR, FilterSpec
from .sanitizer import Sanitizer

logger = logging.getLogger(__name__)

# Packed multi-value columns matched with FIND_IN_SET.
COLOR_COLUMN = "color"
TAG_COLUMN = "tag"
SIZE_COLUMN = "size"


@dataclass(frozen=True)
class Predicate:
    clauses: Tuple[str, ...] = ()

    @property
    def where(self) -> str:
        if not self.clauses:
            return ""
        return "WHERE " + " AND ".join(self.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)


def _keyword_clause(keyword: Optional[str], sanitizer: Sanitizer) -> str:
    if not keyword:
        return ""
    return f"name LIKE {sanitizer.escape('%' + keyword + '%')}"


def _in_clause(column: str, ids: Sequence[int]) -> str:
    if not ids:
        return ""
    return f"{column} IN ({', '.join(str(int(v)) for v in ids)})"


def _set_membership_clause(column: str, ids: Sequence[int]) -> str:
    return " OR ".join(f"FIND_IN_SET({int(v)}, {column})" for v in ids)


def _price_clause(price_range: Optional[Tuple[int, int]]) -> str:
    if price_range is None:
        return ""
    low, high = price_range
    if low > high or low < PRICE_FLOOR or high > PRICE_CEILING:
        logger.debug("Dropping price filter %s..%s outside %s..%s", low, high, PRICE_FLOOR, PRICE_CEILING)
        return ""
    return f"price BETWEEN {int(low)} AND {int(high)}"


def build_predicate(spec: FilterSpec, sanitizer: Sanitizer) -> Predicate:
    conditions: List[str] = [
        _keyword_clause(spec.keyword, sanitizer),
        _in_clause("cat_id", spec.category_ids),
        _set_membership_clause(COLOR_COLUMN, spec.color_ids),
        _set_membership_clause(TAG_COLUMN, spec.tag_ids),
        _set_membership_clause(SIZE_COLUMN, spec.size_ids),
        _price_clause(spec.price_range),
    ]
    predicate = Predicate(tuple(f"({condition})" for condition in conditions if condition))
    logger.debug("listing predicate=%r", predicate.where)
    return predicate


def build_where_clause(spec: FilterSpec, sanitizer: Sanitizer) -> str:
    return build_predicate(spec, sanitizer).where
