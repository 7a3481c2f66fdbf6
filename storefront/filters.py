"""Parsing of listing query parameters into a FilterSpec."""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

PRICE_FLOOR = 1500
PRICE_CEILING = 10000

_INT_TOKEN_RE = re.compile(r"\d+", re.ASCII)


class InvalidFilterError(ValueError):
    """Raised when a listing parameter cannot be parsed."""


class PriceRangePolicy(str, enum.Enum):
    # Out-of-domain bounds: ignore the price filter.
    DROP = "drop"
    # Out-of-domain or malformed bounds: reject the request.
    REJECT = "reject"
    # Out-of-domain bounds: clamp them into the domain.
    CLAMP = "clamp"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    field: str = "id"
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class FilterSpec:
    keyword: Optional[str] = None
    category_ids: Tuple[int, ...] = ()
    color_ids: Tuple[int, ...] = ()
    tag_ids: Tuple[int, ...] = ()
    size_ids: Tuple[int, ...] = ()
    price_range: Optional[Tuple[int, int]] = None
    sort: SortSpec = field(default_factory=SortSpec)
    page: int = 1
    per_page: int = 10


def parse_id_list(raw: Optional[str], name: str) -> Tuple[int, ...]:
    """Parse ``"1,2,3"`` into a sorted tuple of distinct ints.

    Blank tokens are skipped; anything that is not a non-negative integer
    raises :class:`InvalidFilterError`.
    """
    if not raw:
        return ()
    values = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        if not _INT_TOKEN_RE.fullmatch(token):
            raise InvalidFilterError(f"{name} must be a comma-separated list of integers, got {token!r}")
        values.add(int(token))
    return tuple(sorted(values))


def _parse_bounds(raw: str) -> Optional[Tuple[int, int]]:
    parts = [part.strip() for part in raw.split(",")]
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def parse_price_range(raw: Optional[str], policy: PriceRangePolicy = PriceRangePolicy.DROP) -> Optional[Tuple[int, int]]:
    if not raw:
        return None
    bounds = _parse_bounds(raw)
    if bounds is None:
        if policy is PriceRangePolicy.DROP:
            logger.debug("Ignoring malformed price_range=%r", raw)
            return None
        raise InvalidFilterError(f"price_range must be '<min>,<max>', got {raw!r}")

    low, high = bounds
    if low > high:
        if policy is PriceRangePolicy.DROP:
            logger.debug("Ignoring inverted price_range=%r", raw)
            return None
        raise InvalidFilterError(f"price_range minimum exceeds maximum, got {low},{high}")
    if policy is PriceRangePolicy.REJECT:
        if low < PRICE_FLOOR or high > PRICE_CEILING:
            raise InvalidFilterError(
                f"price_range must lie within {PRICE_FLOOR},{PRICE_CEILING}, got {low},{high}"
            )
    elif policy is PriceRangePolicy.CLAMP:
        low = min(max(low, PRICE_FLOOR), PRICE_CEILING)
        high = max(min(high, PRICE_CEILING), PRICE_FLOOR)
    # DROP keeps the raw bounds; the predicate builder discards them when
    # they fall outside the domain.
    return low, high


def parse_orderby(raw: Optional[str]) -> SortSpec:
    if not raw or not raw.strip():
        return SortSpec()
    field_name, _, direction = raw.partition(",")
    field_name = field_name.strip()
    direction = direction.strip().lower() or SortDirection.ASC.value
    if not field_name:
        raise InvalidFilterError(f"orderby must be '<field>,<asc|desc>', got {raw!r}")
    try:
        return SortSpec(field=field_name, direction=SortDirection(direction))
    except ValueError:
        raise InvalidFilterError(f"orderby direction must be 'asc' or 'desc', got {direction!r}") from None


def _positive_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= 1 else default


def page_params(
    page: Optional[str],
    perpage: Optional[str],
    default_perpage: int = 10,
    max_perpage: int = 100,
) -> Tuple[int, int]:
    """Coerce page/perpage; unusable values fall back to the defaults."""
    return _positive_int(page, 1), min(_positive_int(perpage, default_perpage), max_perpage)


def parse_filter_spec(
    params: Mapping[str, Optional[str]],
    *,
    price_policy: PriceRangePolicy = PriceRangePolicy.DROP,
    default_perpage: int = 10,
    max_perpage: int = 100,
) -> FilterSpec:
    """Build a FilterSpec from raw ``/products/qs`` query parameters."""
    keyword = (params.get("keyword") or "").strip() or None
    page, per_page = page_params(params.get("page"), params.get("perpage"), default_perpage, max_perpage)
    return FilterSpec(
        keyword=keyword,
        category_ids=parse_id_list(params.get("cat_ids"), "cat_ids"),
        color_ids=parse_id_list(params.get("colors"), "colors"),
        tag_ids=parse_id_list(params.get("tags"), "tags"),
        size_ids=parse_id_list(params.get("sizes"), "sizes"),
        price_range=parse_price_range(params.get("price_range"), price_policy),
        sort=parse_orderby(params.get("orderby")),
        page=page,
        per_page=per_page,
    )

