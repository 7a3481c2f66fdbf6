"""Literal escaping for values interpolated into listing SQL."""
from __future__ import annotations

from typing import Any

from sqlalchemy import String, literal
from sqlalchemy.engine import Dialect


class Sanitizer:
    """Render Python values as SQL literals for a given dialect.

    Literals are produced for ``text()`` templates: the dialect is cloned with
    the ``named`` paramstyle so percent signs are left for the driver layer to
    double, and colons are backslash-escaped so they are never read as bind
    parameters.
    """

    def __init__(self, dialect: Dialect) -> None:
        self._dialect = type(dialect)(paramstyle="named")

    def escape(self, value: Any) -> str:
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, int):
            return str(value)
        compiled = literal(str(value), String()).compile(
            dialect=self._dialect,
            compile_kwargs={"literal_binds": True},
        )
        return str(compiled).replace(":", "\\:")
