"""Portable SQL types and expressions that need per-dialect spelling."""

from datetime import timezone

from sqlalchemy import BigInteger, DateTime, Integer, String, case, cast, func, literal_column
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import TypeDecorator


class grid_floor(FunctionElement):
    """FLOOR(expr) as an integer grid cell index.

    SQLite only ships FLOOR when built with math functions, so it gets an
    equivalent CAST expression instead (CAST truncates toward zero).
    """

    type = BigInteger()
    inherit_cache = True
    name = "grid_floor"


@compiles(grid_floor)
def _grid_floor_default(element, compiler, **kw):
    (arg,) = element.clauses
    return compiler.process(cast(func.floor(arg), BigInteger), **kw)


@compiles(grid_floor, "sqlite")
def _grid_floor_sqlite(element, compiler, **kw):
    (arg,) = element.clauses
    truncated = cast(arg, Integer)
    return compiler.process(truncated - case((arg < truncated, 1), else_=0), **kw)


class year_month(FunctionElement):
    """Format a timestamp as 'YYYY-MM'.

    The format is inlined so GROUP BY repeats an identical expression.
    """

    type = String()
    inherit_cache = True
    name = "year_month"


@compiles(year_month)
def _year_month_default(element, compiler, **kw):
    (arg,) = element.clauses
    return compiler.process(func.to_char(arg, literal_column("'YYYY-MM'")), **kw)


@compiles(year_month, "sqlite")
def _year_month_sqlite(element, compiler, **kw):
    (arg,) = element.clauses
    return compiler.process(func.strftime(literal_column("'%Y-%m'"), arg), **kw)


class UTCNaiveDateTime(TypeDecorator):
    """Timestamps stored as naive UTC.

    Aware values are converted to UTC on the way in, naive values are taken
    as UTC already. Values always come back naive.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
