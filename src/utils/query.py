"""List query translation.

Turns a generic ``ListQuery`` (page, limit, filters, sort, keyword) into the
criteria, ordering and window used with ``Session.query``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Query

from core.exceptions import ValidationError
from schemas.query import ListQuery

logger = logging.getLogger(__name__)


@dataclass
class FindManyParams:
    """Query arguments shared by the page select and the count."""

    where: List[Any] = field(default_factory=list)
    order_by: List[Any] = field(default_factory=list)
    offset: int = 0
    limit: Optional[int] = None

    def apply(self, query: Query) -> Query:
        """Apply filters, ordering and the page window to a query."""
        query = query.filter(*self.where).order_by(*self.order_by)
        if self.offset:
            query = query.offset(self.offset)
        if self.limit is not None:
            query = query.limit(self.limit)
        return query

    def apply_where(self, query: Query) -> Query:
        return query.filter(*self.where)


def _column(model, name: str, allowed: Optional[Iterable[str]]):
    if allowed is not None and name not in allowed:
        raise ValidationError(f"Field '{name}' is not allowed")
    column = model.__table__.columns.get(name)
    if column is None:
        raise ValidationError(f"Unknown field '{name}'")
    return getattr(model, name)


def build_find_many_params(
    model,
    query: ListQuery,
    searchable: Sequence[str] = (),
    allowed: Optional[Iterable[str]] = None,
) -> FindManyParams:
    """Build query arguments for a model from a list query.

    Args:
        model: SQLAlchemy model class to query.
        query: The generic list query.
        searchable: Text columns matched by ``query.keyword``.
        allowed: Column names accepted in filters and sort. All table columns
            are accepted when None.

    Returns:
        FindManyParams for the page select; its ``where`` is also used for
        the count.

    Raises:
        ValidationError: If a filter or sort field is unknown or not allowed.
    """
    if allowed is not None:
        allowed = set(allowed)

    params = FindManyParams(
        offset=(query.page - 1) * query.limit,
        limit=query.limit,
    )

    for name, value in query.filters.items():
        column = _column(model, name, allowed)
        if isinstance(value, (list, tuple, set)):
            params.where.append(column.in_(list(value)))
        elif value is None:
            params.where.append(column.is_(None))
        else:
            params.where.append(column == value)

    if query.keyword and searchable:
        pattern = f"%{query.keyword}%"
        params.where.append(
            or_(*[getattr(model, name).ilike(pattern) for name in searchable])
        )

    if query.sort:
        descending = query.sort.startswith("-")
        column = _column(model, query.sort.lstrip("-"), allowed)
        params.order_by.append(column.desc() if descending else column.asc())
    elif "created_at" in model.__table__.columns:
        params.order_by.append(model.created_at.desc())

    # Stable pagination when the sort key has ties
    primary_keys = list(model.__table__.primary_key.columns)
    params.order_by.extend(primary_keys)

    logger.debug(
        "List params for %s: %d filters, offset=%d, limit=%s",
        model.__tablename__,
        len(params.where),
        params.offset,
        params.limit,
    )
    return params
