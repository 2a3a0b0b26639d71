"""List query schema definitions.

A ``ListQuery`` is the generic listing request (pagination, filters, sort)
accepted by list operations; ``ListQueryResult`` is the envelope they return.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

import config

T = TypeVar("T")


class ListQuery(BaseModel):
    page: int = Field(default=1, ge=1, description="1-based page number.")
    limit: int = Field(
        default=config.DEFAULT_PAGE_SIZE,
        ge=1,
        le=config.MAX_PAGE_SIZE,
        description="Page size.",
    )
    filters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Column filters. Lists match any value, None matches NULL.",
    )
    sort: Optional[str] = Field(
        default=None,
        description="Column to sort by; prefix with '-' for descending.",
    )
    keyword: Optional[str] = Field(
        default=None,
        description="Substring searched across the model's text columns.",
    )


class ListQueryResult(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
