"""Query metadata schemas"""

from enum import Enum
from typing import Any, List

from pydantic import BaseModel, Field

from entity_engine.schemas.meta import EntityField


class QueryOperator(str, Enum):
    NONE = "none"
    # Comparison
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    # String
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    # Collection
    IN = "in"
    NOT_IN = "notIn"
    # Null checks
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"
    # Range
    BETWEEN = "between"


class QueryOption(BaseModel):
    label: str
    value: Any = None


class EntityQueryItemMeta(BaseModel):
    """Search capabilities of one searchable field"""
    field: EntityField
    operators: List[QueryOperator]
    options: List[QueryOption] = Field(default_factory=list)


class EntityQueryMeta(BaseModel):
    query_item_metas: List[EntityQueryItemMeta] = Field(default_factory=list)
