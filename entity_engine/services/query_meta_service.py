"""Query Meta Service - per-type search operators and option lists"""

from typing import Any, Optional

from entity_engine.core.settings import settings
from entity_engine.schemas.meta import EntityField
from entity_engine.schemas.query import EntityQueryItemMeta, QueryOperator, QueryOption

Op = QueryOperator

QUERY_OPERATORS: dict[str, list[QueryOperator]] = {
    "string": [Op.EQ, Op.CONTAINS, Op.STARTS_WITH, Op.ENDS_WITH, Op.IS_NOT_NULL, Op.IS_NULL],
    "number": [Op.EQ, Op.GT, Op.LT, Op.IS_NOT_NULL, Op.IS_NULL],
    "boolean": [Op.EQ, Op.IS_NOT_NULL, Op.IS_NULL],
    "date": [Op.EQ, Op.GT, Op.LT, Op.BETWEEN, Op.IS_NOT_NULL, Op.IS_NULL],
    "enum": [Op.EQ, Op.NE, Op.IS_NOT_NULL, Op.IS_NULL],
    "array": [Op.IN, Op.NOT_IN, Op.IS_NOT_NULL, Op.IS_NULL],
    "many_to_one": [Op.EQ, Op.IS_NOT_NULL, Op.IS_NULL],
    "one_to_one": [Op.EQ, Op.IS_NOT_NULL, Op.IS_NULL],
    "one_to_many": [Op.IN, Op.NOT_IN, Op.IS_NOT_NULL, Op.IS_NULL],
    "many_to_many": [Op.IN, Op.NOT_IN, Op.IS_NOT_NULL, Op.IS_NULL],
    "binary": [Op.IS_NOT_NULL, Op.IS_NULL],
    "json": [Op.IS_NOT_NULL, Op.IS_NULL],
}


def normalize_option(item: Any) -> Optional[QueryOption]:
    """
    Turn a raw option into a {label, value} pair.

    Objects carrying ``value`` keep it (and their ``label`` when present);
    any other non-null value becomes its own label.
    """
    if item is None:
        return None
    if isinstance(item, dict):
        value = item["value"] if "value" in item else item
        label = item["label"] if "label" in item else value
        return QueryOption(label=str(label), value=value)
    return QueryOption(label=str(item), value=item)


def _field_options(field: EntityField) -> list[QueryOption]:
    if field.type == "boolean":
        return [
            QueryOption(label=settings.QUERY_BOOLEAN_TRUE_LABEL, value=True),
            QueryOption(label=settings.QUERY_BOOLEAN_FALSE_LABEL, value=False),
        ]

    if field.type not in ("enum", "array"):
        return []

    raw = (field.type_options or {}).get("options")
    if isinstance(raw, list):
        items = raw
    elif field.type == "enum":
        # A single option value or object is accepted for enums
        items = [raw]
    else:
        items = []

    options = []
    for item in items:
        option = normalize_option(item)
        if option is not None:
            options.append(option)
    return options


def build_query_item_meta(field: EntityField) -> Optional[EntityQueryItemMeta]:
    """Search metadata for a field, or None when its type has no operator set"""
    operators = QUERY_OPERATORS.get(field.type)
    if not operators:
        return None
    return EntityQueryItemMeta(
        field=field,
        operators=list(operators),
        options=_field_options(field),
    )
