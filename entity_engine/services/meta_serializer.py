"""Meta Serializer - JSON interchange form of models, views and field schemas

Serializing is strict about the identity of what it is given. Deserializing is
lenient: anything malformed is logged and left out so that the largest valid
part of a stale or hand-edited document survives.
"""

import json
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from entity_engine.core.errors import InvalidView
from entity_engine.core.logging_config import get_logger
from entity_engine.schemas.field_schema import FieldSchema
from entity_engine.schemas.meta import (
    EntityModel,
    EntityModelExternalConfig,
    EntityView,
    EntityViewField,
)
from entity_engine.services.json_schema_service import (
    field_schema_to_json_schema,
    json_schema_to_field_schema,
)
from entity_engine.services.view_tree import map_view_items

logger = get_logger(__name__)

VIEW_SERIALIZER_VERSION = 1
VIEW_SERIALIZER_VERSION_KEY = "__viewSerializerVersion"
DENSITIES = ("small", "medium", "large")


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_dict(value: Any) -> bool:
    return isinstance(value, dict)


def _is_flex(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value in (0, 1)


def _is_density(value: Any) -> bool:
    return value in DENSITIES


# interchange key -> (attribute, check)
MODEL_FIELD_KEYS: dict[str, tuple[str, Callable[[Any], bool]]] = {
    "typeOptions": ("type_options", _is_dict),
    "description": ("description", _is_str),
    "isRequired": ("is_required", _is_bool),
    "isPrimaryKey": ("is_primary_key", _is_bool),
    "isUnique": ("is_unique", _is_bool),
    "editable": ("editable", _is_bool),
    "searchable": ("searchable", _is_bool),
    "refModel": ("ref_model", _is_str),
    "refField": ("ref_field", _is_str),
    "order": ("order", _is_number),
}

VIEW_ITEM_KEYS: dict[str, tuple[str, Callable[[Any], bool]]] = {
    "title": ("title", _is_str),
    "description": ("description", _is_str),
    "icon": ("icon", _is_str),
    "widget": ("widget", _is_str),
    "widgetOptions": ("widget_options", _is_dict),
    "width": ("width", _is_number),
    "flex": ("flex", _is_flex),
    "spanCols": ("span_cols", _is_number),
    "order": ("order", _is_number),
    "hiddenWhen": ("hidden_when", _is_str),
    "showWhen": ("show_when", _is_str),
    "requiredWhen": ("required_when", _is_str),
    "readOnlyWhen": ("read_only_when", _is_str),
    "disabledWhen": ("disabled_when", _is_str),
    "referenceView": ("reference_view", _is_dict),
    "referenceComp": ("reference_comp", _is_dict),
}

VIEW_KEYS: dict[str, tuple[str, Callable[[Any], bool]]] = {
    "description": ("description", _is_str),
    "viewOptions": ("view_options", _is_dict),
    "canEdit": ("can_edit", _is_bool),
    "canNew": ("can_new", _is_bool),
    "canDelete": ("can_delete", _is_bool),
    "density": ("density", _is_density),
}


def _checked(source: dict, keys: dict[str, tuple[str, Callable[[Any], bool]]]) -> dict[str, Any]:
    """Attributes for every key of ``source`` whose value passes its check"""
    return {
        attribute: source[key]
        for key, (attribute, check) in keys.items()
        if key in source and check(source[key])
    }


def _load(data: Union[str, dict, None], kind: str) -> Optional[dict]:
    if not data:
        return None
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse {kind} JSON: {e}")
            return None
    if not isinstance(data, dict):
        logger.warning(f"Expected a JSON object for {kind}, got {type(data).__name__}")
        return None
    return data


def serialize_field_schema(schema: Optional[FieldSchema]) -> Optional[dict]:
    if schema is None:
        return None
    try:
        return field_schema_to_json_schema(schema)
    except ValueError as e:
        logger.error(f"Failed to serialize field schema to JSON Schema: {e}")
        return None


def deserialize_field_schema(data: Any) -> Optional[FieldSchema]:
    if not data:
        return None
    try:
        return json_schema_to_field_schema(data)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to deserialize field schema from JSON Schema: {e}")
        return None


def serialize_entity_model(model: EntityModel) -> dict:
    """
    Interchange object for a model.

    Authored field schemas travel as ``schemaSerialized``. Of the external
    configuration only the feature list is written.
    """
    data = model.model_dump(by_alias=True, exclude_none=True, exclude={"fields", "external_config"})
    data["externalConfig"] = {
        "features": list(model.external_config.features) if model.external_config else [],
    }

    fields = []
    for field in model.fields:
        item = field.model_dump(by_alias=True, exclude_none=True)
        schema = serialize_field_schema(field.field_schema)
        if schema is not None:
            item["schemaSerialized"] = schema
        fields.append(item)
    data["fields"] = fields
    return data


def deserialize_entity_model(data: Union[str, dict, None]) -> Optional[EntityModel]:
    """
    Rebuild a model from its interchange form, or None when it is unusable.

    The model needs string ``name`` and ``title`` and a ``fields`` list; a
    field needs string ``name``, ``title`` and ``type``. Fields failing that,
    and repeats of an earlier field name, are skipped. Other keys of the
    wrong type are ignored.
    """
    obj = _load(data, "model")
    if obj is None:
        return None

    name, title = obj.get("name"), obj.get("title")
    if not _is_str(name) or not _is_str(title) or not isinstance(obj.get("fields"), list):
        logger.warning_ctx("Dropping model without name, title or fields", model_name=name)
        return None

    fields = []
    seen = set()
    for raw in obj["fields"]:
        if not isinstance(raw, dict):
            continue
        field_name, field_title, field_type = raw.get("name"), raw.get("title"), raw.get("type")
        if not (_is_str(field_name) and _is_str(field_title) and _is_str(field_type)):
            logger.warning(f"Dropping field of model {name} without name, title or type")
            continue
        if field_name in seen:
            logger.warning(f"Dropping duplicate field {name}.{field_name}")
            continue
        seen.add(field_name)

        fields.append({
            "name": field_name,
            "title": field_title,
            "type": field_type,
            "default_value": raw.get("defaultValue"),
            **_checked(raw, MODEL_FIELD_KEYS),
            "field_schema": deserialize_field_schema(raw.get("schemaSerialized")),
        })

    values: dict[str, Any] = {"name": name, "title": title, "fields": fields}
    if _is_str(obj.get("description")):
        values["description"] = obj["description"]
    if _is_bool(obj.get("external")):
        values["external"] = obj["external"]
    if _is_dict(obj.get("externalConfig")):
        try:
            values["external_config"] = EntityModelExternalConfig.model_validate(obj["externalConfig"])
        except ValidationError as e:
            logger.warning(f"Ignoring invalid externalConfig of model {name}: {e}")

    try:
        return EntityModel.model_validate(values)
    except ValidationError as e:
        logger.warning(f"Dropping invalid model {name}: {e}")
        return None


def _dump_view_items(items: list[EntityViewField]) -> list[dict]:
    def transform(item: EntityViewField):
        if not item.name:
            return None, None
        return item.model_dump(by_alias=True, exclude_none=True, exclude={"fields"}), item.fields

    def attach(node: dict, children: list) -> None:
        node["fields"] = children

    return map_view_items(items, transform, attach, keep_empty_panels=False)


def serialize_entity_view(view: Optional[EntityView]) -> Optional[dict]:
    """
    Interchange object for a view, stamped with the serializer version.

    Raises InvalidView when the view lacks its name, model name or view type.
    """
    if view is None:
        return None
    if not view.name or not view.model_name or not view.view_type:
        raise InvalidView("Invalid view: missing name, modelName or viewType")

    data: dict[str, Any] = {VIEW_SERIALIZER_VERSION_KEY: VIEW_SERIALIZER_VERSION}
    data.update(view.model_dump(by_alias=True, exclude_none=True, exclude={"items"}))
    data["items"] = _dump_view_items(view.items)
    return data


def _revive_view_items(items: list) -> list[dict]:
    def transform(raw: Any):
        if not isinstance(raw, dict) or not _is_str(raw.get("name")):
            return None, None
        node = {"name": raw["name"], **_checked(raw, VIEW_ITEM_KEYS)}
        children = raw.get("fields")
        return node, children if isinstance(children, list) else None

    def attach(node: dict, children: list) -> None:
        node["fields"] = children

    return map_view_items(items, transform, attach, keep_empty_panels=False)


def deserialize_entity_view(data: Union[str, dict, None]) -> Optional[EntityView]:
    """Rebuild a view from its interchange form, or None when it is unusable"""
    obj = _load(data, "view")
    if obj is None:
        return None

    name, title = obj.get("name"), obj.get("title")
    model_name, view_type = obj.get("modelName"), obj.get("viewType")
    if not all(_is_str(value) for value in (name, title, model_name, view_type)):
        logger.warning_ctx("Dropping view without name, title, modelName or viewType", view_name=name)
        return None

    version = obj.get(VIEW_SERIALIZER_VERSION_KEY)
    if _is_number(version) and version > VIEW_SERIALIZER_VERSION:
        logger.info(f"View {name} was written by serializer version {version}, reading as {VIEW_SERIALIZER_VERSION}")

    values: dict[str, Any] = {
        "name": name,
        "title": title,
        "model_name": model_name,
        "view_type": view_type,
        **_checked(obj, VIEW_KEYS),
    }
    items = obj.get("items")
    values["items"] = _revive_view_items(items) if isinstance(items, list) else []

    hilites = obj.get("hilites")
    if isinstance(hilites, list):
        values["hilites"] = [
            {"when": h["when"], **({"color": h["color"]} if _is_str(h.get("color")) else {})}
            for h in hilites
            if isinstance(h, dict) and _is_str(h.get("when"))
        ]

    try:
        return EntityView.model_validate(values)
    except ValidationError as e:
        logger.warning(f"Dropping invalid view {name}: {e}")
        return None
