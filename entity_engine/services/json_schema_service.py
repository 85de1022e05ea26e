"""JSON Schema Service - converts field schemas to and from JSON Schema documents"""

from datetime import date, datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr, StringConstraints, create_model
from pydantic.errors import PydanticUserError
from pydantic_core import SchemaError

from entity_engine.core.errors import SchemaConversionError
from entity_engine.core.logging_config import get_logger
from entity_engine.schemas.field_schema import FieldSchema

logger = get_logger(__name__)

MAX_SCHEMA_DEPTH = 64

NULL_TYPE = type(None)

PRIMITIVE_TYPES = {
    "number": StrictFloat,
    "integer": StrictInt,
    "boolean": StrictBool,
    "null": NULL_TYPE,
}

STRING_FORMATS = {
    "date-time": datetime,
    "date": date,
}

NUMBER_CONSTRAINTS = {
    "minimum": "ge",
    "maximum": "le",
    "exclusiveMinimum": "gt",
    "exclusiveMaximum": "lt",
    "multipleOf": "multiple_of",
}

# Keywords that describe a schema without changing what it accepts
ANNOTATION_KEYWORDS = frozenset({
    "title",
    "description",
    "default",
    "examples",
    "deprecated",
    "readOnly",
    "writeOnly",
    "discriminator",
    "$schema",
    "$id",
    "$comment",
    "$defs",
    "definitions",
})

VALIDATION_KEYWORDS = frozenset({
    "type",
    "format",
    "enum",
    "const",
    "minLength",
    "maxLength",
    "pattern",
    *NUMBER_CONSTRAINTS,
    "items",
    "minItems",
    "maxItems",
    "uniqueItems",
    "properties",
    "required",
    "additionalProperties",
    "minProperties",
    "maxProperties",
})


def field_schema_to_json_schema(schema: FieldSchema) -> dict:
    """
    JSON Schema document describing what ``schema`` accepts.

    Raises SchemaConversionError when the annotation has no JSON Schema form.
    """
    try:
        return schema.json_schema()
    except (TypeError, PydanticUserError, SchemaError) as e:
        raise SchemaConversionError(f"Field schema has no JSON Schema form: {e}") from e


def json_schema_to_field_schema(document: Any) -> FieldSchema:
    """
    Build a FieldSchema from a JSON Schema document.

    A top level that admits null yields a non-required schema for the
    remaining type. Raises SchemaConversionError on anything outside the
    supported subset, including keywords that would otherwise be ignored and
    constraint values pydantic cannot compile.
    """
    if not isinstance(document, dict):
        raise SchemaConversionError(f"Expected a JSON Schema object, got {type(document).__name__}")

    converter = _JsonSchemaConverter(document)
    inner, nullable = _split_null(document)
    if inner is None:
        return FieldSchema(NULL_TYPE)

    try:
        field_schema = FieldSchema(converter.convert(inner, "#", 0), required=not nullable)
        # Compile now so a bad pattern or bound fails here rather than in a model schema
        field_schema.adapter
    except (TypeError, PydanticUserError, SchemaError) as e:
        raise SchemaConversionError(f"Schema cannot be compiled: {e}") from e
    return field_schema


def _is_null_schema(schema: Any) -> bool:
    return isinstance(schema, dict) and schema.get("type") == "null" and len(schema) == 1


def _split_null(schema: dict) -> tuple[Optional[dict], bool]:
    """Separate null from the rest of a schema: (rest or None, admits null)"""
    schema_type = schema.get("type")
    if isinstance(schema_type, list) and "null" in schema_type:
        rest = [t for t in schema_type if t != "null"]
        if not rest:
            return None, True
        return {**schema, "type": rest[0] if len(rest) == 1 else rest}, True

    if schema_type == "null" and "enum" not in schema and "const" not in schema:
        return None, True

    for keyword in ("anyOf", "oneOf"):
        members = schema.get(keyword)
        if isinstance(members, list) and any(_is_null_schema(m) for m in members):
            rest = [m for m in members if not _is_null_schema(m)]
            siblings = {k: v for k, v in schema.items() if k != keyword}
            if not rest:
                return None, True
            if len(rest) == 1:
                return {**siblings, **rest[0]}, True
            return {**siblings, keyword: rest}, True

    enum = schema.get("enum")
    if isinstance(enum, list) and None in enum:
        rest = [value for value in enum if value is not None]
        if not rest:
            return None, True
        return {**schema, "enum": rest}, True

    return schema, False


def _reject_keywords(schema: dict, allowed: frozenset, path: str) -> None:
    unknown = sorted(key for key in schema if key not in allowed)
    if unknown:
        raise SchemaConversionError(f"Unsupported keywords: {', '.join(unknown)}", path)


def _length(schema: dict, keyword: str, path: str) -> Optional[int]:
    """Value of a length keyword, which must be a non-negative integer when present"""
    if keyword not in schema:
        return None
    value = schema[keyword]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaConversionError(f"{keyword} must be a non-negative integer", path)
    return value


def _lengths(schema: dict, min_keyword: str, max_keyword: str, path: str) -> dict:
    constraints = {}
    for keyword, argument in ((min_keyword, "min_length"), (max_keyword, "max_length")):
        value = _length(schema, keyword, path)
        if value is not None:
            constraints[argument] = value
    return constraints


class _JsonSchemaConverter:
    """Turns one JSON Schema document into a pydantic type annotation"""

    def __init__(self, document: dict):
        self.document = document
        self.definitions: dict = {}
        for key in ("$defs", "definitions"):
            defs = document.get(key)
            if isinstance(defs, dict):
                self.definitions.update({f"#/{key}/{name}": d for name, d in defs.items()})
        self._model_count = 0

    def convert(self, schema: Any, path: str, depth: int) -> Any:
        if depth > MAX_SCHEMA_DEPTH:
            raise SchemaConversionError("Schema nesting is too deep", path)

        if schema is True:
            return Any
        if schema is False:
            raise SchemaConversionError("A schema that rejects everything cannot be used", path)
        if not isinstance(schema, dict):
            raise SchemaConversionError(f"Expected a schema object, got {type(schema).__name__}", path)

        for keyword in ("$ref", "allOf", "anyOf", "oneOf"):
            if keyword in schema:
                _reject_keywords(schema, ANNOTATION_KEYWORDS | {keyword}, path)
                break
        else:
            _reject_keywords(schema, ANNOTATION_KEYWORDS | VALIDATION_KEYWORDS, path)

        if "$ref" in schema:
            return self.convert(self._resolve(schema["$ref"], path), schema["$ref"], depth + 1)

        if "allOf" in schema:
            members = schema["allOf"]
            if not isinstance(members, list) or len(members) != 1:
                raise SchemaConversionError("Only single-member allOf is supported", path)
            return self.convert(members[0], f"{path}/allOf/0", depth + 1)

        for keyword in ("anyOf", "oneOf"):
            if keyword in schema:
                return self._union(schema[keyword], f"{path}/{keyword}", depth)

        if "const" in schema or "enum" in schema:
            _reject_keywords(schema, ANNOTATION_KEYWORDS | {"const", "enum", "type"}, path)
            if "const" in schema:
                return self._literal([schema["const"]], path)
            return self._literal(schema["enum"], path)

        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            members = [{**schema, "type": t} for t in schema_type]
            return self._union(members, path, depth)
        if schema_type is None:
            if "properties" in schema:
                return self._object(schema, path, depth)
            _reject_keywords(schema, ANNOTATION_KEYWORDS, path)
            return Any

        if schema_type == "string":
            return self._string(schema, path)
        if schema_type in ("number", "integer"):
            return self._number(schema, schema_type, path)
        if schema_type in PRIMITIVE_TYPES:
            return PRIMITIVE_TYPES[schema_type]
        if schema_type == "array":
            return self._array(schema, path, depth)
        if schema_type == "object":
            return self._object(schema, path, depth)

        raise SchemaConversionError(f"Unsupported type: {schema_type}", path)

    def _resolve(self, ref: Any, path: str) -> Any:
        if ref == "#":
            return self.document
        if not isinstance(ref, str) or ref not in self.definitions:
            raise SchemaConversionError(f"Unresolvable $ref: {ref}", path)
        return self.definitions[ref]

    def _union(self, members: Any, path: str, depth: int) -> Any:
        if not isinstance(members, list) or not members:
            raise SchemaConversionError("Union needs a non-empty list of schemas", path)
        annotations = [
            self.convert(member, f"{path}/{index}", depth + 1)
            for index, member in enumerate(members)
        ]
        if len(annotations) == 1:
            return annotations[0]
        return Union[tuple(annotations)]

    def _literal(self, values: Any, path: str) -> Any:
        if not isinstance(values, list) or not values:
            raise SchemaConversionError("enum needs a non-empty list of values", path)
        for value in values:
            if value is not None and not isinstance(value, (str, int, bool)):
                raise SchemaConversionError(f"Unsupported enum value: {value!r}", path)
        return Literal[tuple(values)]

    def _string(self, schema: dict, path: str) -> Any:
        string_format = schema.get("format")
        if string_format is not None:
            if string_format not in STRING_FORMATS:
                raise SchemaConversionError(f"Unsupported string format: {string_format}", path)
            return STRING_FORMATS[string_format]

        constraints = _lengths(schema, "minLength", "maxLength", path)
        if "pattern" in schema:
            if not isinstance(schema["pattern"], str):
                raise SchemaConversionError("pattern must be a string", path)
            constraints["pattern"] = schema["pattern"]
        if not constraints:
            return StrictStr
        return Annotated[str, StringConstraints(strict=True, **constraints)]

    def _number(self, schema: dict, schema_type: str, path: str) -> Any:
        base = StrictInt if schema_type == "integer" else StrictFloat
        constraints = {}
        for keyword, argument in NUMBER_CONSTRAINTS.items():
            if keyword not in schema:
                continue
            value = schema[keyword]
            # Draft 4 spells exclusive bounds as booleans next to minimum/maximum
            if isinstance(value, bool) and keyword.startswith("exclusive"):
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SchemaConversionError(f"{keyword} must be a number", path)
            constraints[argument] = value

        if schema.get("exclusiveMinimum") is True and "ge" in constraints:
            constraints["gt"] = constraints.pop("ge")
        if schema.get("exclusiveMaximum") is True and "le" in constraints:
            constraints["lt"] = constraints.pop("le")

        if not constraints:
            return base
        return Annotated[base, Field(**constraints)]

    def _array(self, schema: dict, path: str, depth: int) -> Any:
        if "prefixItems" in schema or isinstance(schema.get("items"), list):
            raise SchemaConversionError("Tuple arrays are not supported", path)

        if schema.get("uniqueItems", False) is not False:
            raise SchemaConversionError("uniqueItems is not supported", path)

        item = self.convert(schema.get("items", True), f"{path}/items", depth + 1)
        constraints = _lengths(schema, "minItems", "maxItems", path)
        if not constraints:
            return List[item]
        return Annotated[List[item], Field(**constraints)]

    def _object(self, schema: dict, path: str, depth: int) -> Any:
        properties = schema.get("properties")
        additional = schema.get("additionalProperties", True)

        if not properties:
            constraints = _lengths(schema, "minProperties", "maxProperties", path)
            if additional is True or additional == {}:
                mapping = dict[str, Any]
            elif additional is False:
                mapping = dict[str, Any]
                constraints["max_length"] = 0
            else:
                mapping = dict[str, self.convert(additional, f"{path}/additionalProperties", depth + 1)]
            if not constraints:
                return mapping
            return Annotated[mapping, Field(**constraints)]

        if not isinstance(properties, dict):
            raise SchemaConversionError("properties must be an object", path)
        if "minProperties" in schema or "maxProperties" in schema:
            raise SchemaConversionError("minProperties and maxProperties need an object without properties", path)
        if not isinstance(additional, bool) and additional != {}:
            raise SchemaConversionError("additionalProperties next to properties must be a boolean", path)

        required = schema.get("required") or []
        if not isinstance(required, list) or not all(isinstance(key, str) for key in required):
            raise SchemaConversionError("required must be a list of property names", path)
        required = set(required)
        definitions = {}
        for index, (key, prop) in enumerate(properties.items()):
            prop_path = f"{path}/properties/{key}"
            inner, nullable = _split_null(prop) if isinstance(prop, dict) else (prop, False)
            annotation = NULL_TYPE if inner is None else self.convert(inner, prop_path, depth + 1)
            if nullable and inner is not None:
                annotation = Optional[annotation]

            if key in required:
                definitions[f"field_{index}"] = (annotation, Field(alias=key))
            else:
                definitions[f"field_{index}"] = (Optional[annotation], Field(default=None, alias=key))

        self._model_count += 1
        model_name = schema.get("title") if isinstance(schema.get("title"), str) else f"Object{self._model_count}"
        return create_model(
            model_name,
            __config__={"extra": "forbid" if additional is False else "allow"},
            **definitions,
        )
