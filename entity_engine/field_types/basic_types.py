"""Builtin field typers, one per builtin field type tag"""

from datetime import datetime, timezone
from functools import partial
from typing import Annotated, Any, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field, StrictBool, StrictFloat, StrictStr, StringConstraints

from entity_engine.field_types.base_field_type import BaseFieldTyper
from entity_engine.schemas.field_schema import FieldSchema
from entity_engine.schemas.meta import EntityField

NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]


def _option_values(field: EntityField) -> Optional[list]:
    """
    Values of typeOptions.options, unwrapping {label, value} objects.

    Returns None when the list is absent or empty.
    """
    options = (field.type_options or {}).get("options")
    if not isinstance(options, list) or not options:
        return None
    return [
        option["value"] if isinstance(option, dict) and "value" in option else option
        for option in options
    ]


def _check_choice(values: list, value: Any) -> Any:
    if value not in values:
        raise ValueError(f"{value!r} is not one of the options")
    return value


def _choice_annotation(values: list) -> Any:
    """Literal of the option values, or a membership check when they cannot be literals"""
    if all(isinstance(value, (str, int, bool)) for value in values):
        return Literal[tuple(values)]
    return Annotated[Any, AfterValidator(partial(_check_choice, values))]


class BinaryFileValue(BaseModel):
    model_config = {"populate_by_name": True}

    file_name: NonEmptyStr = Field(alias="fileName")
    file_type: NonEmptyStr = Field(alias="fileType")
    file_size: StrictFloat = Field(alias="fileSize", ge=0)
    file_path: NonEmptyStr = Field(alias="filePath")


class PartialBinaryFileValue(BaseModel):
    model_config = {"populate_by_name": True}

    file_name: Optional[NonEmptyStr] = Field(default=None, alias="fileName")
    file_type: Optional[NonEmptyStr] = Field(default=None, alias="fileType")
    file_size: Optional[StrictFloat] = Field(default=None, alias="fileSize", ge=0)
    file_path: Optional[NonEmptyStr] = Field(default=None, alias="filePath")


class StringFieldTyper(BaseFieldTyper):
    type = "string"
    title = "String"
    description = "Text field"
    widget_type = "textfield"
    default_value = ""

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        if field.is_required:
            return FieldSchema(NonEmptyStr)
        return FieldSchema(StrictStr, required=False)


class NumberFieldTyper(BaseFieldTyper):
    type = "number"
    title = "Number"
    description = "Numeric field"
    widget_type = "number"
    default_value = 0

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(StrictFloat, required=field.is_required)


class BooleanFieldTyper(BaseFieldTyper):
    type = "boolean"
    title = "Boolean"
    description = "True/false field"
    widget_type = "switch"
    default_value = False

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(StrictBool, required=field.is_required)


class DateFieldTyper(BaseFieldTyper):
    type = "date"
    title = "Date"
    description = "Date/time field"
    widget_type = "date"

    def get_default_value(self, field: EntityField) -> Any:
        return datetime.now(timezone.utc)

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        # Lax datetime: ISO strings and timestamps are coerced
        return FieldSchema(datetime, required=field.is_required)


class EnumFieldTyper(BaseFieldTyper):
    type = "enum"
    title = "Enum"
    description = "Single choice from a list of options"
    widget_type = "select"

    def get_default_value(self, field: EntityField) -> Any:
        options = (field.type_options or {}).get("options")
        if not isinstance(options, list) or not options:
            return None
        first = options[0]
        if isinstance(first, dict) and "value" in first:
            return first["value"]
        return first

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        values = _option_values(field)
        if values is None:
            # An empty choice set cannot validate anything; accept any string
            if field.is_required:
                return FieldSchema(NonEmptyStr)
            return FieldSchema(StrictStr, required=False)
        return FieldSchema(_choice_annotation(values), required=field.is_required)


class ArrayFieldTyper(BaseFieldTyper):
    type = "array"
    title = "Multi select"
    description = "Multiple choices from a list of options"
    widget_type = "select"
    default_value = []

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        values = _option_values(field)
        if values is None:
            return FieldSchema(List[StrictStr], required=field.is_required)
        return FieldSchema(List[_choice_annotation(values)], required=field.is_required)


class ManyToOneFieldTyper(BaseFieldTyper):
    type = "many_to_one"
    title = "Many to one"
    description = "Reference to a single other entity (many to one)"
    widget_type = "select"
    default_value = ""

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(StrictStr, required=field.is_required)


class OneToOneFieldTyper(BaseFieldTyper):
    type = "one_to_one"
    title = "One to one"
    description = "Reference to a single other entity (one to one)"
    widget_type = "select"
    default_value = ""

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(StrictStr, required=field.is_required)


class OneToManyFieldTyper(BaseFieldTyper):
    type = "one_to_many"
    title = "One to many"
    description = "References to several other entities (one to many)"
    widget_type = "reference"

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(List[StrictStr], required=field.is_required)


class ManyToManyFieldTyper(BaseFieldTyper):
    type = "many_to_many"
    title = "Many to many"
    description = "References to several other entities (many to many)"
    widget_type = "reference"

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(List[StrictStr], required=field.is_required)


class BinaryFieldTyper(BaseFieldTyper):
    type = "binary"
    title = "File"
    description = "Uploaded file (name, type, size, path)"
    widget_type = "file"

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        if field.is_required:
            return FieldSchema(BinaryFileValue)
        return FieldSchema(PartialBinaryFileValue, required=False)


class JsonFieldTyper(BaseFieldTyper):
    type = "json"
    title = "JSON"
    description = "Free-form JSON object"
    widget_type = "json"
    default_value = {}

    def get_default_schema(self, field: EntityField) -> FieldSchema:
        return FieldSchema(dict[str, Any], required=field.is_required)
