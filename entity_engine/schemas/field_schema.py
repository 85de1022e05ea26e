"""Field Schema - validation rule for a single entity field"""

from typing import Any, Optional

from pydantic import Field, TypeAdapter, ValidationError


class FieldSchema:
    """
    Validation rule for one field, backed by a pydantic type annotation.

    A required schema rejects ``None``; an optional one accepts ``None`` and
    lets the key be absent when folded into a model schema.
    """

    def __init__(self, annotation: Any, required: bool = True):
        self.annotation = annotation
        self.required = required
        self._adapter: TypeAdapter | None = None

    @property
    def validation_type(self) -> Any:
        return self.annotation if self.required else Optional[self.annotation]

    @property
    def adapter(self) -> TypeAdapter:
        if self._adapter is None:
            self._adapter = TypeAdapter(self.validation_type)
        return self._adapter

    def validate(self, value: Any) -> Any:
        """Validate and return the coerced value, raising pydantic.ValidationError"""
        return self.adapter.validate_python(value)

    def is_valid(self, value: Any) -> bool:
        try:
            self.validate(value)
        except ValidationError:
            return False
        return True

    def json_schema(self) -> dict:
        return self.adapter.json_schema()

    def as_field_definition(self, alias: str) -> tuple:
        """Field definition tuple for pydantic.create_model, keyed by ``alias``"""
        if self.required:
            return (self.annotation, Field(alias=alias))
        return (Optional[self.annotation], Field(default=None, alias=alias))

    def __repr__(self) -> str:
        return f"<FieldSchema(annotation={self.annotation!r}, required={self.required})>"
