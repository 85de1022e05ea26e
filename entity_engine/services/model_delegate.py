"""Model Delegate - derived behaviour of one entity model"""

from typing import Any, Optional, Type

from pydantic import BaseModel, create_model
from pydantic.errors import PydanticUserError
from pydantic_core import SchemaError

from entity_engine.core.logging_config import get_logger
from entity_engine.schemas.field_schema import FieldSchema
from entity_engine.schemas.meta import EntityField, EntityModel, EntityModelExternalConfig
from entity_engine.schemas.query import EntityQueryMeta
from entity_engine.services.field_typer_registry_service import FieldTyperRegistry
from entity_engine.services.query_meta_service import build_query_item_meta

logger = get_logger(__name__)


class ModelDelegate:
    """
    Wraps an EntityModel and computes its schema, defaults and query metadata.

    The wrapped declaration is never modified.
    """

    def __init__(self, model: EntityModel, typer_registry: FieldTyperRegistry):
        self._model = model
        self._typer_registry = typer_registry

    @property
    def model(self) -> EntityModel:
        return self._model

    @property
    def name(self) -> str:
        return self._model.name

    @property
    def title(self) -> str:
        return self._model.title

    @property
    def description(self) -> Optional[str]:
        return self._model.description

    @property
    def external(self) -> bool:
        return self._model.external

    @property
    def external_config(self) -> Optional[EntityModelExternalConfig]:
        return self._model.external_config

    @property
    def fields(self) -> list[EntityField]:
        return list(self._model.fields)

    def is_support_feature(self, feature: str) -> bool:
        """External models only support the capabilities listed in their config"""
        if not self._model.external:
            return True
        features = self._model.external_config.features if self._model.external_config else []
        return feature in features

    def find_primary_key_fields(self) -> list[EntityField]:
        return [field for field in self._model.fields if field.is_primary_key]

    def find_unique_fields(self) -> list[EntityField]:
        return [field for field in self._model.fields if field.is_unique]

    def find_searchable_fields(self) -> list[EntityField]:
        return [field for field in self._model.fields if field.searchable]

    def find_field_by_name(self, name: str) -> Optional[EntityField]:
        return next((field for field in self._model.fields if field.name == name), None)

    def find_field_by_title(self, title: str) -> Optional[EntityField]:
        return next((field for field in self._model.fields if field.title == title), None)

    @property
    def schema(self) -> Type[BaseModel]:
        """
        Pydantic model validating a record of this entity.

        Each field contributes its authored schema, else its typer's default
        schema; fields with neither are left unvalidated. Record keys are the
        field names, unknown keys are ignored. Dump validated records with
        ``model_dump(by_alias=True)`` to get the field names back.
        """
        definitions = {}
        for index, field in enumerate(self._model.fields):
            field_schema = self.get_field_schema(field)
            if field_schema is not None:
                # Field names can be any string; they only appear as aliases
                definitions[f"field_{index}"] = field_schema.as_field_definition(field.name)

        return create_model(
            self._model.name,
            __config__={"extra": "ignore"},
            **definitions,
        )

    def get_field_schema(self, field: EntityField) -> Optional[FieldSchema]:
        if field.field_schema is not None:
            try:
                field.field_schema.adapter
            except (TypeError, PydanticUserError, SchemaError) as e:
                logger.warning(f"Leaving field {self._model.name}.{field.name} unvalidated, its schema cannot be built: {e}")
                return None
            return field.field_schema

        typer = self._typer_registry.get_field_typer(field.type)
        if typer:
            return typer.get_default_schema(field)

        logger.debug(f"No schema for field {self._model.name}.{field.name} of type {field.type}")
        return None

    def to_supplemented_values(self, values: dict[str, Any]) -> dict[str, Any]:
        """
        Copy of ``values`` with defaults filled in for unset fields.

        A value counts as unset when it is falsy, so 0, False and "" supplied
        by the caller are replaced by the field default as well.
        """
        result = dict(values)
        for field in self._model.fields:
            if values.get(field.name):
                continue
            default = self.get_field_default_value(field)
            if default is not None:
                result[field.name] = default
        return result

    def get_field_default_value(self, field: EntityField) -> Any:
        if field.default_value is not None:
            return field.default_value

        typer = self._typer_registry.get_field_typer(field.type)
        if typer:
            return typer.get_default_value(field)

        return None

    def get_query_meta(self) -> EntityQueryMeta:
        item_metas = []
        for field in self.find_searchable_fields():
            meta = build_query_item_meta(field)
            if meta is not None:
                item_metas.append(meta)
        return EntityQueryMeta(query_item_metas=item_metas)

    def __repr__(self) -> str:
        return f"<ModelDelegate(name='{self.name}', fields={len(self._model.fields)})>"
