from entity_engine.core.errors import InvalidModel, InvalidView, SchemaConversionError
from entity_engine.core.events import CONFIG_UPDATED, EntityEvent, EventRegistry
from entity_engine.field_types.base_field_type import BaseFieldTyper
from entity_engine.schemas.field_schema import FieldSchema
from entity_engine.schemas.meta import (
    EntityField,
    EntityGridViewHilite,
    EntityModel,
    EntityModelExternalConfig,
    EntityView,
    EntityViewField,
)
from entity_engine.schemas.query import EntityQueryItemMeta, EntityQueryMeta, QueryOperator, QueryOption
from entity_engine.services.field_typer_registry_service import FieldTyperRegistry
from entity_engine.services.meta_registry import MetaRegistry
from entity_engine.services.model_delegate import ModelDelegate
from entity_engine.services.view_delegate import ViewDelegate

__version__ = "0.1.0"
