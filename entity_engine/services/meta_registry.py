"""Meta Registry - named models and views with JSON import and export"""

import json
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from entity_engine.core.errors import InvalidModel, InvalidView
from entity_engine.core.events import CONFIG_UPDATED, EntityEvent, EventRegistry
from entity_engine.core.logging_config import LogContext, get_logger
from entity_engine.core.settings import settings
from entity_engine.schemas.meta import EntityModel, EntityView, EntityViewField
from entity_engine.services.field_typer_registry_service import FieldTyperRegistry
from entity_engine.services.meta_serializer import (
    deserialize_entity_model,
    deserialize_entity_view,
    serialize_entity_model,
    serialize_entity_view,
)
from entity_engine.services.model_delegate import ModelDelegate
from entity_engine.services.view_delegate import ViewDelegate

logger = get_logger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class MetaRegistry:
    """
    Registry of entity models and views, keyed by name.

    Registering under an existing name replaces the previous entry. Models
    and views are wrapped in delegates that share this registry's field
    typers; views look their model up here when they are supplemented.
    """

    def __init__(
        self,
        typer_registry: Optional[FieldTyperRegistry] = None,
        event_registry: Optional[EventRegistry] = None,
    ):
        self._typer_registry = typer_registry if typer_registry is not None else FieldTyperRegistry()
        self._event_registry = event_registry if event_registry is not None else EventRegistry()
        self._models: dict[str, ModelDelegate] = {}
        self._views: dict[str, ViewDelegate] = {}

    @property
    def typer_registry(self) -> FieldTyperRegistry:
        return self._typer_registry

    @property
    def event_registry(self) -> EventRegistry:
        return self._event_registry

    @property
    def models(self) -> list[ModelDelegate]:
        return list(self._models.values())

    @property
    def views(self) -> list[ViewDelegate]:
        return list(self._views.values())

    def get_model(self, name: str) -> Optional[ModelDelegate]:
        return self._models.get(name)

    def get_view(self, name: str) -> Optional[ViewDelegate]:
        return self._views.get(name)

    def cleanup(self) -> None:
        self._models.clear()
        self._views.clear()

    def register_model(self, model: Union[EntityModel, Mapping[str, Any], None]) -> ModelDelegate:
        """Register a model declaration, raising InvalidModel when it is unusable"""
        if model is None:
            raise InvalidModel("Model cannot be None")
        if not isinstance(model, EntityModel):
            try:
                model = EntityModel.model_validate(model)
            except ValidationError as e:
                raise InvalidModel(f"Invalid model declaration: {e}") from e
        if not model.name:
            raise InvalidModel("Model must have a name")

        delegate = ModelDelegate(model, self._typer_registry)
        self._models[model.name] = delegate
        logger.debug(f"Registered model {model.name}")
        return delegate

    def register_view(self, view: Union[EntityView, Mapping[str, Any], None]) -> ViewDelegate:
        """Register a view declaration, raising InvalidView when it is unusable"""
        if view is None:
            raise InvalidView("View cannot be None")
        if not isinstance(view, EntityView):
            try:
                view = EntityView.model_validate(view)
            except ValidationError as e:
                raise InvalidView(f"Invalid view declaration: {e}") from e
        if not view.model_name or not view.name or not view.view_type:
            raise InvalidView("View must have modelName, name and viewType defined")

        delegate = ViewDelegate(view, self, self._typer_registry)
        self._views[view.name] = delegate
        logger.debug(f"Registered view {view.name} for model {view.model_name}")
        return delegate

    def find_view(self, model_name: str, view_type: str, name: Optional[str] = None) -> Optional[ViewDelegate]:
        """
        Resolve the view to render for a model.

        Lookup order:
        1. the view registered as ``name``
        2. the first view registered for ``model_name`` with ``view_type``
        3. a view synthesized from the model's fields, not registered

        Returns None when none applies and the model is unknown.
        """
        if name:
            view = self._views.get(name)
            if view:
                return view

        for view in self._views.values():
            if view.model_name == model_name and view.view_type == view_type:
                return view

        model = self.get_model(model_name)
        if model is None:
            return None

        fields = sorted(model.fields, key=lambda field: field.order or 0)
        synthesized = EntityView(
            name=f"{model_name}-{view_type}",
            title=model.title,
            description=model.description,
            model_name=model.name,
            view_type=view_type,
            density="medium",
            items=[
                EntityViewField(
                    name=field.name,
                    title=field.title,
                    description=field.description,
                    order=field.order or 0,
                    flex=0,
                )
                for field in fields
            ],
        )
        logger.debug(f"Synthesized view {synthesized.name} from model fields")
        return ViewDelegate(synthesized, self, self._typer_registry)

    def to_plain_model_object(self, model: ModelDelegate) -> dict:
        return serialize_entity_model(model.model)

    def to_plain_view_object(self, view: ViewDelegate) -> dict:
        return serialize_entity_view(view.to_supplemented_view().view)

    def to_json_string(self) -> str:
        bundle = {
            "models": [serialize_entity_model(model.model) for model in self._models.values()],
            "views": [serialize_entity_view(view.view) for view in self._views.values()],
        }
        return json.dumps(bundle, ensure_ascii=False, default=_json_default)

    def from_json_string(self, text: Optional[str]) -> None:
        """
        Replace the registry contents with a bundle written by to_json_string.

        Models load before views; a view whose model did not load is skipped
        unless it is bound to the default model name. Unusable entries are
        logged and skipped. Text that does not parse leaves the registry as it
        was.
        """
        if not text:
            return

        with LogContext(operation="from_json_string"):
            try:
                bundle = json.loads(text)
            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse metadata bundle: {e}")
                return
            if not isinstance(bundle, dict):
                logger.error(f"Metadata bundle must be a JSON object, got {type(bundle).__name__}")
                return

            self.cleanup()

            models = bundle.get("models")
            if isinstance(models, list):
                for index, raw in enumerate(models):
                    model = deserialize_entity_model(raw)
                    if model is None:
                        logger.warning_ctx("Failed to load model", index=index)
                        continue
                    try:
                        self.register_model(model)
                    except InvalidModel as e:
                        logger.warning_ctx(f"Failed to load model: {e}", index=index)

            views = bundle.get("views")
            if isinstance(views, list):
                for index, raw in enumerate(views):
                    view = deserialize_entity_view(raw)
                    if view is None:
                        logger.warning_ctx("Failed to load view", index=index)
                        continue
                    if view.model_name != settings.DEFAULT_VIEW_MODEL_NAME and not self.get_model(view.model_name):
                        logger.warning(f"Skip view '{view.name}' because model '{view.model_name}' not found")
                        continue
                    try:
                        self.register_view(view)
                    except InvalidView as e:
                        logger.warning_ctx(f"Failed to load view: {e}", index=index)

            logger.info(f"Loaded {len(self._models)} models and {len(self._views)} views")

    def update_or_register_by_plain_object(self, config: Optional[Mapping[str, Any]]) -> None:
        """
        Merge interchange models and views into the registry.

        Entries replace same-named ones; nothing else is removed. When at
        least one entry was registered a ``config.updated`` event names the
        registered model and view ids.
        """
        if not isinstance(config, Mapping):
            logger.warning(f"Ignoring metadata update, expected an object, got {type(config).__name__}")
            return

        model_ids: list[str] = []
        view_ids: list[str] = []

        models = config.get("models")
        if isinstance(models, list):
            for raw in models:
                model = deserialize_entity_model(raw)
                if model is None:
                    continue
                try:
                    self.register_model(model)
                except InvalidModel as e:
                    logger.warning(f"Skipping model update: {e}")
                    continue
                model_ids.append(model.name)

        views = config.get("views")
        if isinstance(views, list):
            for raw in views:
                view = deserialize_entity_view(raw)
                if view is None:
                    continue
                try:
                    self.register_view(view)
                except InvalidView as e:
                    logger.warning(f"Skipping view update: {e}")
                    continue
                view_ids.append(view.name)

        if model_ids or view_ids:
            logger.info_ctx("Metadata updated", model_ids=model_ids, view_ids=view_ids)
            self._event_registry.emit(EntityEvent(
                name=CONFIG_UPDATED,
                parameter={"model_ids": model_ids, "view_ids": view_ids},
            ))

