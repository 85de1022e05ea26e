"""View Delegate - widget resolution and item supplementation for one view"""

from typing import TYPE_CHECKING, Any, Optional

from entity_engine.core.settings import settings
from entity_engine.schemas.meta import (
    EntityField,
    EntityGridViewHilite,
    EntityView,
    EntityViewField,
)
from entity_engine.services.field_typer_registry_service import FieldTyperRegistry
from entity_engine.services.view_tree import map_view_items

if TYPE_CHECKING:
    from entity_engine.services.meta_registry import MetaRegistry

# Widgets used when no typer is registered for a field type
FALLBACK_WIDGETS = {
    "string": "textfield",
    "number": "number",
    "boolean": "switch",
    "date": "date",
    "enum": "select",
    "array": "select",
    "one_to_many": "reference",
    "many_to_many": "reference",
    "many_to_one": "select",
    "one_to_one": "select",
}
NO_WIDGET = "none"


def _attach_fields(panel: EntityViewField, fields: list) -> None:
    panel.fields = fields


class ViewDelegate:
    def __init__(
        self,
        view: EntityView,
        meta_registry: "MetaRegistry",
        typer_registry: FieldTyperRegistry,
    ):
        self._view = view
        self._meta_registry = meta_registry
        self._typer_registry = typer_registry

    @property
    def view(self) -> EntityView:
        return self._view

    @property
    def name(self) -> str:
        return self._view.name

    @property
    def title(self) -> str:
        return self._view.title

    @property
    def description(self) -> Optional[str]:
        return self._view.description

    @property
    def model_name(self) -> str:
        return self._view.model_name

    @property
    def view_type(self) -> str:
        return self._view.view_type

    @property
    def density(self) -> Optional[str]:
        return self._view.density

    @property
    def view_options(self) -> Optional[dict[str, Any]]:
        return self._view.view_options

    @property
    def items(self) -> list[EntityViewField]:
        return list(self._view.items)

    @property
    def hilites(self) -> Optional[list[EntityGridViewHilite]]:
        return self._view.hilites

    @property
    def can_edit(self) -> Optional[bool]:
        return self._view.can_edit

    @property
    def can_new(self) -> Optional[bool]:
        return self._view.can_new

    @property
    def can_delete(self) -> Optional[bool]:
        return self._view.can_delete

    def to_supplemented_view(self, view_options: Optional[dict[str, Any]] = None) -> "ViewDelegate":
        """
        Return a new delegate whose items are fully resolved.

        Field items bound to a model field inherit its title, description and
        order, default ``flex`` to 0 and get a widget. Panels keep their own
        attributes and have their children resolved, at any depth. Items
        without a matching model field are copied unchanged.
        """
        model = self._meta_registry.get_model(self._view.model_name)

        def transform(item: EntityViewField):
            if item.is_panel:
                return item.model_copy(), item.fields
            model_field = model.find_field_by_name(item.name) if model else None
            if model_field is None:
                return item.model_copy(), None
            return self._supplement_field(item, model_field), None

        items = map_view_items(self._view.items, transform, _attach_fields)

        update: dict[str, Any] = {
            "items": items,
            "density": self._view.density or settings.DEFAULT_VIEW_DENSITY,
        }
        if view_options:
            update["view_options"] = view_options

        return ViewDelegate(
            self._view.model_copy(update=update),
            self._meta_registry,
            self._typer_registry,
        )

    def _supplement_field(self, item: EntityViewField, model_field: EntityField) -> EntityViewField:
        return item.model_copy(update={
            "title": item.title or model_field.title,
            "description": item.description or model_field.description,
            "order": item.order or model_field.order or 0,
            "flex": item.flex or 0,
            "widget": self.resolve_widget(item, model_field),
        })

    def resolve_widget(self, item: EntityViewField, model_field: Optional[EntityField]) -> str:
        """Explicit widget, then the typer's default for this view type, then the fallback table"""
        if item.widget:
            return item.widget
        if model_field is None:
            return NO_WIDGET

        typer = self._typer_registry.get_field_typer(model_field.type)
        if typer:
            return typer.get_default_widget_type(self._view.view_type)

        return FALLBACK_WIDGETS.get(model_field.type, NO_WIDGET)

    def __repr__(self) -> str:
        return f"<ViewDelegate(name='{self.name}', model='{self.model_name}', type='{self.view_type}')>"
