"""Entity model and view declarations"""

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from entity_engine.schemas.field_schema import FieldSchema

Number = Union[int, float]
EntityViewDensity = Literal["small", "medium", "large"]

# Builtin field type tags. EntityField.type accepts any string so that hosts
# can register typers for their own tags.
FIELD_TYPES = (
    "string",
    "number",
    "boolean",
    "date",
    "enum",
    "array",
    "json",
    "binary",
    "one_to_one",
    "one_to_many",
    "many_to_many",
    "many_to_one",
)


class MetaBase(BaseModel):
    """Declarations use snake_case attributes and accept camelCase keys"""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
        "protected_namespaces": (),
    }


class EntityField(MetaBase):
    name: str
    title: str = ""
    type: str
    type_options: Optional[dict[str, Any]] = None
    description: Optional[str] = None
    default_value: Any = None
    is_required: bool = False
    is_primary_key: bool = False
    is_unique: bool = False
    editable: bool = True
    searchable: bool = False
    ref_model: Optional[str] = None
    ref_field: Optional[str] = None
    order: Optional[Number] = None

    # Authored validation rule; travels as schemaSerialized in JSON
    field_schema: Optional[FieldSchema] = Field(default=None, exclude=True)


class ExternalFieldMapping(MetaBase):
    local: str
    remote: str


class EntityModelExternalConfig(MetaBase):
    type: Optional[str] = None
    url: Optional[str] = None
    table_name: Optional[str] = None
    mappings: List[ExternalFieldMapping] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)


class EntityModel(MetaBase):
    name: str
    title: str = ""
    description: Optional[str] = None
    fields: List[EntityField] = Field(default_factory=list)
    external: bool = False
    external_config: Optional[EntityModelExternalConfig] = None

    @field_validator("fields")
    @classmethod
    def field_names_unique(cls, fields: List[EntityField]) -> List[EntityField]:
        seen = set()
        for field in fields:
            if field.name in seen:
                raise ValueError(f"Duplicate field name: {field.name}")
            seen.add(field.name)
        return fields


class EntityViewField(MetaBase):
    """A view item. With ``fields`` set it is a panel holding nested items."""
    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    widget: Optional[str] = None
    widget_options: Optional[dict[str, Any]] = None
    width: Optional[Number] = None
    flex: Optional[Literal[0, 1]] = None
    span_cols: Optional[Number] = None
    order: Optional[Number] = None
    fields: Optional[List["EntityViewField"]] = None

    hidden_when: Optional[str] = None
    show_when: Optional[str] = None
    required_when: Optional[str] = None
    read_only_when: Optional[str] = None
    disabled_when: Optional[str] = None

    # Reference widgets: {modelName, viewType} / {moudlePath, componentName}
    reference_view: Optional[dict[str, Any]] = None
    reference_comp: Optional[dict[str, Any]] = None

    @property
    def is_panel(self) -> bool:
        return self.fields is not None


class EntityGridViewHilite(MetaBase):
    when: str
    color: Optional[str] = None


class EntityView(MetaBase):
    name: str
    title: str = ""
    description: Optional[str] = None
    model_name: str
    view_type: str
    view_options: Optional[dict[str, Any]] = None
    items: List[EntityViewField] = Field(default_factory=list)
    hilites: Optional[List[EntityGridViewHilite]] = None
    can_edit: Optional[bool] = None
    can_new: Optional[bool] = None
    can_delete: Optional[bool] = None
    density: Optional[EntityViewDensity] = None


EntityViewField.model_rebuild()
