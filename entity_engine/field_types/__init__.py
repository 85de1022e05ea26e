from entity_engine.field_types.base_field_type import BaseFieldTyper
from entity_engine.field_types.basic_types import (
    StringFieldTyper,
    NumberFieldTyper,
    BooleanFieldTyper,
    DateFieldTyper,
    EnumFieldTyper,
    ArrayFieldTyper,
    ManyToOneFieldTyper,
    OneToOneFieldTyper,
    OneToManyFieldTyper,
    ManyToManyFieldTyper,
    BinaryFieldTyper,
    JsonFieldTyper,
)
