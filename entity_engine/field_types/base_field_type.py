"""Base class for field typers"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Optional

from entity_engine.schemas.field_schema import FieldSchema
from entity_engine.schemas.meta import EntityField
from entity_engine.schemas.query import EntityQueryItemMeta
from entity_engine.services.query_meta_service import build_query_item_meta


class BaseFieldTyper(ABC):
    """
    Strategy object for one field type tag.

    Subclasses declare their tag and defaults as class attributes and
    implement get_default_schema(). The registry discovers concrete
    subclasses by scanning the configured modules.
    """
    type: str = "base"
    title: str = "Unnamed field type"
    description: str = "Base field type without behaviour"
    widget_type: str = "none"
    default_value: Any = None

    def get_default_value(self, field: EntityField) -> Any:
        return copy.deepcopy(self.default_value)

    def get_default_widget_type(self, view_type: str) -> str:
        return self.widget_type

    @abstractmethod
    def get_default_schema(self, field: EntityField) -> FieldSchema:
        ...

    def get_query_item_meta(self, field: EntityField) -> Optional[EntityQueryItemMeta]:
        return build_query_item_meta(field)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(type='{self.type}')>"
