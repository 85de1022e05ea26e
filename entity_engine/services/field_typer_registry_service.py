"""Field Typer Registry Service - keyed collection of field type strategies"""

from typing import Dict, Iterable, Optional
import importlib
import inspect

from entity_engine.core.logging_config import get_logger
from entity_engine.core.settings import settings
from entity_engine.field_types.base_field_type import BaseFieldTyper

logger = get_logger(__name__)


class FieldTyperRegistry:
    """
    Holds one typer per field type tag.

    Builtin typers are discovered the same way host typers are:
    - each configured module is imported
    - every concrete BaseFieldTyper subclass found in it is instantiated
    - the instance is registered under its ``type`` tag

    Registering a typer for a tag that already has one replaces it.
    """

    def __init__(self, load_builtins: bool = True):
        self._field_typers: Dict[str, BaseFieldTyper] = {}
        self._loaded_modules: set[str] = set()
        if load_builtins:
            self.load_field_typers()

    def load_field_typers(self, modules: Optional[Iterable[str]] = None) -> None:
        """Import the given modules (default: FIELD_TYPER_MODULES) and register their typers"""
        if modules is None:
            modules = settings.field_typer_modules

        for module_path in modules:
            if module_path in self._loaded_modules:
                logger.debug(f"Field typers from {module_path} already loaded")
                continue

            try:
                module = importlib.import_module(module_path)
            except ImportError as e:
                logger.error(f"Failed to import field typer module {module_path}: {e}")
                raise

            count = 0
            for attr_name in dir(module):
                attr = getattr(module, attr_name)

                if (
                    inspect.isclass(attr) and
                    issubclass(attr, BaseFieldTyper) and
                    not inspect.isabstract(attr)
                ):
                    self.register_field_typer(attr())
                    count += 1

            self._loaded_modules.add(module_path)
            logger.info(f"Loaded {count} field typers from {module_path}")

    def register_field_typer(self, typer: BaseFieldTyper) -> None:
        if typer.type in self._field_typers:
            logger.debug(f"Replacing field typer for type: {typer.type}")
        self._field_typers[typer.type] = typer

    def get_field_typer(self, field_type: str) -> Optional[BaseFieldTyper]:
        """Get the typer for a type tag, None when the tag is not registered"""
        return self._field_typers.get(field_type)

    def get_field_typers(self) -> list[BaseFieldTyper]:
        return list(self._field_typers.values())

    def has_field_typer(self, field_type: str) -> bool:
        return field_type in self._field_typers
