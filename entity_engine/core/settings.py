from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # Modules scanned for BaseFieldTyper subclasses when a registry loads its typers
    FIELD_TYPER_MODULES: str = "entity_engine.field_types"

    # View defaults
    DEFAULT_VIEW_DENSITY: str = "medium"
    # Views bound to this model name are model-independent (shell, dashboard, ...)
    DEFAULT_VIEW_MODEL_NAME: str = "__default__"

    # Option labels offered for searchable boolean fields
    QUERY_BOOLEAN_TRUE_LABEL: str = "是"
    QUERY_BOOLEAN_FALSE_LABEL: str = "否"

    @property
    def field_typer_modules(self) -> list[str]:
        return [module.strip() for module in self.FIELD_TYPER_MODULES.split(",") if module.strip()]

    model_config = {
        "env_prefix": "ENTITY_ENGINE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
