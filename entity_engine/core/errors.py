"""Exceptions raised by the metadata registry and the schema bridge"""


class InvalidModel(ValueError):
    """A model declaration is missing its identity or failed validation"""


class InvalidView(ValueError):
    """A view declaration is missing modelName, name or viewType, or failed validation"""


class SchemaConversionError(ValueError):
    """A JSON Schema document uses a shape that cannot be turned into a field schema"""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})" if self.path else self.message
