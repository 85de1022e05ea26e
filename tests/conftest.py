import pytest
from faker import Faker

from entity_engine.core.events import EventRegistry
from entity_engine.schemas.meta import EntityField, EntityModel
from entity_engine.services.field_typer_registry_service import FieldTyperRegistry
from entity_engine.services.meta_registry import MetaRegistry

fake = Faker()


@pytest.fixture
def typer_registry() -> FieldTyperRegistry:
    """Typer registry loaded with the builtin field typers."""
    return FieldTyperRegistry()


@pytest.fixture
def event_registry() -> EventRegistry:
    return EventRegistry()


@pytest.fixture
def meta_registry(typer_registry: FieldTyperRegistry, event_registry: EventRegistry) -> MetaRegistry:
    """Empty metadata registry sharing the typer and event registries."""
    return MetaRegistry(typer_registry=typer_registry, event_registry=event_registry)


@pytest.fixture
def product_model() -> EntityModel:
    """Product model: required name, price and a searchable active flag."""
    return EntityModel(
        name="Product",
        title="Product",
        description=fake.sentence(),
        fields=[
            EntityField(name="name", title="Name", type="string", is_required=True, order=1),
            EntityField(name="price", title="Price", type="number", order=2),
            EntityField(name="active", title="Active", type="boolean", searchable=True, order=3),
        ],
    )


@pytest.fixture
def registered_product(meta_registry: MetaRegistry, product_model: EntityModel):
    return meta_registry.register_model(product_model)


@pytest.fixture
def sample_field() -> EntityField:
    """A string field with a random name."""
    return EntityField(
        name=fake.word(),
        title=fake.word().title(),
        type="string",
        description=fake.sentence(),
    )
